"""Guided, staged preparation of labeled text datasets for binary classification."""

__version__ = "0.1.0"
