# ============================================================================
# src/guided_text_pipeline/entity/config_entity.py
# ============================================================================
"""Configuration entities for the guided text pipeline."""

from dataclasses import dataclass, field
from typing import Dict, Optional

from guided_text_pipeline.constants import DEFAULT_MAX_LENGTH


def _default_required_files() -> Dict[str, str]:
    return {
        "training": "train.csv",
        "testing": "test.csv",
        "validation": "validation.csv",
    }


# ==============================
# File Selection
# ==============================
@dataclass(frozen=True)
class FileSelectionConfig:
    """Fixed, case-sensitive file name expected for each dataset role."""
    required_files: Dict[str, str] = field(default_factory=_default_required_files)


# ==============================
# Data Loader
# ==============================
@dataclass(frozen=True)
class DataLoaderConfig:
    """Configuration for the CSV parsing and inspection stages."""
    encoding: str = "utf-8"
    preview_rows: int = 5


# ==============================
# Data Preprocessing
# ==============================
@dataclass(frozen=True)
class DataPreprocessingConfig:
    """Configuration for column inference and row normalization."""
    text_column: str = "text"
    label_column: str = "label"


# ==============================
# Embedding
# ==============================
@dataclass(frozen=True)
class EmbeddingConfig:
    """Configuration for fixed-length sequence encoding."""
    max_length: int = DEFAULT_MAX_LENGTH


# ==============================
# Model Trainer
# ==============================
@dataclass(frozen=True)
class ModelTrainerConfig:
    """Configuration for the default classifier and its training loop."""
    embedding_dim: int = 16
    hidden_units: int = 24
    learning_rate: float = 1e-3
    batch_size: int = 32
    epochs: int = 10
    seed: Optional[int] = 42


# ==============================
# Model Evaluation
# ==============================
@dataclass(frozen=True)
class ModelEvaluationConfig:
    """Configuration for evaluation and prediction."""
    threshold: float = 0.5
