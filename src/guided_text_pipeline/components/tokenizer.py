# ============================================================================
# src/guided_text_pipeline/components/tokenizer.py
# ============================================================================
"""Whitespace tokenizer shared by vocabulary building, encoding and prediction."""

import re
from typing import List

PUNCTUATION = ".,/#!$%^&*;:{}=-_`~()"

_PUNCTUATION_TABLE = str.maketrans("", "", PUNCTUATION)
_WHITESPACE = re.compile(r"\s+")


def tokenize(text: str) -> List[str]:
    """Lowercase ``text``, delete punctuation and split on whitespace runs.

    >>> tokenize("Hello, World!")
    ['hello', 'world']
    """
    cleaned = text.lower().translate(_PUNCTUATION_TABLE)
    return [token for token in _WHITESPACE.split(cleaned) if token]
