# ============================================================================
# src/guided_text_pipeline/components/sequence_encoder.py
# ============================================================================
"""Fixed-length integer encoding used for datasets and single predictions."""

from typing import List, Sequence

import numpy as np

from guided_text_pipeline.components.tokenizer import tokenize
from guided_text_pipeline.constants import DEFAULT_MAX_LENGTH, PAD_INDEX
from guided_text_pipeline.entity.artifact_entity import (
    DatasetRole,
    EncodedDataset,
    NormalizedRow,
    Vocabulary,
)
from guided_text_pipeline.exception import EncodingError
from guided_text_pipeline.logging.logger import logger


def encode_tokens(
    tokens: Sequence[str],
    vocabulary: Vocabulary,
    max_length: int = DEFAULT_MAX_LENGTH,
) -> List[int]:
    """Map tokens to indices, keep the first ``max_length`` and right-pad with 0."""
    if isinstance(max_length, bool) or not isinstance(max_length, int) or max_length < 1:
        raise ValueError(f"max_length must be a positive integer, got {max_length!r}")

    indices = [vocabulary.lookup(token) for token in tokens[:max_length]]
    return indices + [PAD_INDEX] * (max_length - len(indices))


def encode_text(
    text: str,
    vocabulary: Vocabulary,
    max_length: int = DEFAULT_MAX_LENGTH,
) -> List[int]:
    return encode_tokens(tokenize(text), vocabulary, max_length)


def encode_dataset(
    role: DatasetRole,
    rows: Sequence[NormalizedRow],
    vocabulary: Vocabulary,
    max_length: int = DEFAULT_MAX_LENGTH,
) -> EncodedDataset:
    """Encode every row of one role into ``[n, L]`` features and ``[n, 1]`` labels.

    Raises:
        EncodingError: Any row could not be encoded, or the feature and label
            arrays disagree in length.
    """
    try:
        sequences = np.asarray(
            [encode_text(row.text, vocabulary, max_length) for row in rows],
            dtype=np.int64,
        ).reshape(len(rows), max_length)
        labels = np.asarray([row.label for row in rows], dtype=np.int64).reshape(-1, 1)
        encoded = EncodedDataset(role=DatasetRole(role), sequences=sequences, labels=labels)
    except (AttributeError, TypeError, ValueError) as e:
        raise EncodingError(f"Failed to encode {DatasetRole(role).value} rows: {e}") from e

    logger.info(
        f"Encoded {encoded.role.value}: features {encoded.sequences.shape}, labels {encoded.labels.shape}"
    )
    return encoded
