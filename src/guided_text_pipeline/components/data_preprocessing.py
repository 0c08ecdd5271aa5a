# ============================================================================
# src/guided_text_pipeline/components/data_preprocessing.py
# ============================================================================
"""Vocabulary construction from the normalized training rows."""

from typing import Dict, Iterable

from guided_text_pipeline.components.tokenizer import tokenize
from guided_text_pipeline.constants import OOV_INDEX, OOV_TOKEN, PAD_INDEX, PAD_TOKEN
from guided_text_pipeline.entity.artifact_entity import NormalizedRow, Vocabulary
from guided_text_pipeline.logging.logger import logger


class VocabularyBuilder:
    """Scans training rows once and numbers tokens in first-encounter order."""

    def build(self, rows: Iterable[NormalizedRow]) -> Vocabulary:
        """Build a fresh vocabulary.

        Args:
            rows: Normalized rows of the training role only.

        Returns:
            Vocabulary with ``<PAD>``=0, ``<OOV>``=1 and every distinct token
            numbered from 2 by row order, then token order within a row.
        """
        token_to_index: Dict[str, int] = {PAD_TOKEN: PAD_INDEX, OOV_TOKEN: OOV_INDEX}

        row_count = 0
        for row in rows:
            row_count += 1
            for token in tokenize(row.text):
                if token not in token_to_index:
                    token_to_index[token] = len(token_to_index)

        vocabulary = Vocabulary(token_to_index)
        logger.info(
            f"Vocabulary built from {row_count} training rows: "
            f"{len(vocabulary)} entries ({len(vocabulary) - 2} distinct tokens)"
        )
        return vocabulary
