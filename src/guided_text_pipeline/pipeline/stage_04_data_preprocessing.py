# ============================================================================
# src/guided_text_pipeline/pipeline/stage_04_data_preprocessing.py
# ============================================================================
"""Data preprocessing pipeline stage: normalization and vocabulary."""

from typing import Dict, List, Mapping, Tuple

from guided_text_pipeline.components.data_preprocessing import VocabularyBuilder
from guided_text_pipeline.components.data_validation import RowNormalizer
from guided_text_pipeline.entity.artifact_entity import (
    ColumnMapping,
    DatasetRole,
    NormalizationReport,
    NormalizedRow,
    ParsedTable,
    Vocabulary,
)
from guided_text_pipeline.exception import EmptyDatasetError, PipelineError
from guided_text_pipeline.logging.logger import logger


class DataPreprocessingPipeline:
    """Pipeline for row normalization and vocabulary construction."""

    def __init__(self, normalizer: RowNormalizer, builder: VocabularyBuilder):
        self.stage_name = "Data Preprocessing"
        self.normalizer = normalizer
        self.builder = builder

    def run(
        self,
        tables: Mapping[DatasetRole, ParsedTable],
        mapping: ColumnMapping,
    ) -> Tuple[Dict[DatasetRole, List[NormalizedRow]], NormalizationReport, Vocabulary]:
        """Normalize every role and build the vocabulary from training rows.

        Raises:
            EmptyDatasetError: Some role has no row left after normalization.
        """
        try:
            logger.info(f">>>>>> Stage: {self.stage_name} started <<<<<<")

            normalized, report = self.normalizer.normalize(tables, mapping)
            empty_roles = [role.value for role in DatasetRole if not normalized.get(role)]
            if empty_roles:
                raise EmptyDatasetError(
                    empty_roles, reason="have no valid rows after cleaning (need text and a 0/1 label)"
                )

            vocabulary = self.builder.build(normalized[DatasetRole.TRAINING])

            logger.info(f">>>>>> Stage: {self.stage_name} completed <<<<<<\n")
            return normalized, report, vocabulary

        except PipelineError as e:
            logger.error(f">>>>>> Stage: {self.stage_name} failed <<<<<<: {e}")
            raise
        except Exception as e:
            logger.error(f">>>>>> Stage: {self.stage_name} failed <<<<<<")
            logger.exception(e)
            raise
