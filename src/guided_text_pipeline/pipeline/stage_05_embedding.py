# ============================================================================
# src/guided_text_pipeline/pipeline/stage_05_embedding.py
# ============================================================================
"""Pipeline stage for encoding every role into padded integer sequences."""

from typing import Dict, List, Mapping

from guided_text_pipeline.components.sequence_encoder import encode_dataset
from guided_text_pipeline.entity.artifact_entity import (
    DatasetRole,
    EncodedDataset,
    NormalizedRow,
    Vocabulary,
)
from guided_text_pipeline.entity.config_entity import EmbeddingConfig
from guided_text_pipeline.exception import EncodingError, PipelineError
from guided_text_pipeline.logging.logger import logger


class EmbeddingPipeline:
    """Encodes all three roles against one vocabulary."""

    def __init__(self, config: EmbeddingConfig):
        self.stage_name = "Sequence Encoding"
        self.config = config

    def run(
        self,
        normalized: Mapping[DatasetRole, List[NormalizedRow]],
        vocabulary: Vocabulary,
    ) -> Dict[DatasetRole, EncodedDataset]:
        try:
            logger.info(f">>>>>> Stage: {self.stage_name} started <<<<<<")

            missing = [role.value for role in DatasetRole if role not in normalized]
            if missing:
                raise EncodingError(f"No normalized rows for: {missing}")

            encoded = {
                role: encode_dataset(role, normalized[role], vocabulary, int(self.config.max_length))
                for role in DatasetRole
            }

            logger.info(f">>>>>> Stage: {self.stage_name} completed <<<<<<\n")
            return encoded

        except PipelineError as e:
            logger.error(f">>>>>> Stage: {self.stage_name} failed <<<<<<: {e}")
            raise
        except Exception as e:
            logger.error(f">>>>>> Stage: {self.stage_name} failed <<<<<<")
            logger.exception(e)
            raise EncodingError(str(e)) from e
