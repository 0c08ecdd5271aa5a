# ============================================================================
# src/guided_text_pipeline/pipeline/stage_06_model_trainer.py
# ============================================================================
"""Model creation and training pipeline stage."""

import asyncio
from typing import Dict, List, Mapping, Optional

from guided_text_pipeline.components.model_trainer import (
    ClassifierFactory,
    EpochCallback,
    ModelTrainer,
    TextClassifier,
)
from guided_text_pipeline.entity.artifact_entity import DatasetRole, EncodedDataset
from guided_text_pipeline.entity.config_entity import ModelTrainerConfig
from guided_text_pipeline.exception import PipelineError, TrainingFailure
from guided_text_pipeline.logging.logger import logger


class ModelTrainerPipeline:
    """Pipeline stage for model creation and training."""

    def __init__(self, config: ModelTrainerConfig, classifier_factory: ClassifierFactory):
        self.stage_name = "Model Training"
        self.config = config
        self.classifier_factory = classifier_factory

    def create(self, vocab_size: int, max_length: int) -> TextClassifier:
        """Instantiate a fresh classifier sized for the current vocabulary."""
        try:
            return self.classifier_factory(vocab_size, max_length, self.config)
        except Exception as e:
            logger.error(f"Model creation failed: {e}")
            raise TrainingFailure(f"Model creation failed: {e}") from e

    async def run(
        self,
        classifier: TextClassifier,
        encoded: Mapping[DatasetRole, EncodedDataset],
        on_epoch: Optional[EpochCallback] = None,
    ) -> List[Dict[str, float]]:
        """Fit on the training role, validating on the validation role, off the event loop."""
        try:
            logger.info(f">>>>>> Stage: {self.stage_name} started <<<<<<")

            trainer = ModelTrainer(config=self.config)
            history = await asyncio.to_thread(
                trainer.train,
                classifier,
                encoded[DatasetRole.TRAINING],
                encoded[DatasetRole.VALIDATION],
                on_epoch,
            )

            logger.info(f">>>>>> Stage: {self.stage_name} completed <<<<<<\n")
            return history

        except PipelineError as e:
            logger.error(f">>>>>> Stage: {self.stage_name} failed <<<<<<: {e}")
            raise
        except Exception as e:
            logger.error(f">>>>>> Stage: {self.stage_name} failed <<<<<<")
            logger.exception(e)
            raise
