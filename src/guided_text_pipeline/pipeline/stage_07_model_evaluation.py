# ============================================================================
# src/guided_text_pipeline/pipeline/stage_07_model_evaluation.py
# ============================================================================
"""Pipeline stage for model evaluation."""

import asyncio
from typing import Any, Dict

from guided_text_pipeline.components.model_evaluation import ModelEvaluation
from guided_text_pipeline.components.model_trainer import TextClassifier
from guided_text_pipeline.entity.artifact_entity import EncodedDataset
from guided_text_pipeline.entity.config_entity import ModelEvaluationConfig
from guided_text_pipeline.exception import EvaluationFailure, PipelineError
from guided_text_pipeline.logging.logger import logger


class ModelEvaluationPipeline:
    """Runs model evaluation stage."""

    def __init__(self, config: ModelEvaluationConfig):
        self.stage_name = "Model Evaluation"
        self.config = config

    async def run(self, classifier: TextClassifier, test_data: EncodedDataset) -> Dict[str, Any]:
        try:
            logger.info(f">>>>>> Stage: {self.stage_name} started <<<<<<")

            evaluator = ModelEvaluation(config=self.config)
            metrics = await asyncio.to_thread(evaluator.evaluate, classifier, test_data)

            logger.info(f"Evaluation metrics: {metrics}")
            logger.info(f">>>>>> Stage: {self.stage_name} completed <<<<<<\n")
            return metrics

        except PipelineError as e:
            logger.error(f">>>>>> Stage: {self.stage_name} failed <<<<<<: {e}")
            raise
        except Exception as e:
            logger.error(f">>>>>> Stage: {self.stage_name} failed <<<<<<")
            logger.exception(e)
            raise EvaluationFailure(str(e)) from e
