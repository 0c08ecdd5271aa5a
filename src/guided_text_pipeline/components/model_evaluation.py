# ============================================================================
# src/guided_text_pipeline/components/model_evaluation.py
# ============================================================================
"""Evaluates the trained classifier on the encoded testing data."""

from typing import Any, Dict

import numpy as np
from sklearn.metrics import (
    accuracy_score,
    confusion_matrix,
    f1_score,
    precision_score,
    recall_score,
)

from guided_text_pipeline.components.model_trainer import TextClassifier
from guided_text_pipeline.entity.artifact_entity import EncodedDataset
from guided_text_pipeline.entity.config_entity import ModelEvaluationConfig
from guided_text_pipeline.exception import EvaluationFailure
from guided_text_pipeline.logging.logger import logger


class ModelEvaluation:
    """Collects the classifier's loss/accuracy plus thresholded sklearn metrics."""

    def __init__(self, config: ModelEvaluationConfig):
        self.config = config

    def evaluate(self, classifier: TextClassifier, test_data: EncodedDataset) -> Dict[str, Any]:
        """Run evaluation on ``test_data``.

        Raises:
            EvaluationFailure: The classifier raised, or its scores could not be
                scored against the labels; the message is kept as is.
        """
        logger.info(f"Starting model evaluation on {len(test_data)} samples...")
        try:
            loss, accuracy = classifier.evaluate(test_data.sequences, test_data.labels)
            probabilities = np.asarray(classifier.predict(test_data.sequences)).reshape(-1)

            labels = test_data.labels.reshape(-1)
            preds = (probabilities >= self.config.threshold).astype(np.int64)

            metrics: Dict[str, Any] = {
                "loss": float(loss),
                "accuracy": float(accuracy),
                "threshold_accuracy": float(accuracy_score(labels, preds)),
                "precision": float(precision_score(labels, preds, zero_division=0)),
                "recall": float(recall_score(labels, preds, zero_division=0)),
                "f1": float(f1_score(labels, preds, zero_division=0)),
                "confusion_matrix": confusion_matrix(labels, preds, labels=[0, 1]).tolist(),
            }
        except Exception as e:
            logger.error(f"Model evaluation failed: {e}")
            raise EvaluationFailure(str(e)) from e

        logger.info(f"Metrics: {metrics}")
        logger.info("Model evaluation completed successfully.")
        return metrics
