"""Prediction pipeline for classifying ad hoc text with the trained model.

Input text goes through exactly the tokenizer and sequence encoder used for
the datasets, against the run's vocabulary, so indices never diverge from
what the classifier was trained on. The vocabulary is only read.
"""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from guided_text_pipeline.components.model_trainer import TextClassifier
from guided_text_pipeline.components.sequence_encoder import encode_text
from guided_text_pipeline.entity.artifact_entity import Vocabulary
from guided_text_pipeline.exception import PredictionFailure
from guided_text_pipeline.logging.logger import logger


class PredictionPipeline:
    """Run the trained classifier on raw text."""

    def __init__(
        self,
        classifier: TextClassifier,
        vocabulary: Vocabulary,
        max_length: int,
        threshold: float = 0.5,
    ) -> None:
        self._classifier = classifier
        self._vocabulary = vocabulary
        self._max_length = max_length
        self._threshold = threshold

    def encode(self, texts: Sequence[str]) -> np.ndarray:
        return np.asarray(
            [encode_text(text, self._vocabulary, self._max_length) for text in texts],
            dtype=np.int64,
        ).reshape(len(texts), self._max_length)

    def predict(self, texts: Sequence[str]) -> List[dict]:
        """Run prediction on a batch of texts.

        Args:
            texts: A sequence of raw text strings.

        Returns:
            One dictionary per input text, each containing:
                - ``text``: the input text
                - ``label``: 1 when ``score`` reaches the threshold, else 0
                - ``score``: probability of the positive class

        Raises:
            PredictionFailure: A text is blank or the classifier raised.
        """

        if isinstance(texts, str):
            texts = [texts]

        if not texts:
            return []

        if any(not isinstance(text, str) or not text.strip() for text in texts):
            raise PredictionFailure("Please enter some text to classify.")

        logger.info("Running prediction on %d texts", len(texts))

        features = self.encode(texts)
        try:
            probabilities = np.asarray(self._classifier.predict(features)).reshape(-1)
        except Exception as e:
            logger.error(f"Prediction failed: {e}")
            raise PredictionFailure(str(e)) from e

        results: List[dict] = []
        for text, score in zip(texts, probabilities.tolist()):
            results.append({
                "text": text,
                "label": int(score >= self._threshold),
                "score": float(score),
            })

        return results
