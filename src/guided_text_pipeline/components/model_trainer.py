# ============================================================================
# src/guided_text_pipeline/components/model_trainer.py
# ============================================================================
"""Default binary text classifier and the training component that drives it.

The pipeline only relies on the ``TextClassifier`` protocol: ``fit``,
``evaluate`` and ``predict`` over encoded integer features ``[n, L]`` and
labels ``[n, 1]``. ``TorchTextClassifier`` is the implementation created
when no other factory is supplied.
"""

from typing import Callable, Dict, List, Optional, Protocol, Tuple

import numpy as np
import torch
from torch import nn
from torch.utils.data import DataLoader, TensorDataset
from tqdm import tqdm

from guided_text_pipeline.constants import PAD_INDEX
from guided_text_pipeline.entity.artifact_entity import EncodedDataset
from guided_text_pipeline.entity.config_entity import ModelTrainerConfig
from guided_text_pipeline.exception import TrainingFailure
from guided_text_pipeline.logging.logger import logger

EpochCallback = Callable[[int, Dict[str, float]], None]


class TextClassifier(Protocol):
    def fit(
        self,
        features: np.ndarray,
        labels: np.ndarray,
        batch_size: int,
        epochs: int,
        validation_data: Optional[Tuple[np.ndarray, np.ndarray]] = None,
        on_epoch: Optional[EpochCallback] = None,
    ) -> List[Dict[str, float]]:
        ...

    def evaluate(self, features: np.ndarray, labels: np.ndarray) -> Tuple[float, float]:
        ...

    def predict(self, features: np.ndarray) -> np.ndarray:
        ...


ClassifierFactory = Callable[[int, int, ModelTrainerConfig], TextClassifier]


class EmbeddingAverageNet(nn.Module):
    """Embedding -> masked average pooling -> dense ReLU -> single logit."""

    def __init__(self, vocab_size: int, embedding_dim: int, hidden_units: int):
        super().__init__()
        self.embedding = nn.Embedding(vocab_size, embedding_dim, padding_idx=PAD_INDEX)
        self.hidden = nn.Linear(embedding_dim, hidden_units)
        self.output = nn.Linear(hidden_units, 1)

    def forward(self, input_ids: torch.Tensor) -> torch.Tensor:
        mask = (input_ids != PAD_INDEX).unsqueeze(-1).float()
        embedded = self.embedding(input_ids) * mask
        pooled = embedded.sum(dim=1) / mask.sum(dim=1).clamp(min=1.0)
        return self.output(torch.relu(self.hidden(pooled))).squeeze(-1)


class TorchTextClassifier:
    """PyTorch implementation of the ``TextClassifier`` protocol."""

    def __init__(self, vocab_size: int, max_length: int, config: ModelTrainerConfig):
        self.vocab_size = vocab_size
        self.max_length = max_length
        self.config = config

        if config.seed is not None:
            torch.manual_seed(config.seed)

        self.device = torch.device("cuda" if torch.cuda.is_available() else "cpu")
        self.model = EmbeddingAverageNet(vocab_size, config.embedding_dim, config.hidden_units)
        self.model.to(self.device)
        self.optimizer = torch.optim.Adam(self.model.parameters(), lr=float(config.learning_rate))
        self.loss_fn = nn.BCEWithLogitsLoss()

        logger.info(
            f"Created classifier: vocab_size={vocab_size}, max_length={max_length}, "
            f"embedding_dim={config.embedding_dim}, hidden_units={config.hidden_units} "
            f"on {self.device}"
        )

    def _features(self, features: np.ndarray) -> torch.Tensor:
        features = np.asarray(features)
        if features.ndim != 2 or features.shape[1] != self.max_length:
            raise ValueError(
                f"Expected features of shape [n, {self.max_length}], got {features.shape}"
            )
        return torch.as_tensor(features, dtype=torch.long)

    @staticmethod
    def _labels(labels: np.ndarray) -> torch.Tensor:
        return torch.as_tensor(np.asarray(labels).reshape(-1), dtype=torch.float32)

    def fit(
        self,
        features: np.ndarray,
        labels: np.ndarray,
        batch_size: int,
        epochs: int,
        validation_data: Optional[Tuple[np.ndarray, np.ndarray]] = None,
        on_epoch: Optional[EpochCallback] = None,
    ) -> List[Dict[str, float]]:
        x, y = self._features(features), self._labels(labels)
        if len(x) != len(y):
            raise ValueError(f"{len(x)} feature rows but {len(y)} labels")

        generator = torch.Generator()
        if self.config.seed is not None:
            generator.manual_seed(self.config.seed)
        loader = DataLoader(
            TensorDataset(x, y), batch_size=int(batch_size), shuffle=True, generator=generator
        )

        history: List[Dict[str, float]] = []
        for epoch in range(1, int(epochs) + 1):
            self.model.train()
            total_loss, correct, seen = 0.0, 0, 0

            for batch_x, batch_y in tqdm(loader, desc=f"Epoch {epoch}/{epochs}", leave=False):
                batch_x, batch_y = batch_x.to(self.device), batch_y.to(self.device)
                self.optimizer.zero_grad()
                logits = self.model(batch_x)
                loss = self.loss_fn(logits, batch_y)
                loss.backward()
                self.optimizer.step()

                total_loss += loss.item() * len(batch_y)
                correct += ((logits >= 0).float() == batch_y).sum().item()
                seen += len(batch_y)

            logs = {"loss": total_loss / max(seen, 1), "accuracy": correct / max(seen, 1)}
            if validation_data is not None:
                val_loss, val_accuracy = self.evaluate(*validation_data)
                logs.update({"val_loss": val_loss, "val_accuracy": val_accuracy})

            history.append(logs)
            if on_epoch is not None:
                on_epoch(epoch, logs)

        return history

    def evaluate(self, features: np.ndarray, labels: np.ndarray) -> Tuple[float, float]:
        x, y = self._features(features).to(self.device), self._labels(labels).to(self.device)
        self.model.eval()
        with torch.no_grad():
            logits = self.model(x)
            loss = self.loss_fn(logits, y).item()
            accuracy = ((logits >= 0).float() == y).float().mean().item()
        return float(loss), float(accuracy)

    def predict(self, features: np.ndarray) -> np.ndarray:
        """Positive-class probability per row, shape ``[n]``."""
        x = self._features(features).to(self.device)
        self.model.eval()
        with torch.no_grad():
            probabilities = torch.sigmoid(self.model(x))
        return probabilities.cpu().numpy()


def build_torch_classifier(vocab_size: int, max_length: int, config: ModelTrainerConfig) -> TextClassifier:
    return TorchTextClassifier(vocab_size, max_length, config)


class ModelTrainer:
    """Handles classifier fitting on the encoded training data."""

    def __init__(self, config: ModelTrainerConfig):
        self.config = config

    def train(
        self,
        classifier: TextClassifier,
        train_data: EncodedDataset,
        validation_data: Optional[EncodedDataset] = None,
        on_epoch: Optional[EpochCallback] = None,
    ) -> List[Dict[str, float]]:
        """Fit ``classifier`` and return its per-epoch history.

        Raises:
            TrainingFailure: The classifier raised; its message is kept as is.
        """
        logger.info(
            f"Starting model training: {len(train_data)} samples, "
            f"batch_size={self.config.batch_size}, epochs={self.config.epochs}"
        )
        validation = None
        if validation_data is not None:
            validation = (validation_data.sequences, validation_data.labels)

        try:
            history = classifier.fit(
                train_data.sequences,
                train_data.labels,
                batch_size=self.config.batch_size,
                epochs=self.config.epochs,
                validation_data=validation,
                on_epoch=on_epoch,
            )
        except Exception as e:
            logger.error(f"Model training failed: {e}")
            raise TrainingFailure(str(e)) from e

        logger.info("Model training completed")
        return list(history or [])
