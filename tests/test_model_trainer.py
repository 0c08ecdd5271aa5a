import numpy as np
import pytest

from guided_text_pipeline.components.model_evaluation import ModelEvaluation
from guided_text_pipeline.components.model_trainer import ModelTrainer, TorchTextClassifier
from guided_text_pipeline.entity.artifact_entity import DatasetRole, EncodedDataset
from guided_text_pipeline.entity.config_entity import ModelEvaluationConfig, ModelTrainerConfig
from guided_text_pipeline.exception import EvaluationFailure, TrainingFailure

MAX_LENGTH = 4


@pytest.fixture
def datasets():
    # Token 2 marks positives, token 3 marks negatives
    sequences = np.array([[2, 2, 0, 0], [3, 3, 0, 0], [2, 1, 0, 0], [3, 1, 0, 0]] * 4, dtype=np.int64)
    labels = np.array([[1], [0], [1], [0]] * 4, dtype=np.int64)
    return (
        EncodedDataset(DatasetRole.TRAINING, sequences, labels),
        EncodedDataset(DatasetRole.VALIDATION, sequences[:4], labels[:4]),
    )


def test_fit_reports_every_epoch(datasets):
    train, validation = datasets
    config = ModelTrainerConfig(batch_size=4, epochs=3, learning_rate=0.05)
    classifier = TorchTextClassifier(vocab_size=4, max_length=MAX_LENGTH, config=config)
    seen = []

    history = ModelTrainer(config).train(classifier, train, validation, lambda epoch, logs: seen.append(epoch))

    assert seen == [1, 2, 3]
    assert len(history) == 3
    assert set(history[0]) == {"loss", "accuracy", "val_loss", "val_accuracy"}


def test_predict_returns_probabilities(datasets):
    train, _ = datasets
    classifier = TorchTextClassifier(vocab_size=4, max_length=MAX_LENGTH, config=ModelTrainerConfig())

    probabilities = classifier.predict(train.sequences)

    assert probabilities.shape == (len(train),)
    assert np.all((probabilities >= 0) & (probabilities <= 1))


def test_wrong_feature_width_is_a_training_failure(datasets):
    train, _ = datasets
    config = ModelTrainerConfig(epochs=1)
    classifier = TorchTextClassifier(vocab_size=4, max_length=MAX_LENGTH + 1, config=config)

    with pytest.raises(TrainingFailure):
        ModelTrainer(config).train(classifier, train)


def test_evaluation_metrics(datasets):
    train, _ = datasets
    classifier = TorchTextClassifier(vocab_size=4, max_length=MAX_LENGTH, config=ModelTrainerConfig())

    metrics = ModelEvaluation(ModelEvaluationConfig()).evaluate(classifier, train)

    assert {"loss", "accuracy", "precision", "recall", "f1", "confusion_matrix"} <= set(metrics)
    assert 0.0 <= metrics["accuracy"] <= 1.0
    assert np.array(metrics["confusion_matrix"]).sum() == len(train)


def test_evaluation_failure_keeps_message(datasets):
    train, _ = datasets

    class Broken:
        def evaluate(self, features, labels):
            raise RuntimeError("device lost")

        def predict(self, features):
            return np.zeros(len(features))

    with pytest.raises(EvaluationFailure, match="device lost"):
        ModelEvaluation(ModelEvaluationConfig()).evaluate(Broken(), train)
