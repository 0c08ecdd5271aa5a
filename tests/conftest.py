"""Shared fixtures: CSV writers, a fake classifier and ready-made controllers."""

import asyncio
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np
import pytest

from guided_text_pipeline.config.configuration import ConfigurationManager
from guided_text_pipeline.entity.artifact_entity import DatasetFile, DatasetRole
from guided_text_pipeline.pipeline.controller import PipelineController
from guided_text_pipeline.pipeline.reporting import RecordingReporter

TRAIN_CSV = "text,label\nI love pizza,1\nAI generated spam,0\n"
TEST_CSV = "text,label\nI love spam,0\npizza is great,1\n"
VALIDATION_CSV = "text,label\nlove pizza,1\ngenerated words,0\n"

FILE_NAMES = {
    DatasetRole.TRAINING: "train.csv",
    DatasetRole.TESTING: "test.csv",
    DatasetRole.VALIDATION: "validation.csv",
}


class FakeClassifier:
    """Stands in for the PyTorch classifier; remembers what it was given."""

    def __init__(self, vocab_size: int, max_length: int, config=None, probability: float = 0.8):
        self.vocab_size = vocab_size
        self.max_length = max_length
        self.probability = probability
        self.fit_calls: List[dict] = []
        self.predicted: List[np.ndarray] = []

    def fit(self, features, labels, batch_size, epochs, validation_data=None, on_epoch=None):
        self.fit_calls.append({
            "features": features,
            "labels": labels,
            "batch_size": batch_size,
            "epochs": epochs,
            "validation_data": validation_data,
        })
        history = []
        for epoch in range(1, epochs + 1):
            logs = {"loss": 1.0 / epoch, "accuracy": 0.5}
            history.append(logs)
            if on_epoch is not None:
                on_epoch(epoch, logs)
        return history

    def evaluate(self, features, labels):
        return 0.25, 0.5

    def predict(self, features):
        self.predicted.append(np.asarray(features))
        return np.full(len(features), self.probability)


class FailingClassifier(FakeClassifier):
    def fit(self, *args, **kwargs):
        raise RuntimeError("loss became NaN")


def write_csv(directory: Path, name: str, content: str) -> DatasetFile:
    path = directory / name
    path.write_text(content, encoding="utf-8")
    return DatasetFile.from_path(path)


@pytest.fixture
def dataset_files(tmp_path) -> Dict[DatasetRole, DatasetFile]:
    contents = {
        DatasetRole.TRAINING: TRAIN_CSV,
        DatasetRole.TESTING: TEST_CSV,
        DatasetRole.VALIDATION: VALIDATION_CSV,
    }
    return {role: write_csv(tmp_path, FILE_NAMES[role], contents[role]) for role in DatasetRole}


def make_controller(classifier_cls=FakeClassifier, max_length: int = 5, epochs: int = 2) -> PipelineController:
    config_manager = ConfigurationManager(
        overrides={"embedding": {"max_length": max_length}, "model_trainer": {"epochs": epochs}}
    )
    return PipelineController(
        config_manager=config_manager,
        reporter=RecordingReporter(),
        classifier_factory=lambda vocab_size, length, config: classifier_cls(vocab_size, length, config),
    )


@pytest.fixture
def controller() -> PipelineController:
    return make_controller()


def select_all(controller: PipelineController, files: Dict[DatasetRole, DatasetFile]) -> None:
    for role, dataset_file in files.items():
        result = asyncio.run(controller.select_file(role, dataset_file))
        assert result.success, result.message


def run_through(controller: PipelineController, last: Optional[str] = None):
    """Run stages in order up to and including ``last``; returns the last result."""
    result = None
    for stage in ("parse", "inspect", "preprocess", "embed", "create_model", "train", "evaluate"):
        result = asyncio.run(getattr(controller, stage)())
        assert result.success, f"{stage}: {result.message}"
        if stage == last:
            break
    return result
