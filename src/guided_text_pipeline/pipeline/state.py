# ============================================================================
# src/guided_text_pipeline/pipeline/state.py
# ============================================================================
"""Pipeline states, user-visible steps and the artifacts owned by one run."""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional

from guided_text_pipeline.components.model_trainer import TextClassifier
from guided_text_pipeline.entity.artifact_entity import (
    ColumnMapping,
    DatasetFile,
    DatasetRole,
    DatasetSummary,
    EncodedDataset,
    NormalizationReport,
    NormalizedRow,
    ParsedTable,
    Vocabulary,
)
from guided_text_pipeline.pipeline.reporting import Severity


class PipelineState(IntEnum):
    """Ordered progress states; a higher value means further along."""

    AWAITING_FILES = 0
    FILES_READY = 1
    PARSED = 2
    INSPECTED = 3
    PREPROCESSED = 4
    EMBEDDED = 5
    MODEL_READY = 6
    TRAINED = 7
    EVALUATED = 8
    PREDICT_READY = 9


class PipelineStep(str, Enum):
    """The eight steps a user walks through."""

    FILE_SELECT = "file_select"
    PARSE = "parse"
    INSPECT = "inspect"
    PREPROCESS = "preprocess"
    EMBED = "embed"
    TRAIN = "train"
    EVALUATE = "evaluate"
    PREDICT = "predict"


STATE_STEPS: Dict[PipelineState, PipelineStep] = {
    PipelineState.AWAITING_FILES: PipelineStep.FILE_SELECT,
    PipelineState.FILES_READY: PipelineStep.FILE_SELECT,
    PipelineState.PARSED: PipelineStep.PARSE,
    PipelineState.INSPECTED: PipelineStep.INSPECT,
    PipelineState.PREPROCESSED: PipelineStep.PREPROCESS,
    PipelineState.EMBEDDED: PipelineStep.EMBED,
    PipelineState.MODEL_READY: PipelineStep.TRAIN,
    PipelineState.TRAINED: PipelineStep.TRAIN,
    PipelineState.EVALUATED: PipelineStep.EVALUATE,
    PipelineState.PREDICT_READY: PipelineStep.PREDICT,
}


@dataclass(frozen=True)
class StageFailure:
    """Failure overlay: the step that failed and why. Progress is unchanged."""
    step: PipelineStep
    error: Exception

    @property
    def message(self) -> str:
        return str(self.error)


@dataclass
class StageResult:
    step: PipelineStep
    success: bool
    message: str
    severity: Severity
    payload: Any = None


# Artifact attribute -> state whose stage produces it
ARTIFACT_OWNERS: Dict[str, PipelineState] = {
    "tables": PipelineState.PARSED,
    "summaries": PipelineState.INSPECTED,
    "column_mapping": PipelineState.INSPECTED,
    "normalized": PipelineState.PREPROCESSED,
    "normalization_report": PipelineState.PREPROCESSED,
    "vocabulary": PipelineState.PREPROCESSED,
    "encoded": PipelineState.EMBEDDED,
    "classifier": PipelineState.MODEL_READY,
    "history": PipelineState.TRAINED,
    "metrics": PipelineState.EVALUATED,
}


@dataclass
class PipelineRun:
    """Every artifact of one pipeline run. Only the controller mutates it."""

    state: PipelineState = PipelineState.AWAITING_FILES
    failure: Optional[StageFailure] = None
    files: Dict[DatasetRole, DatasetFile] = field(default_factory=dict)
    tables: Optional[Dict[DatasetRole, ParsedTable]] = None
    summaries: Optional[Dict[DatasetRole, DatasetSummary]] = None
    column_mapping: Optional[ColumnMapping] = None
    normalized: Optional[Dict[DatasetRole, List[NormalizedRow]]] = None
    normalization_report: Optional[NormalizationReport] = None
    vocabulary: Optional[Vocabulary] = None
    encoded: Optional[Dict[DatasetRole, EncodedDataset]] = None
    classifier: Optional[TextClassifier] = None
    history: Optional[List[Dict[str, float]]] = None
    metrics: Optional[Dict[str, Any]] = None

    @property
    def step(self) -> PipelineStep:
        return STATE_STEPS[self.state]

    def clear_after(self, state: PipelineState) -> None:
        """Drop every artifact produced by a stage later than ``state``."""
        for attribute, owner in ARTIFACT_OWNERS.items():
            if owner > state:
                setattr(self, attribute, None)
