# ============================================================================
# src/guided_text_pipeline/pipeline/controller.py
# ============================================================================
"""Staged controller: gates every stage on its predecessor's success.

The controller owns one ``PipelineRun`` and is the only code that mutates
it. A stage runs only when the run has reached the stage's required state;
otherwise ``StageOrderError`` is raised before anything executes. Stage
failures (any ``PipelineError``) never escape: they set the failure overlay,
leave progress and artifacts untouched, and come back as a failed
``StageResult`` so the same stage can simply be run again.
"""

import asyncio
from typing import Any, Dict, Optional

from guided_text_pipeline.components.data_loader import TabularLoader
from guided_text_pipeline.components.data_preprocessing import VocabularyBuilder
from guided_text_pipeline.components.data_validation import RowNormalizer
from guided_text_pipeline.components.file_validation import DatasetFileValidator
from guided_text_pipeline.components.model_trainer import ClassifierFactory, build_torch_classifier
from guided_text_pipeline.config.configuration import ConfigurationManager
from guided_text_pipeline.entity.artifact_entity import DatasetFile, DatasetRole
from guided_text_pipeline.exception import PipelineError, StageOrderError
from guided_text_pipeline.logging.logger import logger
from guided_text_pipeline.pipeline.prediction_pipeline import PredictionPipeline
from guided_text_pipeline.pipeline.reporting import LoggingReporter, Severity, StatusReporter
from guided_text_pipeline.pipeline.stage_01_file_selection import FileSelectionPipeline
from guided_text_pipeline.pipeline.stage_02_data_loader import DataLoaderPipeline
from guided_text_pipeline.pipeline.stage_03_data_inspection import DataInspectionPipeline
from guided_text_pipeline.pipeline.stage_04_data_preprocessing import DataPreprocessingPipeline
from guided_text_pipeline.pipeline.stage_05_embedding import EmbeddingPipeline
from guided_text_pipeline.pipeline.stage_06_model_trainer import ModelTrainerPipeline
from guided_text_pipeline.pipeline.stage_07_model_evaluation import ModelEvaluationPipeline
from guided_text_pipeline.pipeline.state import (
    PipelineRun,
    PipelineState,
    PipelineStep,
    StageFailure,
    StageResult,
)


class PipelineController:
    """Sequences file selection, parsing, inspection, preprocessing, encoding and the model."""

    def __init__(
        self,
        config_manager: Optional[ConfigurationManager] = None,
        reporter: Optional[StatusReporter] = None,
        classifier_factory: Optional[ClassifierFactory] = None,
    ):
        config_manager = config_manager or ConfigurationManager()
        self.reporter = reporter or LoggingReporter()

        loader_config = config_manager.get_data_loader_config()
        self.embedding_config = config_manager.get_embedding_config()
        self.evaluation_config = config_manager.get_model_evaluation_config()
        normalizer = RowNormalizer(config_manager.get_data_preprocessing_config())

        self.validator = DatasetFileValidator(config_manager.get_file_selection_config())
        self.file_selection = FileSelectionPipeline(self.validator)
        self.data_loader = DataLoaderPipeline(TabularLoader(loader_config))
        self.inspection = DataInspectionPipeline(normalizer, loader_config.preview_rows)
        self.preprocessing = DataPreprocessingPipeline(normalizer, VocabularyBuilder())
        self.embedding = EmbeddingPipeline(self.embedding_config)
        self.model_trainer = ModelTrainerPipeline(
            config_manager.get_model_trainer_config(),
            classifier_factory or build_torch_classifier,
        )
        self.model_evaluation = ModelEvaluationPipeline(self.evaluation_config)

        self.run = PipelineRun()
        self._lock: Optional[asyncio.Lock] = None
        self._lock_loop = None

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _stage_lock(self) -> asyncio.Lock:
        """One lock per event loop serializes stage entry."""
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock, self._lock_loop = asyncio.Lock(), loop
        return self._lock

    def _require(self, operation: str, step: PipelineStep, required: PipelineState) -> None:
        if self.run.state < required:
            error = StageOrderError(operation, required.name, self.run.state.name)
            logger.warning(str(error))
            self.reporter.report(step, str(error), Severity.ERROR)
            raise error

    def _succeed(
        self,
        step: PipelineStep,
        state: PipelineState,
        message: str,
        severity: Severity = Severity.SUCCESS,
        payload: Any = None,
        **artifacts: Any,
    ) -> StageResult:
        self.run.clear_after(state)
        for name, value in artifacts.items():
            setattr(self.run, name, value)
        self.run.state = state
        self.run.failure = None
        self.reporter.report(step, message, severity)
        return StageResult(step, True, message, severity, payload)

    def _fail(self, step: PipelineStep, error: PipelineError) -> StageResult:
        self.run.failure = StageFailure(step, error)
        self.reporter.report(step, str(error), Severity.ERROR)
        return StageResult(step, False, str(error), Severity.ERROR, payload=error)

    def _return_to_file_selection(self) -> None:
        self.run.clear_after(PipelineState.FILES_READY)
        ready = self.validator.is_ready(self.run.files)
        self.run.state = PipelineState.FILES_READY if ready else PipelineState.AWAITING_FILES

    # ------------------------------------------------------------------
    # Step 1: file selection
    # ------------------------------------------------------------------
    async def select_file(self, role: DatasetRole, dataset_file: DatasetFile) -> StageResult:
        """Validate a file for ``role``. Always invalidates everything past file selection."""
        role = DatasetRole(role)
        async with self._stage_lock():
            files = dict(self.run.files)
            try:
                message = self.file_selection.run(role, dataset_file, files)
            except PipelineError as e:
                self.run.files = files
                self._return_to_file_selection()
                result = self._fail(PipelineStep.FILE_SELECT, e)
                self.reporter.report(
                    PipelineStep.FILE_SELECT, self.file_selection.overall_message(files), Severity.INFO
                )
                return result

            self.run.files = files
            self._return_to_file_selection()
            self.run.failure = None
            self.reporter.report(PipelineStep.FILE_SELECT, message, Severity.SUCCESS)

            ready = self.run.state == PipelineState.FILES_READY
            overall = self.file_selection.overall_message(files)
            self.reporter.report(PipelineStep.FILE_SELECT, overall, Severity.SUCCESS if ready else Severity.INFO)
            return StageResult(
                PipelineStep.FILE_SELECT,
                True,
                message,
                Severity.SUCCESS,
                payload={"ready": ready, "status": overall},
            )

    async def remove_file(self, role: DatasetRole) -> StageResult:
        """Forget the file selected for ``role``."""
        role = DatasetRole(role)
        async with self._stage_lock():
            files = dict(self.run.files)
            files.pop(role, None)
            self.run.files = files
            self._return_to_file_selection()
            message = "File not selected."
            self.reporter.report(PipelineStep.FILE_SELECT, f"{role.value}: {message}", Severity.INFO)
            return StageResult(PipelineStep.FILE_SELECT, True, message, Severity.INFO,
                               payload={"ready": False, "status": self.file_selection.overall_message(files)})

    async def reset(self) -> None:
        """Abandon the whole run and start again from file selection."""
        async with self._stage_lock():
            self.run = PipelineRun()
            for role in DatasetRole:
                self.reporter.report(PipelineStep.FILE_SELECT, self.file_selection.awaiting_message(role), Severity.INFO)

    # ------------------------------------------------------------------
    # Step 2: parse
    # ------------------------------------------------------------------
    async def parse(self) -> StageResult:
        step = PipelineStep.PARSE
        async with self._stage_lock():
            self._require("parse", step, PipelineState.FILES_READY)
            self.reporter.report(step, "Parsing dataset files...", Severity.INFO)
            try:
                tables = await self.data_loader.run(dict(self.run.files))
            except PipelineError as e:
                return self._fail(step, e)

            counts = {role.value: len(table) for role, table in tables.items()}
            message = "Parsed " + ", ".join(f"{role}: {count} rows" for role, count in counts.items())
            return self._succeed(step, PipelineState.PARSED, message, payload=counts, tables=tables)

    # ------------------------------------------------------------------
    # Step 3: inspect
    # ------------------------------------------------------------------
    async def inspect(self) -> StageResult:
        step = PipelineStep.INSPECT
        async with self._stage_lock():
            self._require("inspect", step, PipelineState.PARSED)
            try:
                summaries, mapping = self.inspection.run(self.run.tables)
            except PipelineError as e:
                return self._fail(step, e)

            if mapping.inferred:
                message = (
                    f"Columns 'text'/'label' not found; using '{mapping.text_key}' as text "
                    f"and '{mapping.label_key}' as label."
                )
                severity = Severity.WARNING
            else:
                message = "Dataset structure confirmed."
                severity = Severity.SUCCESS

            return self._succeed(
                step,
                PipelineState.INSPECTED,
                message,
                severity,
                payload={"summaries": summaries, "column_mapping": mapping},
                summaries=summaries,
                column_mapping=mapping,
            )

    # ------------------------------------------------------------------
    # Step 4: preprocess
    # ------------------------------------------------------------------
    async def preprocess(self) -> StageResult:
        step = PipelineStep.PREPROCESS
        async with self._stage_lock():
            self._require("preprocess", step, PipelineState.INSPECTED)
            try:
                normalized, report, vocabulary = self.preprocessing.run(
                    self.run.tables, self.run.column_mapping
                )
            except PipelineError as e:
                return self._fail(step, e)

            message = f"{report.message} Vocabulary size: {len(vocabulary)}."
            severity = Severity.SUCCESS if report.is_clean else Severity.WARNING
            return self._succeed(
                step,
                PipelineState.PREPROCESSED,
                message,
                severity,
                payload={
                    "kept": {role.value: count for role, count in report.kept.items()},
                    "dropped": {role.value: count for role, count in report.dropped.items()},
                    "vocabulary_size": len(vocabulary),
                },
                normalized=normalized,
                normalization_report=report,
                vocabulary=vocabulary,
            )

    # ------------------------------------------------------------------
    # Step 5: embed
    # ------------------------------------------------------------------
    async def embed(self) -> StageResult:
        step = PipelineStep.EMBED
        async with self._stage_lock():
            self._require("embed", step, PipelineState.PREPROCESSED)
            try:
                encoded = self.embedding.run(self.run.normalized, self.run.vocabulary)
            except PipelineError as e:
                return self._fail(step, e)

            shapes = {role.value: list(dataset.sequences.shape) for role, dataset in encoded.items()}
            message = "Encoded sequences " + ", ".join(f"{role}: {shape}" for role, shape in shapes.items())
            return self._succeed(step, PipelineState.EMBEDDED, message, payload=shapes, encoded=encoded)

    # ------------------------------------------------------------------
    # Step 6: model creation and training
    # ------------------------------------------------------------------
    async def create_model(self) -> StageResult:
        step = PipelineStep.TRAIN
        async with self._stage_lock():
            self._require("create_model", step, PipelineState.EMBEDDED)
            try:
                classifier = self.model_trainer.create(
                    len(self.run.vocabulary), int(self.embedding_config.max_length)
                )
            except PipelineError as e:
                return self._fail(step, e)

            return self._succeed(
                step, PipelineState.MODEL_READY, "Model created. Ready for training.", classifier=classifier
            )

    async def train(self) -> StageResult:
        step = PipelineStep.TRAIN
        async with self._stage_lock():
            self._require("train", step, PipelineState.MODEL_READY)
            epochs = self.model_trainer.config.epochs

            def on_epoch(epoch: int, logs: Dict[str, float]) -> None:
                details = ", ".join(f"{key}: {value:.4f}" for key, value in logs.items())
                self.reporter.report(step, f"Epoch {epoch}/{epochs} - {details}", Severity.INFO)

            self.reporter.report(step, "Training model...", Severity.INFO)
            try:
                history = await self.model_trainer.run(self.run.classifier, self.run.encoded, on_epoch)
            except PipelineError as e:
                return self._fail(step, e)

            return self._succeed(
                step, PipelineState.TRAINED, "Training complete.", payload=history, history=history
            )

    # ------------------------------------------------------------------
    # Step 7: evaluate
    # ------------------------------------------------------------------
    async def evaluate(self) -> StageResult:
        step = PipelineStep.EVALUATE
        async with self._stage_lock():
            self._require("evaluate", step, PipelineState.TRAINED)
            try:
                metrics = await self.model_evaluation.run(
                    self.run.classifier, self.run.encoded[DatasetRole.TESTING]
                )
            except PipelineError as e:
                return self._fail(step, e)

            message = f"Test loss: {metrics['loss']:.4f}, test accuracy: {metrics['accuracy']:.4f}"
            return self._succeed(step, PipelineState.EVALUATED, message, payload=metrics, metrics=metrics)

    # ------------------------------------------------------------------
    # Step 8: predict
    # ------------------------------------------------------------------
    async def predict(self, text: str) -> StageResult:
        step = PipelineStep.PREDICT
        async with self._stage_lock():
            self._require("predict", step, PipelineState.EVALUATED)
            predictor = PredictionPipeline(
                self.run.classifier,
                self.run.vocabulary,
                int(self.embedding_config.max_length),
                self.evaluation_config.threshold,
            )
            try:
                result = (await asyncio.to_thread(predictor.predict, [text]))[0]
            except PipelineError as e:
                return self._fail(step, e)

            message = f"Predicted label {result['label']} (probability {result['score']:.4f})"
            return self._succeed(step, PipelineState.PREDICT_READY, message, payload=result)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def status(self) -> Dict[str, Any]:
        """Plain snapshot of the run for display."""
        run = self.run
        return {
            "state": run.state.name,
            "step": run.step.value,
            "failure": None if run.failure is None else {
                "step": run.failure.step.value,
                "message": run.failure.message,
            },
            "files": {
                role.value: (run.files[role].name if role in run.files else None)
                for role in DatasetRole
            },
            "expected_files": {role.value: self.validator.expected_name(role) for role in DatasetRole},
            "vocabulary_size": None if run.vocabulary is None else len(run.vocabulary),
            "metrics": run.metrics,
        }
