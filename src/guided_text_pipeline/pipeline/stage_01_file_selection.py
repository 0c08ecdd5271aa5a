# ============================================================================
# src/guided_text_pipeline/pipeline/stage_01_file_selection.py
# ============================================================================
"""Pipeline stage for dataset file selection."""

from typing import Dict, MutableMapping

from guided_text_pipeline.components.file_validation import DatasetFileValidator
from guided_text_pipeline.entity.artifact_entity import DatasetFile, DatasetRole
from guided_text_pipeline.logging.logger import logger


class FileSelectionPipeline:
    """Validates one selected file and describes the selection status."""

    def __init__(self, validator: DatasetFileValidator):
        self.stage_name = "File Selection"
        self.validator = validator

    def awaiting_message(self, role: DatasetRole) -> str:
        return f'Awaiting file "{self.validator.expected_name(role)}"...'

    def run(
        self,
        role: DatasetRole,
        dataset_file: DatasetFile,
        loaded: MutableMapping[DatasetRole, DatasetFile],
    ) -> str:
        """Accept ``dataset_file`` into ``loaded`` and return its status text."""
        try:
            self.validator.validate(role, dataset_file, loaded)
        except Exception:
            logger.error(f">>>>>> Stage: {self.stage_name} failed for {DatasetRole(role).value} <<<<<<")
            raise
        return f"Loaded: {dataset_file.name} ({dataset_file.size / 1024:.2f} KB)"

    def overall_message(self, loaded: Dict[DatasetRole, DatasetFile]) -> str:
        if self.validator.is_ready(loaded):
            return "All files successfully loaded. Ready to validate and prepare the model."
        return "Please ensure all three files are selected and named correctly."
