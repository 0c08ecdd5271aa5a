# ============================================================================
# src/guided_text_pipeline/components/file_validation.py
# ============================================================================
"""Admits dataset files into the pipeline by their exact file name."""

from typing import Dict, List, MutableMapping

from guided_text_pipeline.entity.artifact_entity import DatasetFile, DatasetRole
from guided_text_pipeline.entity.config_entity import FileSelectionConfig
from guided_text_pipeline.exception import NameMismatchError
from guided_text_pipeline.logging.logger import logger


class DatasetFileValidator:
    """Checks that each role receives the one file name configured for it.

    Only the name is inspected. Content problems surface later, when the
    loader parses the file.
    """

    def __init__(self, config: FileSelectionConfig):
        self.config = config

    def expected_name(self, role: DatasetRole) -> str:
        return self.config.required_files[DatasetRole(role).value]

    def validate(
        self,
        role: DatasetRole,
        dataset_file: DatasetFile,
        loaded: MutableMapping[DatasetRole, DatasetFile],
    ) -> DatasetFile:
        """Store ``dataset_file`` under ``role`` if its name matches exactly.

        Args:
            role: Role the file was selected for.
            dataset_file: The candidate file.
            loaded: Accepted files keyed by role; updated in place.

        Raises:
            NameMismatchError: The name differs; any file previously accepted
                for ``role`` is removed from ``loaded`` first.
        """
        role = DatasetRole(role)
        expected = self.expected_name(role)

        if dataset_file.name != expected:
            loaded.pop(role, None)
            logger.warning(
                f"Rejected {role.value} file: uploaded '{dataset_file.name}', "
                f"expected '{expected}'"
            )
            raise NameMismatchError(role.value, dataset_file.name, expected)

        loaded[role] = dataset_file
        logger.info(f"Accepted {role.value} file: {dataset_file.name} ({dataset_file.size} bytes)")
        return dataset_file

    def missing_roles(self, loaded: Dict[DatasetRole, DatasetFile]) -> List[DatasetRole]:
        return [role for role in DatasetRole if loaded.get(role) is None]

    def is_ready(self, loaded: Dict[DatasetRole, DatasetFile]) -> bool:
        """True once every role holds an accepted file."""
        return not self.missing_roles(loaded)
