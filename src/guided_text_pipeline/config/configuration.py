# ============================================================================
# src/guided_text_pipeline/config/configuration.py
# ============================================================================
"""Reads config.yaml and hands each stage its own frozen config entity."""

from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from guided_text_pipeline.constants import CONFIG_FILE_PATH
from guided_text_pipeline.entity.artifact_entity import DatasetRole
from guided_text_pipeline.entity.config_entity import (
    DataLoaderConfig,
    DataPreprocessingConfig,
    EmbeddingConfig,
    FileSelectionConfig,
    ModelEvaluationConfig,
    ModelTrainerConfig,
)
from guided_text_pipeline.logging.logger import logger


def read_yaml(path_to_yaml: Path) -> Dict[str, Any]:
    """Load a YAML file into a dict; an empty file yields an empty dict."""
    with open(path_to_yaml, "r", encoding="utf-8") as yaml_file:
        content = yaml.safe_load(yaml_file) or {}
    if not isinstance(content, dict):
        raise ValueError(f"Top level of {path_to_yaml} must be a mapping")
    logger.info(f"yaml file: {path_to_yaml} loaded successfully")
    return content


class ConfigurationManager:
    """Builds stage configs from YAML, with optional per-section overrides.

    ``overrides`` is merged on top of the file section by section, e.g.
    ``{"embedding": {"max_length": 5}}``.
    """

    def __init__(
        self,
        config_filepath: Path = CONFIG_FILE_PATH,
        overrides: Optional[Mapping[str, Mapping[str, Any]]] = None,
    ):
        self.config = read_yaml(Path(config_filepath))
        for section, values in (overrides or {}).items():
            merged = dict(self.config.get(section) or {})
            merged.update(values)
            self.config[section] = merged

    def _section(self, name: str) -> Dict[str, Any]:
        return dict(self.config.get(name) or {})

    def get_file_selection_config(self) -> FileSelectionConfig:
        section = self._section("file_selection")
        required = section.get("required_files")
        if required is None:
            return FileSelectionConfig()

        unknown = set(required) - {role.value for role in DatasetRole}
        missing = {role.value for role in DatasetRole} - set(required)
        if unknown or missing:
            raise ValueError(
                f"required_files must name exactly the roles "
                f"{[role.value for role in DatasetRole]} "
                f"(unknown: {sorted(unknown)}, missing: {sorted(missing)})"
            )
        return FileSelectionConfig(required_files={k: str(v) for k, v in required.items()})

    def get_data_loader_config(self) -> DataLoaderConfig:
        return DataLoaderConfig(**self._section("data_loader"))

    def get_data_preprocessing_config(self) -> DataPreprocessingConfig:
        return DataPreprocessingConfig(**self._section("data_preprocessing"))

    def get_embedding_config(self) -> EmbeddingConfig:
        embedding_config = EmbeddingConfig(**self._section("embedding"))
        if int(embedding_config.max_length) < 1:
            raise ValueError("embedding.max_length must be a positive integer")
        return embedding_config

    def get_model_trainer_config(self) -> ModelTrainerConfig:
        return ModelTrainerConfig(**self._section("model_trainer"))

    def get_model_evaluation_config(self) -> ModelEvaluationConfig:
        return ModelEvaluationConfig(**self._section("model_evaluation"))
