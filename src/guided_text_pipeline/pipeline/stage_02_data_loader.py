# ============================================================================
# src/guided_text_pipeline/pipeline/stage_02_data_loader.py
# ============================================================================
"""Pipeline stage for parsing the three dataset files."""

from typing import Dict, Mapping

from guided_text_pipeline.components.data_loader import TabularLoader
from guided_text_pipeline.entity.artifact_entity import DatasetFile, DatasetRole, ParsedTable
from guided_text_pipeline.exception import PipelineError
from guided_text_pipeline.logging.logger import logger


class DataLoaderPipeline:
    """Pipeline for the parse stage."""

    def __init__(self, loader: TabularLoader):
        self.stage_name = "Data Loading"
        self.loader = loader

    async def run(self, files: Mapping[DatasetRole, DatasetFile]) -> Dict[DatasetRole, ParsedTable]:
        try:
            logger.info(f">>>>>> Stage: {self.stage_name} started <<<<<<")
            tables = await self.loader.load_all(files)
            logger.info(f">>>>>> Stage: {self.stage_name} completed <<<<<<\n")
            return tables

        except PipelineError as e:
            logger.error(f">>>>>> Stage: {self.stage_name} failed <<<<<<: {e}")
            raise
        except Exception as e:
            logger.error(f">>>>>> Stage: {self.stage_name} failed <<<<<<")
            logger.exception(e)
            raise
