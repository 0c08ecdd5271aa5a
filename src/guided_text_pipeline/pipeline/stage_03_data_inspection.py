# ============================================================================
# src/guided_text_pipeline/pipeline/stage_03_data_inspection.py
# ============================================================================
"""Pipeline stage for inspecting parsed datasets before preprocessing."""

from collections import Counter
from typing import Dict, Mapping, Tuple

from guided_text_pipeline.components.data_validation import RowNormalizer
from guided_text_pipeline.entity.artifact_entity import (
    ColumnMapping,
    DatasetRole,
    DatasetSummary,
    ParsedTable,
)
from guided_text_pipeline.logging.logger import logger


class DataInspectionPipeline:
    """Summarizes each role and settles which columns hold text and label."""

    def __init__(self, normalizer: RowNormalizer, preview_rows: int = 5):
        self.stage_name = "Data Inspection"
        self.normalizer = normalizer
        self.preview_rows = preview_rows

    def summarize(self, table: ParsedTable, mapping: ColumnMapping) -> DatasetSummary:
        distribution: Counter = Counter()
        if mapping.label_key is not None:
            # Raw cell text; blank cells count under ""
            distribution.update(
                "" if row.get(mapping.label_key) is None else str(row[mapping.label_key])
                for row in table.rows
            )

        return DatasetSummary(
            role=table.role,
            row_count=len(table.rows),
            columns=list(table.headers),
            preview=[dict(row) for row in table.rows[: self.preview_rows]],
            label_distribution=dict(sorted(distribution.items())),
        )

    def run(
        self, tables: Mapping[DatasetRole, ParsedTable]
    ) -> Tuple[Dict[DatasetRole, DatasetSummary], ColumnMapping]:
        """Infer the column mapping from the training header, then summarize every role."""
        try:
            logger.info(f">>>>>> Stage: {self.stage_name} started <<<<<<")

            mapping = self.normalizer.infer_columns(tables[DatasetRole.TRAINING].headers)
            summaries = {role: self.summarize(table, mapping) for role, table in tables.items()}
            for summary in summaries.values():
                logger.info(
                    f"{summary.role.value}: {summary.row_count} rows, "
                    f"labels {summary.label_distribution}"
                )

            logger.info(f">>>>>> Stage: {self.stage_name} completed <<<<<<\n")
            return summaries, mapping

        except Exception as e:
            logger.error(f">>>>>> Stage: {self.stage_name} failed <<<<<<")
            logger.exception(e)
            raise
