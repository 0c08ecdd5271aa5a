# ============================================================================
# src/guided_text_pipeline/components/data_validation.py
# ============================================================================
"""Row normalization: column inference, label coercion and row filtering."""

import numbers
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from guided_text_pipeline.entity.artifact_entity import (
    ColumnMapping,
    DatasetRole,
    NormalizationReport,
    NormalizedRow,
    ParsedTable,
    RawRow,
)
from guided_text_pipeline.entity.config_entity import DataPreprocessingConfig
from guided_text_pipeline.logging.logger import logger

_HEADER_STRIP_CHARS = " \t\"'"


def clean_header(name: str) -> str:
    """Strip surrounding quote and space characters from a header name."""
    return str(name).strip(_HEADER_STRIP_CHARS)


def coerce_label(value) -> Optional[int]:
    """Return 0 or 1 for a valid binary label, otherwise None.

    Accepts strings that trim to exactly ``"0"`` or ``"1"`` (the CSV loader
    yields raw strings, so ``"01"`` and ``"1.0"`` fail) and, for rows built in
    code, the numbers 0 and 1. Booleans are not labels.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        stripped = value.strip()
        if stripped in ("0", "1"):
            return int(stripped)
        return None
    if isinstance(value, numbers.Real) and value in (0, 1):
        return int(value)
    return None


class RowNormalizer:
    """Maps raw rows onto ``{text, label}`` and counts the rows it drops."""

    def __init__(self, config: DataPreprocessingConfig):
        self.config = config

    def infer_columns(self, headers: Sequence[str]) -> ColumnMapping:
        """Pick the text and label headers.

        Headers equal to the configured names (case-insensitive, after
        stripping quotes/spaces) win. Otherwise the first and second non-empty
        headers not already claimed are used, and the mapping is flagged as
        inferred.
        """
        text_key = self._find_header(headers, self.config.text_column)
        label_key = self._find_header(headers, self.config.label_column)
        inferred = text_key is None or label_key is None

        if inferred:
            candidates = [
                header for header in headers
                if clean_header(header) and header not in (text_key, label_key)
            ]
            if text_key is None and candidates:
                text_key = candidates.pop(0)
            if label_key is None and candidates:
                label_key = candidates.pop(0)

            warning_msg = (
                f"Expected '{self.config.text_column}'/'{self.config.label_column}' "
                f"headers not found in {list(headers)}; using text='{text_key}', "
                f"label='{label_key}'"
            )
            logger.warning(warning_msg)
        else:
            logger.info(f"Using columns text='{text_key}', label='{label_key}'")

        return ColumnMapping(text_key=text_key, label_key=label_key, inferred=inferred)

    @staticmethod
    def _find_header(headers: Sequence[str], wanted: str) -> Optional[str]:
        wanted = wanted.lower()
        for header in headers:
            if clean_header(header).lower() == wanted:
                return header
        return None

    @staticmethod
    def normalize_row(row: RawRow, mapping: ColumnMapping) -> Optional[NormalizedRow]:
        """Return the normalized row, or None when it must be dropped."""
        if mapping.text_key is None or mapping.label_key is None:
            return None

        text = row.get(mapping.text_key)
        if not isinstance(text, str) or not text.strip():
            return None

        label = coerce_label(row.get(mapping.label_key))
        if label is None:
            return None

        return NormalizedRow(text=text.strip(), label=label)

    def normalize(
        self,
        tables: Mapping[DatasetRole, ParsedTable],
        mapping: ColumnMapping,
    ) -> Tuple[Dict[DatasetRole, List[NormalizedRow]], NormalizationReport]:
        """Normalize every role with the same column mapping."""
        normalized: Dict[DatasetRole, List[NormalizedRow]] = {}
        kept: Dict[DatasetRole, int] = {}
        dropped: Dict[DatasetRole, int] = {}

        for role, table in tables.items():
            rows = []
            for raw_row in table.rows:
                normalized_row = self.normalize_row(raw_row, mapping)
                if normalized_row is not None:
                    rows.append(normalized_row)

            normalized[role] = rows
            kept[role] = len(rows)
            dropped[role] = len(table.rows) - len(rows)

            if dropped[role]:
                warning_msg = (
                    f"{role.value}: dropped {dropped[role]} of {len(table.rows)} rows "
                    f"(empty text or label not 0/1)"
                )
                logger.warning(warning_msg)

        report = NormalizationReport(kept=kept, dropped=dropped)
        logger.info(report.message)
        return normalized, report
