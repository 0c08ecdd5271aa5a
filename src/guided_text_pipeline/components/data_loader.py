# ============================================================================
# src/guided_text_pipeline/components/data_loader.py
# ============================================================================
"""CSV loading component: turns the three accepted files into parsed tables."""

import asyncio
import re
from pathlib import Path
from typing import Dict, List, Mapping, Tuple

import pandas as pd

from guided_text_pipeline.entity.artifact_entity import (
    DatasetFile,
    DatasetRole,
    ParsedTable,
)
from guided_text_pipeline.entity.config_entity import DataLoaderConfig
from guided_text_pipeline.exception import EmptyDatasetError, ParseStructuralError
from guided_text_pipeline.logging.logger import logger

# pandas names empty header cells "Unnamed: <position>"
_PLACEHOLDER_HEADER = re.compile(r"^Unnamed: \d+$")


def parse_csv(path: Path, role: DatasetRole, encoding: str = "utf-8") -> ParsedTable:
    """Parse one CSV file; the first row is the header, blank lines are skipped.

    Every cell is kept as the string written in the file: no numeric
    conversion and no "NA"/"null" recognition. Empty and missing cells
    become ``None``.

    Raises:
        ParseStructuralError: pandas could not read or tokenize the file.
    """
    try:
        frame = pd.read_csv(
            path,
            header=0,
            skip_blank_lines=True,
            encoding=encoding,
            dtype=str,
            keep_default_na=False,
        )
    except pd.errors.EmptyDataError:
        # No header and no rows: a data problem, not a parser one
        return ParsedTable(role=role, columns=[], rows=[])
    except (pd.errors.ParserError, UnicodeDecodeError, OSError) as e:
        raise ParseStructuralError({role.value: str(e)}) from e

    # pandas already made the names unique ("Unnamed: 2", "text.1"), so they key the rows
    columns = [str(name) for name in frame.columns]
    headers = ["" if _PLACEHOLDER_HEADER.match(name) else name for name in columns]
    # Short rows are padded with NaN
    cleaned = frame.astype(object).where(frame.notna() & (frame != ""), None)
    rows = [dict(zip(columns, values)) for values in cleaned.itertuples(index=False, name=None)]
    return ParsedTable(role=role, columns=columns, rows=rows, headers=headers)


class TabularLoader:
    """Parses the training, testing and validation files together."""

    def __init__(self, config: DataLoaderConfig):
        self.config = config

    async def _parse(self, role: DatasetRole, dataset_file: DatasetFile) -> Tuple[DatasetRole, ParsedTable]:
        logger.info(f"Parsing {role.value} file: {dataset_file.path}")
        table = await asyncio.to_thread(
            parse_csv, Path(dataset_file.path), role, self.config.encoding
        )
        logger.info(f"Parsed {role.value}: {len(table)} rows, headers={table.headers}")
        return role, table

    async def load_all(self, files: Mapping[DatasetRole, DatasetFile]) -> Dict[DatasetRole, ParsedTable]:
        """Parse every role's file concurrently and join before returning.

        Returns:
            Parsed tables keyed by role, in role order.

        Raises:
            ParseStructuralError: At least one file could not be parsed; every
                failing role is listed.
            EmptyDatasetError: Every file parsed but at least one has no rows;
                every empty role is listed.
        """
        tasks = [
            asyncio.ensure_future(self._parse(role, files[role]))
            for role in DatasetRole
        ]

        tables: Dict[DatasetRole, ParsedTable] = {}
        structural_errors: Dict[str, str] = {}
        for next_done in asyncio.as_completed(tasks):
            try:
                role, table = await next_done
            except ParseStructuralError as e:
                # Report now, keep waiting on the other parses
                logger.error(str(e))
                structural_errors.update(e.errors)
                continue
            tables[role] = table

        if structural_errors:
            ordered = {
                role.value: structural_errors[role.value]
                for role in DatasetRole
                if role.value in structural_errors
            }
            raise ParseStructuralError(ordered)

        empty_roles: List[str] = [role.value for role in DatasetRole if len(tables[role]) == 0]
        if empty_roles:
            logger.error(f"Zero data rows in: {empty_roles}")
            raise EmptyDatasetError(empty_roles)

        return {role: tables[role] for role in DatasetRole}
