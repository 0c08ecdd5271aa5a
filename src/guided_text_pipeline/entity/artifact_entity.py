# ============================================================================
# src/guided_text_pipeline/entity/artifact_entity.py
# ============================================================================
"""Artifacts handed from one pipeline stage to the next."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

import numpy as np

from guided_text_pipeline.constants import OOV_INDEX, OOV_TOKEN, PAD_INDEX, PAD_TOKEN

RawRow = Dict[str, Any]


class DatasetRole(str, Enum):
    """The three datasets every run requires, in processing order."""

    TRAINING = "training"
    TESTING = "testing"
    VALIDATION = "validation"


@dataclass(frozen=True)
class DatasetFile:
    """A user-selected file: the name it was selected under and where it lives."""
    name: str
    path: Path
    size: int = 0

    @classmethod
    def from_path(cls, path) -> "DatasetFile":
        path = Path(path)
        return cls(name=path.name, path=path, size=path.stat().st_size)


@dataclass(frozen=True)
class ParsedTable:
    """Header and rows produced by the CSV parser for one role.

    ``columns`` are the unique keys of every row. ``headers`` are the header
    cells as written in the file, blank cells included; they default to
    ``columns`` when the table is built by hand.
    """
    role: DatasetRole
    columns: List[str]
    rows: List[RawRow]
    headers: List[str] = field(default_factory=list)

    def __post_init__(self):
        if not self.headers:
            object.__setattr__(self, "headers", list(self.columns))

    def __len__(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class DatasetSummary:
    """What the inspection stage shows for one role."""
    role: DatasetRole
    row_count: int
    columns: List[str]
    preview: List[RawRow]
    label_distribution: Dict[str, int]


@dataclass(frozen=True)
class ColumnMapping:
    """Which header holds the text and which holds the label."""
    text_key: Optional[str]
    label_key: Optional[str]
    inferred: bool = False


@dataclass(frozen=True)
class NormalizedRow:
    text: str
    label: int


@dataclass(frozen=True)
class NormalizationReport:
    """Kept/dropped row counts per role after normalization."""
    kept: Dict[DatasetRole, int]
    dropped: Dict[DatasetRole, int]

    @property
    def total_dropped(self) -> int:
        return sum(self.dropped.values())

    @property
    def is_clean(self) -> bool:
        return self.total_dropped == 0

    @property
    def message(self) -> str:
        if self.is_clean:
            return "Data is clean: no rows were excluded."
        return f"Data cleaned with {self.total_dropped} exclusions."


class Vocabulary:
    """Read-only token to index table.

    ``<PAD>`` is always 0 and ``<OOV>`` always 1; lookups of unknown tokens
    return the OOV index instead of growing the table.
    """

    def __init__(self, token_to_index: Mapping[str, int]):
        table = dict(token_to_index)
        if table.get(PAD_TOKEN) != PAD_INDEX or table.get(OOV_TOKEN) != OOV_INDEX:
            raise ValueError("Vocabulary must map <PAD> to 0 and <OOV> to 1")
        self._table = MappingProxyType(table)

    @property
    def token_to_index(self) -> Mapping[str, int]:
        return self._table

    @property
    def pad_index(self) -> int:
        return PAD_INDEX

    @property
    def oov_index(self) -> int:
        return OOV_INDEX

    def lookup(self, token: str) -> int:
        return self._table.get(token, OOV_INDEX)

    def to_dict(self) -> Dict[str, int]:
        return dict(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def __contains__(self, token: object) -> bool:
        return token in self._table

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vocabulary):
            return NotImplemented
        return list(self._table.items()) == list(other._table.items())

    def __repr__(self) -> str:
        return f"Vocabulary(size={len(self)})"


@dataclass(frozen=True)
class EncodedDataset:
    """Tensor-ready features ``[n, L]`` and labels ``[n, 1]`` for one role."""
    role: DatasetRole
    sequences: np.ndarray
    labels: np.ndarray

    def __post_init__(self):
        if len(self.sequences) != len(self.labels):
            raise ValueError(
                f"{self.role.value}: {len(self.sequences)} sequences but "
                f"{len(self.labels)} labels"
            )

    def __len__(self) -> int:
        return len(self.sequences)
