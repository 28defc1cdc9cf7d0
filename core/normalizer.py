"""
Tabular data normalizer.

Turns a raw cell grid (as returned by a used-range or values read) into an
ordered list of typed records. Three schema kinds are supported:

- HeaderSchema: the first row names the fields
- FixedSchema: explicit (source column, field key) pairs, every row is data
- GeneratedSchema: no header row, fields are Column_1..Column_n

Irregular rows are filtered, never raised.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from config import GENERATED_COLUMN_PREFIX
from lib.common import cell_text, is_blank_row, parse_cell
from lib.input_parser import parse_column_mapping
from lib.types import NormalizedRecord, RawGrid, RawRow


@dataclass(frozen=True)
class HeaderSchema:
    """Field keys come from the grid's first row."""


@dataclass(frozen=True)
class GeneratedSchema:
    """Grid has no header row; keys are generated from the widest row."""


@dataclass(frozen=True)
class FixedSchema:
    """Explicit positional mapping; the grid has no header row."""
    columns: tuple[tuple[int, str], ...]

    def __post_init__(self) -> None:
        if not self.columns:
            raise ValueError("FixedSchema requires at least one column")
        if any(idx < 0 for idx, _ in self.columns):
            raise ValueError("column indices must be non-negative")
        keys = [key for _, key in self.columns]
        if len(set(keys)) != len(keys):
            raise ValueError(f"duplicate field keys in column mapping: {keys}")

    @property
    def max_index(self) -> int:
        return max(idx for idx, _ in self.columns)

    @classmethod
    def of(cls, columns: Any) -> "FixedSchema":
        return cls(tuple((int(i), str(k)) for i, k in columns))


FieldSchema = HeaderSchema | GeneratedSchema | FixedSchema


def generated_key(index: int) -> str:
    """Key for the 0-based column index (Column_1 for index 0)."""
    return f"{GENERATED_COLUMN_PREFIX}{index + 1}"


def header_keys(header_row: RawRow) -> list[str]:
    """
    Derive field keys from a header row.

    Blank cells become Column_<n>. Repeated names get a _2, _3 ... suffix
    so that no column overwrites another.
    """
    keys: list[str] = []
    seen: set[str] = set()
    for i, cell in enumerate(header_row):
        key = cell_text(cell) or generated_key(i)
        if key in seen:
            n = 2
            while f"{key}_{n}" in seen:
                n += 1
            key = f"{key}_{n}"
        seen.add(key)
        keys.append(key)
    return keys


def _cell(row: RawRow, idx: int) -> Any:
    return row[idx] if 0 <= idx < len(row) else None


def _build(row: RawRow, columns: list[tuple[int, str]]) -> NormalizedRecord:
    return {key: parse_cell(_cell(row, idx)) for idx, key in columns}


def normalize(grid: RawGrid | None, schema: FieldSchema) -> list[NormalizedRecord]:
    """
    Convert a raw grid into typed records.

    Args:
        grid: Rows of raw cells (ragged rows allowed)
        schema: How field keys are assigned

    Returns:
        Records in source order; blank rows (and, for FixedSchema, rows that
        do not reach the highest mapped column) are dropped.
    """
    if not grid:
        return []

    if isinstance(schema, FixedSchema):
        columns = list(schema.columns)
        min_width = schema.max_index + 1
        return [
            _build(row, columns)
            for row in grid
            if not is_blank_row(row) and len(row) >= min_width
        ]

    if isinstance(schema, HeaderSchema):
        keys = header_keys(grid[0] or [])
        data_rows = grid[1:]
    else:
        width = max((len(r) for r in grid if r), default=0)
        keys = [generated_key(i) for i in range(width)]
        data_rows = grid

    columns = list(enumerate(keys))
    return [_build(row, columns) for row in data_rows if not is_blank_row(row)]


def parse_schema(spec: Any) -> FieldSchema:
    """
    Build a FieldSchema from configuration.

    - None, "", "header" -> HeaderSchema
    - "none", "generated" -> GeneratedSchema
    - anything else is read as a column mapping ("1:data,4:peso_arroba")

    Raises:
        ValueError: If the mapping cannot be parsed
    """
    if isinstance(spec, (HeaderSchema, GeneratedSchema, FixedSchema)):
        return spec
    if spec is None:
        return HeaderSchema()
    if isinstance(spec, str):
        word = spec.strip().lower()
        if word in ("", "header", "headers"):
            return HeaderSchema()
        if word in ("none", "generated", "no-header"):
            return GeneratedSchema()
    return FixedSchema.of(parse_column_mapping(spec))


def schema_name(schema: FieldSchema) -> str:
    if isinstance(schema, FixedSchema):
        return "fixed"
    if isinstance(schema, GeneratedSchema):
        return "generated"
    return "header"
