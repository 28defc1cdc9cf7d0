"""
Common utility functions.
Cell coercion, text folding, response envelopes and stderr logging.
"""
import math
import re
import sys
import unicodedata
from typing import Any

# Plain decimal literal, optional exponent. No thousands grouping.
_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def log(*a: Any) -> None:
    print(*a, file=sys.stderr, flush=True)


def normalize(s: Any) -> str:
    """
    Normalize a string for comparison.
    - NFKC normalization
    - Lowercase
    - Strip whitespace
    """
    if s is None:
        return ""
    text = str(s).strip().lower()
    return unicodedata.normalize("NFKC", text)


def cell_text(raw: Any) -> str:
    """String coercion of a cell: None becomes "", everything else is trimmed."""
    if raw is None:
        return ""
    return str(raw).strip()


def _as_number(f: float) -> int | float | None:
    if not math.isfinite(f):
        return None
    if f == int(f):
        return int(f)
    return f


def parse_cell(raw: Any) -> str | int | float:
    """
    Interpret a single raw cell as a number or a string.

    Comma is accepted as the decimal separator ("3,5" -> 3.5). Whole
    numbers come back as int ("007" -> 7). Anything that is not a complete
    decimal literal is returned as the trimmed string. Never raises.
    """
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    if isinstance(raw, float):
        n = _as_number(raw)
        if n is not None:
            return n

    s = cell_text(raw)
    if s == "":
        return s

    candidate = s.replace(",", ".", 1)
    if _NUMBER_RE.fullmatch(candidate):
        n = _as_number(float(candidate))
        if n is not None:
            return n
    return s


def is_blank_row(row: list[Any] | None) -> bool:
    """True when every cell is absent or trims to the empty string."""
    if not row:
        return True
    return all(cell_text(c) == "" for c in row)


def ok(op: str, data: dict[str, Any] | None = None) -> dict[str, Any]:
    """Create a successful response."""
    return {"ok": True, "op": op, "data": data or {}}


def ng(op: str, code: str, message: str, extra: dict[str, Any] | None = None) -> dict[str, Any]:
    """Create an error response."""
    error: dict[str, Any] = {"code": code, "message": message}
    if extra:
        error.update(extra)
    return {"ok": False, "op": op, "error": error}
