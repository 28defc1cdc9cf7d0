"""
Input parsing and validation utilities.

Functions for parsing and normalizing tool inputs and configuration
strings, handling various input formats (strings, dicts, lists).
"""
from typing import Any

from lib.sheet_utils import col_letter_to_index


def strip_quotes(s: str) -> str:
    """
    Strip outer quotes from a string.

    Args:
        s: Input string

    Returns:
        String with leading/trailing quotes removed
    """
    s = s.strip()
    if (s.startswith('"') and s.endswith('"')) or (s.startswith("'") and s.endswith("'")):
        return s[1:-1]
    return s


def coerce_str(x: Any, keys: tuple[str, ...] = ()) -> str | None:
    """
    Extract a string from various input formats.

    Handles:
    - Direct string input
    - Dict with specified keys

    Args:
        x: Input value (string, dict, or other)
        keys: Tuple of keys to try in dict order

    Returns:
        Extracted string or None if not found
    """
    if isinstance(x, str):
        return strip_quotes(x)
    if isinstance(x, dict):
        for k in keys:
            v = x.get(k)
            if isinstance(v, str):
                return strip_quotes(v)
    return None


def parse_column_ref(ref: str) -> int:
    """
    Parse a column reference into a 0-based index.

    Accepts a number ("4") or a column letter ("E").

    Raises:
        ValueError: If the reference is neither
    """
    ref = ref.strip()
    if ref.isdigit():
        return int(ref)
    if ref.isalpha() and ref.isascii():
        return col_letter_to_index(ref)
    raise ValueError(f"invalid column reference: {ref!r}")


def parse_column_mapping(x: Any) -> list[tuple[int, str]]:
    """
    Parse a positional column mapping.

    Handles:
    - "1:data,4:peso_arroba" or "B:data,E:peso_arroba"
    - [[1, "data"], [4, "peso_arroba"]]
    - {"data": 1, "peso_arroba": "E"}

    Returns:
        Ordered list of (source_index, field_key) pairs

    Raises:
        ValueError: On malformed entries or an empty mapping
    """
    pairs: list[tuple[int, str]] = []
    if isinstance(x, str):
        for part in x.split(","):
            if not part.strip():
                continue
            ref, sep, key = part.partition(":")
            if not sep or not key.strip():
                raise ValueError(f"invalid column mapping entry: {part!r}")
            pairs.append((parse_column_ref(ref), strip_quotes(key)))
    elif isinstance(x, (list, tuple)):
        for entry in x:
            if not isinstance(entry, (list, tuple)) or len(entry) != 2:
                raise ValueError(f"invalid column mapping entry: {entry!r}")
            ref, key = entry
            pairs.append((parse_column_ref(str(ref)), str(key).strip()))
    elif isinstance(x, dict):
        for key, ref in x.items():
            pairs.append((parse_column_ref(str(ref)), str(key).strip()))
    if not pairs:
        raise ValueError("column mapping is empty")
    return pairs
