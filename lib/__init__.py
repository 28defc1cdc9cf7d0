"""
Utility libraries for the bridge.
Contains pure functions and shared types.
"""
from .common import normalize, parse_cell, cell_text, is_blank_row, ok, ng, log
from .errors import AuthenticationError, BridgeError, NotFoundError, TransportError
from .sheet_utils import col_letter_to_index, is_spreadsheet_name
from .types import (
    RawRow,
    RawGrid,
    NormalizedRecord,
    Drive,
    DriveItem,
    WeakDocumentIdentifier,
    ResolvedDocumentCoordinate,
)

__all__ = [
    # Data types
    "RawRow",
    "RawGrid",
    "NormalizedRecord",
    "Drive",
    "DriveItem",
    "WeakDocumentIdentifier",
    "ResolvedDocumentCoordinate",
    # Errors
    "BridgeError",
    "AuthenticationError",
    "NotFoundError",
    "TransportError",
    # Functions
    "normalize",
    "parse_cell",
    "cell_text",
    "is_blank_row",
    "ok",
    "ng",
    "log",
    "col_letter_to_index",
    "is_spreadsheet_name",
]
