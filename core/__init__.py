"""
Core logic: document location and grid normalization.
"""
from core.locator import DocumentLocator, matches_identifier, first_match
from core.normalizer import (
    FieldSchema,
    FixedSchema,
    GeneratedSchema,
    HeaderSchema,
    normalize,
    parse_schema,
)

__all__ = [
    "DocumentLocator",
    "matches_identifier",
    "first_match",
    "FieldSchema",
    "FixedSchema",
    "GeneratedSchema",
    "HeaderSchema",
    "normalize",
    "parse_schema",
]
