"""
Base handler class for tabular sources.

Provides common functionality for all handlers:
- Grid loading with error handling
- Schema resolution and record normalization
- Success response helper
"""
from abc import ABC, abstractmethod
from typing import Any, ClassVar

from core.normalizer import FieldSchema, normalize, parse_schema, schema_name
from lib.common import ok, log
from lib.errors import error_response
from lib.types import NormalizedRecord, RawGrid


class BaseHandler(ABC):
    """
    Abstract base class for all source handlers.

    Subclasses must define:
    - SOURCE: Source name reported in responses
    - load_grid(): coroutine returning the raw grid to normalize

    Example:
        class CsvHandler(BaseHandler):
            SOURCE = "csv"

            async def load_grid(self):
                return [["Name", "Age"], ["Alice", "30"]]
    """

    SOURCE: ClassVar[str] = ""
    DEFAULT_SCHEMA: ClassVar[Any] = None

    def __init__(self, schema: Any = None) -> None:
        """
        Initialize handler with an optional schema override.

        Args:
            schema: FieldSchema, or a configuration string/mapping for parse_schema
        """
        self._schema_spec = schema if schema is not None else self.DEFAULT_SCHEMA

        # Lazily loaded
        self._values: RawGrid | None = None
        self._records: list[NormalizedRecord] | None = None

    # === Properties ===

    @property
    def schema(self) -> FieldSchema:
        """Resolved schema. Raises ValueError for an unparsable mapping."""
        return parse_schema(self._schema_spec)

    @property
    def values(self) -> RawGrid:
        """Raw grid from the last successful load."""
        return self._values or []

    @property
    def records(self) -> list[NormalizedRecord]:
        """Normalized records from the last successful read."""
        return self._records or []

    @property
    def headers(self) -> list[str]:
        """Field keys of the normalized records."""
        return list(self.records[0].keys()) if self.records else []

    # === Loading ===

    @abstractmethod
    async def load_grid(self) -> RawGrid:
        """Fetch the raw grid from the remote source."""

    async def read(self, op_name: str) -> dict[str, Any]:
        """
        Load the grid and normalize it.

        Args:
            op_name: Operation name for the response envelope

        Returns:
            Success response with records, or an error response
        """
        try:
            schema = self.schema
            self._values = await self.load_grid()
        except Exception as e:
            log(f"{op_name} failed:", e)
            return error_response(op_name, e)

        self._records = normalize(self._values, schema)
        log(f"{op_name}: {len(self.values)} raw rows -> {len(self.records)} records")
        return self._ok(op_name, {
            "source": self.SOURCE,
            "schema": schema_name(schema),
            "total_records": len(self.records),
            "headers": self.headers,
            "records": self.records,
        })

    # === Response Helpers ===

    def _ok(self, op: str, data: dict[str, Any] | None = None) -> dict[str, Any]:
        """Return success response."""
        return ok(op, data or {})
