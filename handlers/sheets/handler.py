"""
Google Sheets handler class.
Reads one worksheet (optionally an A1 range of it) with gspread and returns
it as normalized records.
"""
from __future__ import annotations

from typing import Any, ClassVar

import gspread

from core.base_handler import BaseHandler
from env_loader import GoogleSheetSettings
from lib.common import log
from lib.errors import NotFoundError, TransportError, error_response
from lib.sheet_utils import extract_spreadsheet_id
from lib.types import RawGrid
from sheets_client import SheetsClient


class SheetsHandler(BaseHandler):
    """
    Handler for Google Sheets.

    The first row is treated as the header row unless a schema says otherwise.
    """

    SOURCE: ClassVar[str] = "google-sheets"

    def __init__(
        self,
        sheets: SheetsClient,
        settings: GoogleSheetSettings,
        schema: Any = None,
    ) -> None:
        super().__init__(schema if schema is not None else settings.schema)
        self.sheets = sheets
        self.settings = settings

    @property
    def spreadsheet_id(self) -> str:
        """Spreadsheet id, accepting a full URL in configuration."""
        sid = extract_spreadsheet_id(self.settings.spreadsheet_id)
        if not sid:
            raise RuntimeError("GOOGLE_SPREADSHEET_ID environment variable is required")
        return sid

    async def load_grid(self) -> RawGrid:
        sid = self.spreadsheet_id
        try:
            info = self.sheets.get_info(sid)
            log("spreadsheet info:", info)
            if self.settings.cell_range:
                log(f"reading range {self.settings.sheet_name}!{self.settings.cell_range}")
                return self.sheets.get_range(sid, self.settings.sheet_name, self.settings.cell_range)
            log(f"reading used range of {self.settings.sheet_name}")
            return self.sheets.get_all_values(sid, self.settings.sheet_name)
        except (gspread.exceptions.SpreadsheetNotFound, gspread.exceptions.WorksheetNotFound) as e:
            raise NotFoundError(f"sheet not found: {sid}/{self.settings.sheet_name} ({e})") from e
        except gspread.exceptions.APIError as e:
            raise TransportError(
                f"Google Sheets API error: {e}",
                status_code=getattr(e, "code", None),
            ) from e

    def worksheets(self) -> dict[str, Any]:
        """List worksheet titles. Failures are logged and yield an empty list."""
        op = "sheets.worksheets"
        try:
            sid = self.spreadsheet_id
        except RuntimeError as e:
            return error_response(op, e)
        try:
            names = self.sheets.list_worksheets(sid)
        except gspread.exceptions.GSpreadException as e:
            log(f"{op} failed (non-fatal):", e)
            names = []
        return self._ok(op, {
            "spreadsheet_id": sid,
            "worksheets": names,
            "configured": self.settings.sheet_name,
        })
