"""
Google Sheets API client using gspread.
Provides Service Account authentication and read-only sheet operations.
"""
import json
import gspread
from google.oauth2.service_account import Credentials
from typing import Any

from config import GOOGLE_SCOPES


class SheetsClient:
    """Wrapper around gspread for Google Sheets API access."""

    def __init__(self, credentials_json: str | dict):
        """
        Initialize the client with Service Account credentials.

        Args:
            credentials_json: Either a JSON string or dict containing
                             the Service Account credentials.
        """
        if isinstance(credentials_json, str):
            credentials_json = json.loads(credentials_json)
        creds = Credentials.from_service_account_info(credentials_json, scopes=GOOGLE_SCOPES)
        self.gc = gspread.authorize(creds)

    def open_by_id(self, spreadsheet_id: str) -> gspread.Spreadsheet:
        """Open a spreadsheet by ID. Not cached: every read sees fresh data."""
        return self.gc.open_by_key(spreadsheet_id)

    def get_worksheet(self, spreadsheet_id: str, sheet_name: str) -> gspread.Worksheet:
        """Get a worksheet by name from a spreadsheet."""
        ss = self.open_by_id(spreadsheet_id)
        return ss.worksheet(sheet_name)

    def get_all_values(self, spreadsheet_id: str, sheet_name: str) -> list[list[str]]:
        """Get all values (the used range) from a worksheet as a 2D list."""
        ws = self.get_worksheet(spreadsheet_id, sheet_name)
        return ws.get_all_values()

    def get_range(self, spreadsheet_id: str, sheet_name: str, range_notation: str) -> list[list[Any]]:
        """Get values from a specific range (e.g., 'A1:I169')."""
        ws = self.get_worksheet(spreadsheet_id, sheet_name)
        return [list(row) for row in ws.get(range_notation)]

    def get_info(self, spreadsheet_id: str) -> dict[str, Any]:
        """Spreadsheet title and worksheet properties."""
        ss = self.open_by_id(spreadsheet_id)
        return {
            "title": ss.title,
            "sheets": [
                {
                    "title": ws.title,
                    "sheet_id": ws.id,
                    "rows": ws.row_count,
                    "cols": ws.col_count,
                }
                for ws in ss.worksheets()
            ],
        }

    def list_worksheets(self, spreadsheet_id: str) -> list[str]:
        """Worksheet titles in tab order."""
        ss = self.open_by_id(spreadsheet_id)
        return [ws.title for ws in ss.worksheets()]


# Singleton instance for the application
_sheets_client: SheetsClient | None = None


def get_sheets_client() -> SheetsClient:
    """
    Get the global SheetsClient instance.
    Initializes from environment variables on first call.
    """
    global _sheets_client
    if _sheets_client is None:
        from env_loader import get_google_credentials
        credentials = get_google_credentials()
        _sheets_client = SheetsClient(credentials)
    return _sheets_client


def reset_sheets_client() -> None:
    """Reset the global client (useful for testing)."""
    global _sheets_client
    _sheets_client = None
