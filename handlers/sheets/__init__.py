"""Google Sheets source."""
from handlers.sheets.handler import SheetsHandler

__all__ = ["SheetsHandler"]
