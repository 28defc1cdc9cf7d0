"""Excel (Microsoft Graph) source."""
from handlers.excel.handler import ExcelHandler

__all__ = ["ExcelHandler"]
