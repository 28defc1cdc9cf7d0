"""
Source handlers.
Each handler turns one remote tabular source into normalized records.
"""
from handlers.excel import ExcelHandler
from handlers.sheets import SheetsHandler

__all__ = ["ExcelHandler", "SheetsHandler"]
