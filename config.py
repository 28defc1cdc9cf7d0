"""
Configuration constants for the bridge.
Centralizes API endpoints, scopes, default sheet names and column mappings.
"""
from typing import Final

# Microsoft Graph
GRAPH_BASE_URL: Final[str] = "https://graph.microsoft.com/v1.0"
GRAPH_SCOPE: Final[str] = "https://graph.microsoft.com/.default"
LOGIN_AUTHORITY: Final[str] = "https://login.microsoftonline.com"

# Google Sheets (read-only access is enough)
GOOGLE_SCOPES: Final[list[str]] = [
    "https://www.googleapis.com/auth/spreadsheets.readonly",
    "https://www.googleapis.com/auth/drive.readonly",
]

# Sheet names
DEFAULT_GOOGLE_SHEET: Final[str] = "Página1"
DEFAULT_EXCEL_WORKSHEET: Final[str] = "Sheet1"

# File extensions treated as workbooks when scanning a drive root
SPREADSHEET_EXTENSIONS: Final[tuple[str, ...]] = (".xlsx", ".xlsm", ".xlsb", ".xls")

# Key used for header cells that are blank (1-based suffix)
GENERATED_COLUMN_PREFIX: Final[str] = "Column_"

# Default positional layout of the Excel weighing sheet.
# Column 0 is an internal row id and is skipped.
EXCEL_FIXED_COLUMNS: Final[list[tuple[int, str]]] = [
    (1, "data"),
    (4, "peso_arroba"),
]

# HTTP
HTTP_TIMEOUT_SECONDS: Final[float] = 30.0
HTTP_RETRIES: Final[int] = 3

# Server
DEFAULT_PORT: Final[int] = 8080
