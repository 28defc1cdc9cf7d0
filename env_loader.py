"""
Environment variable loader for the bridge.
Handles loading credentials and source settings from .env file or environment.
"""
import os
import json
from dataclasses import dataclass
from pathlib import Path

# Load .env file if it exists
from dotenv import load_dotenv

from config import DEFAULT_EXCEL_WORKSHEET, DEFAULT_GOOGLE_SHEET, DEFAULT_PORT


# Find .env file (look in current dir and parent dirs)
def _find_env_file() -> Path | None:
    current = Path(__file__).parent
    for _ in range(3):  # Check up to 3 levels up
        env_path = current / ".env"
        if env_path.exists():
            return env_path
        current = current.parent
    return None

_env_file = _find_env_file()
if _env_file:
    load_dotenv(_env_file)


def _env(key: str) -> str | None:
    value = os.environ.get(key, "").strip()
    return value or None


def get_google_credentials() -> dict:
    """
    Get Google Service Account credentials.

    Priority:
    1. GOOGLE_CREDENTIALS_FILE (path to JSON file)
    2. GOOGLE_CREDENTIALS_JSON (JSON string content)

    Returns:
        dict: Parsed credentials dictionary

    Raises:
        RuntimeError: If no credentials are configured
    """
    # Option 1: File path
    creds_file = _env("GOOGLE_CREDENTIALS_FILE")
    if creds_file:
        creds_path = Path(creds_file)
        if not creds_path.exists():
            raise RuntimeError(f"GOOGLE_CREDENTIALS_FILE not found: {creds_file}")
        with open(creds_path, "r") as f:
            return json.load(f)

    # Option 2: JSON content
    creds_json = _env("GOOGLE_CREDENTIALS_JSON")
    if creds_json:
        try:
            return json.loads(creds_json)
        except json.JSONDecodeError as e:
            raise RuntimeError(f"Invalid GOOGLE_CREDENTIALS_JSON: {e}")

    raise RuntimeError(
        "No Google credentials configured. "
        "Set GOOGLE_CREDENTIALS_FILE or GOOGLE_CREDENTIALS_JSON in .env"
    )


@dataclass(frozen=True)
class GoogleSheetSettings:
    """Where the Google Sheets data lives."""
    spreadsheet_id: str | None
    sheet_name: str = DEFAULT_GOOGLE_SHEET
    cell_range: str | None = None
    schema: str | None = None


def get_google_sheet_settings() -> GoogleSheetSettings:
    """Read GOOGLE_SPREADSHEET_ID, GOOGLE_SHEET_NAME, GOOGLE_SHEET_RANGE, GOOGLE_SHEET_SCHEMA."""
    return GoogleSheetSettings(
        spreadsheet_id=_env("GOOGLE_SPREADSHEET_ID"),
        sheet_name=_env("GOOGLE_SHEET_NAME") or DEFAULT_GOOGLE_SHEET,
        cell_range=_env("GOOGLE_SHEET_RANGE"),
        schema=_env("GOOGLE_SHEET_SCHEMA"),
    )


def get_graph_credentials() -> tuple[str, str, str]:
    """
    Get the Azure AD app registration used for Graph access.

    Returns:
        (client_id, client_secret, tenant_id); missing values are empty strings
    """
    return (
        _env("CLIENT_ID") or "",
        _env("CLIENT_SECRET") or "",
        _env("TENANT_ID") or "",
    )


@dataclass(frozen=True)
class ExcelSettings:
    """
    Where the Excel workbook lives and how to read it.

    Either fixed coordinates (drive_id + item_id, or document_url) or a site
    plus weak identifier (document_guid and/or document_hint) for lookup.
    """
    site: str | None = None
    document_guid: str | None = None
    document_hint: str | None = None
    drive_id: str | None = None
    item_id: str | None = None
    document_url: str | None = None
    worksheet: str = DEFAULT_EXCEL_WORKSHEET
    table: str | None = None
    schema: str | None = None


def get_excel_settings() -> ExcelSettings:
    """Read the EXCEL_* and SHAREPOINT_SITE environment variables."""
    return ExcelSettings(
        site=_env("SHAREPOINT_SITE"),
        document_guid=_env("EXCEL_DOCUMENT_ID"),
        document_hint=_env("EXCEL_DOCUMENT_HINT"),
        drive_id=_env("EXCEL_DRIVE_ID"),
        item_id=_env("EXCEL_ITEM_ID"),
        document_url=_env("EXCEL_DOCUMENT_URL"),
        worksheet=_env("EXCEL_WORKSHEET") or DEFAULT_EXCEL_WORKSHEET,
        table=_env("EXCEL_TABLE"),
        schema=_env("EXCEL_SCHEMA"),
    )


def get_port() -> int:
    """Get server port from environment."""
    return int(os.environ.get("PORT", str(DEFAULT_PORT)))
