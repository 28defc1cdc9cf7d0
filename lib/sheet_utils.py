"""
Sheet and document-address utility functions.
"""
import re
from typing import Any
from urllib.parse import parse_qs, urlparse

from config import SPREADSHEET_EXTENSIONS


def col_letter_to_index(letter: str) -> int:
    """
    Convert column letter(s) to 0-based index.
    A -> 0, B -> 1, ..., Z -> 25, AA -> 26, etc.
    """
    result = 0
    for char in letter.upper():
        result = result * 26 + (ord(char) - ord("A") + 1)
    return result - 1


def is_spreadsheet_name(name: Any) -> bool:
    """True when a file name carries a spreadsheet extension."""
    if not name:
        return False
    return str(name).lower().endswith(SPREADSHEET_EXTENSIONS)


def extract_spreadsheet_id(url: Any) -> str | None:
    """
    Extract spreadsheet ID from a Google Sheets URL or raw ID string.

    Args:
        url: A Google Sheets URL or raw spreadsheet ID

    Returns:
        The spreadsheet ID if found (at least 25 chars), None otherwise
    """
    if not url:
        return None
    match = re.search(r"[-\w]{25,}", str(url))
    return match.group(0) if match else None


def parse_office_url(url: Any) -> tuple[str, str] | None:
    """
    Extract (drive_id, item_id) from an Excel-for-the-web link.

    Links look like .../open/onedrive/?docId=<DRIVE>%21<ITEM>&driveId=<DRIVE>.
    Returns None when the link does not carry both parts.
    """
    if not url:
        return None
    query = parse_qs(urlparse(str(url)).query)
    doc_id = (query.get("docId") or [""])[0]
    drive_id = (query.get("driveId") or [""])[0]
    if "!" in doc_id:
        doc_drive, item_id = doc_id.split("!", 1)
        drive_id = drive_id or doc_drive
    else:
        item_id = doc_id
    if drive_id and item_id:
        return drive_id, item_id
    return None


def site_path(site: str) -> str:
    """
    Turn a site URL into a Graph site address.

    https://contoso.sharepoint.com/sites/finance -> contoso.sharepoint.com:/sites/finance
    A value without a scheme is assumed to already be a site id.
    """
    parsed = urlparse(site.strip())
    if not parsed.scheme or not parsed.netloc:
        return site.strip()
    path = parsed.path.rstrip("/")
    if not path:
        return f"{parsed.netloc}"
    return f"{parsed.netloc}:{path}"
