"""
Pytest configuration and fixtures for bridge tests.
"""
import os
import pytest
from unittest.mock import MagicMock

# Set test environment variables before importing anything
os.environ.setdefault("GOOGLE_CREDENTIALS_JSON", '{"type": "service_account", "project_id": "test"}')
os.environ.setdefault("CLIENT_ID", "test-client")
os.environ.setdefault("CLIENT_SECRET", "test-secret")
os.environ.setdefault("TENANT_ID", "test-tenant")

from lib.types import Drive, DriveItem  # noqa: E402

GRAPH = "https://graph.microsoft.com/v1.0"
TOKEN_URL = "https://login.microsoftonline.com/test-tenant/oauth2/v2.0/token"


# ========== Response Assertion Helpers ==========

class ResponseAssertions:
    """Helper class for asserting API response structures."""

    @staticmethod
    def assert_success(response: dict, op: str | None = None) -> dict:
        """Assert response is successful and return data."""
        assert response.get("ok") is True, f"Expected success, got: {response}"
        if op:
            assert response.get("op") == op, f"Expected op={op}, got {response.get('op')}"
        return response.get("data", {})

    @staticmethod
    def assert_error(response: dict, code: str, op: str | None = None) -> dict:
        """Assert response is an error with given code and return the error."""
        assert response.get("ok") is False, f"Expected error, got success: {response}"
        assert response.get("error", {}).get("code") == code, \
            f"Expected error code {code}, got {response.get('error', {}).get('code')}"
        if op:
            assert response.get("op") == op, f"Expected op={op}, got {response.get('op')}"
        return response.get("error", {})


@pytest.fixture
def assertions():
    """Fixture providing response assertion helpers."""
    return ResponseAssertions()


# ========== Fake drive directory ==========

class FakeDirectory:
    """
    In-memory stand-in for GraphClient's drive calls.

    children/search/items are keyed by drive id; a value that is an
    Exception instance is raised instead of returned. Every call is recorded
    in `calls` as (method, drive_id).
    """

    def __init__(self, drives, children=None, search=None, items=None):
        self.drives = drives
        self.children = children or {}
        self.search = search or {}
        self.items = items or {}
        self.calls: list[tuple[str, str]] = []

    @staticmethod
    def _result(value):
        if isinstance(value, Exception):
            raise value
        return value

    async def list_drives(self, site_id):
        self.calls.append(("list_drives", site_id))
        return self._result(self.drives)

    async def list_children(self, drive_id):
        self.calls.append(("list_children", drive_id))
        return self._result(self.children.get(drive_id, []))

    async def search_drive(self, drive_id, query):
        self.calls.append(("search_drive", drive_id))
        return self._result(self.search.get(drive_id, []))

    async def get_item(self, drive_id, item_id):
        from lib.errors import TransportError
        self.calls.append(("get_item", drive_id))
        found = self.items.get(drive_id, {}).get(item_id)
        if found is None:
            raise TransportError(f"item {item_id} not found", status_code=404)
        return self._result(found)


@pytest.fixture
def three_drives():
    return [
        Drive(id="drive-1", name="Documents", drive_type="documentLibrary"),
        Drive(id="drive-2", name="Planilhas", drive_type="documentLibrary"),
        Drive(id="drive-3", name="Arquivo", drive_type="documentLibrary"),
    ]


@pytest.fixture
def historico_item():
    return DriveItem(
        id="01ABCDEFa5cf69d6228847c7",
        name="historico_pesagens.xlsx",
        web_url="https://contoso.sharepoint.com/sites/fazenda/Planilhas/historico_pesagens.xlsx",
        size=20480,
    )


@pytest.fixture
def mock_sheets_client():
    """
    Mock SheetsClient for unit tests.
    Returns a MagicMock that can be configured per test.
    """
    mock = MagicMock()
    mock.get_all_values.return_value = []
    mock.get_range.return_value = []
    mock.get_info.return_value = {"title": "Test", "sheets": []}
    mock.list_worksheets.return_value = []
    return mock


@pytest.fixture
def sample_sheet_values():
    """Sample Google Sheets used range with a header row."""
    return [
        ["Data", "Brinco", "Sexo", "Raça", "Peso (@)"],
        ["2024-01-01", "1001", "M", "Nelore", "15,5"],
        ["", "", "", "", ""],
        ["2024-01-08", "1002", "F", "Angus", "12"],
        ["2024-01-15", "1003", "M"],
    ]


@pytest.fixture
def sample_used_range():
    """Sample Excel usedRange values: row id column first, mixed types."""
    return [
        ["id1", "2024-01-01", "M", "Boi", "3,5"],
        ["id2", "2024-01-02", "F", "Vaca", 12.25],
        ["", "", "", "", ""],
        ["id4", "2024-01-04"],
    ]
