"""
Tests for the MCP tools and HTTP routes in server.py.
Handlers and clients are patched; routes are exercised through Starlette's TestClient.
"""
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from starlette.applications import Starlette
from starlette.testclient import TestClient

import server
from core.normalizer import FixedSchema
from lib.errors import AuthenticationError, http_status
from server import (
    excel_read,
    excel_locate,
    excel_worksheets,
    sheets_read,
    sheets_worksheets,
    sources_compare,
    tools_help,
)

EXCEL_OK = {
    "ok": True,
    "op": "excel.read",
    "data": {
        "source": "microsoft-excel",
        "schema": "fixed",
        "total_records": 1,
        "headers": ["data", "peso_arroba"],
        "records": [{"data": "2024-01-01", "peso_arroba": 3.5}],
    },
}
SHEETS_ERROR = {
    "ok": False,
    "op": "sheets.read",
    "error": {"code": "CONFIG_ERROR", "message": "GOOGLE_SPREADSHEET_ID environment variable is required"},
}


def excel_handler_mock(result=EXCEL_OK):
    handler = MagicMock()
    handler.read = AsyncMock(return_value=result)
    handler.locate = AsyncMock(return_value={"ok": True, "op": "excel.locate", "data": {"drive_id": "d", "item_id": "i"}})
    handler.worksheets = AsyncMock(return_value={"ok": True, "op": "excel.worksheets", "data": {"worksheets": ["Sheet1"]}})
    return handler


class TestExcelTools:
    @pytest.mark.asyncio
    async def test_excel_read(self):
        handler = excel_handler_mock()
        with patch("server.get_graph_client", AsyncMock(return_value=MagicMock())), \
             patch("server.ExcelHandler", return_value=handler) as cls:
            result = await excel_read(worksheet="Pesagens", schema="1:data,4:peso_arroba")
        assert result == EXCEL_OK
        settings = cls.call_args.args[1]
        assert settings.worksheet == "Pesagens"
        assert cls.call_args.kwargs["schema"] == FixedSchema(((1, "data"), (4, "peso_arroba")))
        handler.read.assert_awaited_once_with("excel.read")

    @pytest.mark.asyncio
    async def test_excel_read_without_token(self, assertions):
        with patch("server.get_graph_client", AsyncMock(side_effect=AuthenticationError("Failed to acquire access token"))):
            result = await excel_read()
        assertions.assert_error(result, "AUTH_ERROR", "excel.read")

    @pytest.mark.asyncio
    async def test_excel_read_rejects_bad_schema(self, assertions):
        get_graph = AsyncMock(return_value=MagicMock())
        with patch("server.get_graph_client", get_graph):
            result = await excel_read(schema="data")
        error = assertions.assert_error(result, "BAD_REQUEST", "excel.read")
        assert "data" in error["message"]
        get_graph.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_excel_locate_overrides_identifier(self):
        handler = excel_handler_mock()
        with patch("server.get_graph_client", AsyncMock(return_value=MagicMock())), \
             patch("server.ExcelHandler", return_value=handler) as cls:
            result = await excel_locate(document_id="a5cf69d6", document_hint={"hint": "historico"})
        assert result["data"] == {"drive_id": "d", "item_id": "i"}
        settings = cls.call_args.args[1]
        assert settings.document_guid == "a5cf69d6"
        assert settings.document_hint == "historico"

    @pytest.mark.asyncio
    async def test_excel_worksheets(self):
        handler = excel_handler_mock()
        with patch("server.get_graph_client", AsyncMock(return_value=MagicMock())), \
             patch("server.ExcelHandler", return_value=handler):
            result = await excel_worksheets()
        assert result["data"]["worksheets"] == ["Sheet1"]


class TestSheetsTools:
    @pytest.mark.asyncio
    async def test_sheets_read(self, mock_sheets_client, assertions):
        mock_sheets_client.get_all_values.return_value = [["Name", "Age"], ["Alice", "30"], ["", ""]]
        with patch("server.get_sheets_client", return_value=mock_sheets_client):
            result = await sheets_read(spreadsheet_id="1hLQe1TO6bfmdk3kvyV3RNkWmBuHhMfr9y01lIs7FVVI")
        data = assertions.assert_success(result, "sheets.read")
        assert data["records"] == [{"Name": "Alice", "Age": 30}]

    @pytest.mark.asyncio
    async def test_sheets_read_bad_credentials(self, assertions):
        with patch("server.get_sheets_client", side_effect=RuntimeError("No Google credentials configured.")):
            result = await sheets_read()
        assertions.assert_error(result, "CONFIG_ERROR", "sheets.read")

    @pytest.mark.asyncio
    async def test_sheets_read_rejects_duplicate_keys(self, mock_sheets_client, assertions):
        with patch("server.get_sheets_client", return_value=mock_sheets_client):
            result = await sheets_read(schema="1:peso,4:peso")
        assertions.assert_error(result, "BAD_REQUEST", "sheets.read")
        mock_sheets_client.get_all_values.assert_not_called()

    @pytest.mark.asyncio
    async def test_sheets_worksheets(self, mock_sheets_client, assertions):
        mock_sheets_client.list_worksheets.return_value = ["Página1"]
        with patch("server.get_sheets_client", return_value=mock_sheets_client):
            result = await sheets_worksheets(spreadsheet_id="1hLQe1TO6bfmdk3kvyV3RNkWmBuHhMfr9y01lIs7FVVI")
        assert assertions.assert_success(result)["worksheets"] == ["Página1"]


class TestCompareAndHelp:
    @pytest.mark.asyncio
    async def test_compare_reports_each_source(self):
        with patch("server.sheets_read", AsyncMock(return_value=SHEETS_ERROR)), \
             patch("server.excel_read", AsyncMock(return_value=EXCEL_OK)):
            result = await sources_compare()
        data = result["data"]
        assert data["microsoft_excel"] == {
            "status": "success",
            "total_records": 1,
            "sample_record": {"data": "2024-01-01", "peso_arroba": 3.5},
            "headers": ["data", "peso_arroba"],
        }
        assert data["google_sheets"]["status"] == "error"
        assert data["google_sheets"]["code"] == "CONFIG_ERROR"
        assert "timestamp" in data

    @pytest.mark.asyncio
    async def test_tools_help(self):
        result = await tools_help()
        names = [t["name"] for t in result["data"]["tools"]]
        assert "excel_read" in names
        assert "sheets_read" in names


@pytest.fixture
def client():
    return TestClient(Starlette(routes=server.routes))


class TestHttpRoutes:
    def test_root(self, client):
        r = client.get("/")
        assert r.status_code == 200
        assert "endpoints" in r.json()

    def test_healthz(self, client):
        assert client.get("/healthz").json() == {"status": "ok"}

    def test_health(self, client, monkeypatch):
        monkeypatch.delenv("GOOGLE_SPREADSHEET_ID", raising=False)
        monkeypatch.setenv("EXCEL_DRIVE_ID", "d")
        monkeypatch.setenv("EXCEL_ITEM_ID", "i")
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["services"]["google-sheets"] == "requires configuration"
        assert body["services"]["microsoft-excel"] == "available"

    def test_microsoft_excel_success(self, client):
        with patch("server.excel_read", AsyncMock(return_value=EXCEL_OK)) as tool:
            r = client.get("/microsoft-excel?worksheet=Pesagens")
        assert r.status_code == 200
        assert r.json()["data"]["total_records"] == 1
        assert tool.call_args.kwargs["worksheet"] == "Pesagens"

    def test_microsoft_excel_bad_schema_is_400(self, client):
        with patch("server.get_graph_client", AsyncMock(return_value=MagicMock())):
            r = client.get("/microsoft-excel?schema=data")
        assert r.status_code == 400
        assert r.json()["error"]["code"] == "BAD_REQUEST"

    def test_google_sheets_bad_schema_is_400(self, client):
        r = client.get("/google-sheets?schema=1-data")
        assert r.status_code == 400

    def test_google_sheets_error_is_500(self, client):
        with patch("server.sheets_read", AsyncMock(return_value=SHEETS_ERROR)):
            r = client.get("/google-sheets")
        assert r.status_code == 500
        assert r.json()["error"]["code"] == "CONFIG_ERROR"

    def test_locate_not_found_is_404(self, client):
        not_found = {"ok": False, "op": "excel.locate", "error": {"code": "NOT_FOUND", "message": "document not found"}}
        with patch("server.excel_locate", AsyncMock(return_value=not_found)):
            r = client.get("/microsoft-excel/locate?hint=historico")
        assert r.status_code == 404

    def test_compare(self, client):
        with patch("server.sheets_read", AsyncMock(return_value=SHEETS_ERROR)), \
             patch("server.excel_read", AsyncMock(return_value=EXCEL_OK)):
            r = client.get("/compare")
        assert r.status_code == 200
        assert r.json()["data"]["microsoft_excel"]["status"] == "success"


def test_http_status_mapping():
    assert http_status({"ok": True}) == 200
    assert http_status({"ok": False, "error": {"code": "BAD_REQUEST"}}) == 400
    assert http_status({"ok": False, "error": {"code": "NOT_FOUND"}}) == 404
    assert http_status({"ok": False, "error": {"code": "TRANSPORT_ERROR"}}) == 500
