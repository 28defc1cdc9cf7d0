"""
Sheets Bridge Server

Exposes Google Sheets and Excel (SharePoint/OneDrive) worksheets as
normalized JSON records, as MCP tools under /mcp and as plain HTTP routes.
"""
import dataclasses
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from mcp.server.fastmcp import FastMCP
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from core.normalizer import FieldSchema, parse_schema
from env_loader import (
    get_excel_settings,
    get_google_sheet_settings,
    get_graph_credentials,
    get_port,
)
from graph_client import get_graph_client
from handlers.excel import ExcelHandler
from handlers.sheets import SheetsHandler
from lib.common import log
from lib.errors import AuthenticationError, bad_request, error_response, http_status
from lib.input_parser import coerce_str
from sheets_client import get_sheets_client

mcp = FastMCP("sheets-bridge")


def _overrides(settings: Any, **values: Any) -> Any:
    """Copy settings with the non-empty values replaced."""
    changes = {k: v for k, v in values.items() if v not in (None, "")}
    return dataclasses.replace(settings, **changes) if changes else settings


def _request_schema(schema: Any) -> FieldSchema | None:
    """Parse a caller-supplied schema. None or "" keeps the configured default."""
    if schema is None or schema == "":
        return None
    return parse_schema(schema)


async def _excel_handler(op: str, schema: Any = None, **overrides: Any) -> ExcelHandler | dict:
    """Build an ExcelHandler, or return an error response if no token is available."""
    settings = _overrides(get_excel_settings(), **overrides)
    try:
        graph = await get_graph_client()
    except AuthenticationError as e:
        log(f"{op} failed:", e)
        return error_response(op, e)
    return ExcelHandler(graph, settings, schema=schema)


def _sheets_handler(op: str, schema: Any = None, **overrides: Any) -> SheetsHandler | dict:
    """Build a SheetsHandler, or return an error response if credentials are unusable."""
    settings = _overrides(get_google_sheet_settings(), **overrides)
    try:
        sheets = get_sheets_client()
    except (RuntimeError, ValueError) as e:
        log(f"{op} failed:", e)
        return error_response(op, e)
    return SheetsHandler(sheets, settings, schema=schema)


# ===== Excel Tools =====

@mcp.tool()
async def excel_read(
    worksheet: Any = None,
    table: Any = None,
    schema: Any = None,
    document_id: Any = None,
    document_hint: Any = None,
) -> dict:
    """Read an Excel worksheet (SharePoint/OneDrive) as normalized records.

    Args:
    - worksheet: worksheet name (default EXCEL_WORKSHEET)
    - table: table name; rows of the table are read instead of the used range
    - schema: "header", "none", or a column mapping such as "1:data,4:peso_arroba"
    - document_id: GUID fragment of the workbook (default EXCEL_DOCUMENT_ID)
    - document_hint: keyword in the workbook's file name (default EXCEL_DOCUMENT_HINT)

    Returns:
    { ok:true, op:"excel.read", data:{ source, schema, total_records, headers, records:[{...}] } }
    """
    op = "excel.read"
    try:
        schema = _request_schema(schema)
    except ValueError as e:
        return bad_request(op, str(e))
    handler = await _excel_handler(
        op,
        schema=schema,
        worksheet=coerce_str(worksheet, ("worksheet", "name")),
        table=coerce_str(table, ("table", "name")),
        document_guid=coerce_str(document_id, ("document_id", "id")),
        document_hint=coerce_str(document_hint, ("document_hint", "hint")),
    )
    if isinstance(handler, dict):
        return handler
    return await handler.read(op)


@mcp.tool()
async def excel_locate(document_id: Any = None, document_hint: Any = None) -> dict:
    """Search the site's drives (SHAREPOINT_SITE) for the Excel workbook.

    Runs the locator even when fixed EXCEL_DRIVE_ID/EXCEL_ITEM_ID are configured.

    Returns:
    { ok:true, op:"excel.locate", data:{ drive_id, item_id } }
    """
    op = "excel.locate"
    handler = await _excel_handler(
        op,
        document_guid=coerce_str(document_id, ("document_id", "id")),
        document_hint=coerce_str(document_hint, ("document_hint", "hint")),
    )
    if isinstance(handler, dict):
        return handler
    return await handler.locate()


@mcp.tool()
async def excel_worksheets() -> dict:
    """List worksheet names of the configured Excel workbook (diagnostic)."""
    op = "excel.worksheets"
    handler = await _excel_handler(op)
    if isinstance(handler, dict):
        return handler
    return await handler.worksheets()


# ===== Google Sheets Tools =====

@mcp.tool()
async def sheets_read(
    spreadsheet_id: Any = None,
    sheet_name: Any = None,
    cell_range: Any = None,
    schema: Any = None,
) -> dict:
    """Read a Google Sheets worksheet as normalized records.

    Args:
    - spreadsheet_id: id or URL (default GOOGLE_SPREADSHEET_ID)
    - sheet_name: worksheet title (default GOOGLE_SHEET_NAME or "Página1")
    - cell_range: A1 range such as "A1:I169"; whole used range if omitted
    - schema: "header" (default), "none", or a column mapping
    """
    op = "sheets.read"
    try:
        schema = _request_schema(schema)
    except ValueError as e:
        return bad_request(op, str(e))
    handler = _sheets_handler(
        op,
        schema=schema,
        spreadsheet_id=coerce_str(spreadsheet_id, ("spreadsheet_id", "id")),
        sheet_name=coerce_str(sheet_name, ("sheet_name", "name")),
        cell_range=coerce_str(cell_range, ("cell_range", "range")),
    )
    if isinstance(handler, dict):
        return handler
    return await handler.read(op)


@mcp.tool()
async def sheets_worksheets(spreadsheet_id: Any = None) -> dict:
    """List worksheet titles of a Google spreadsheet (diagnostic)."""
    op = "sheets.worksheets"
    handler = _sheets_handler(
        op,
        spreadsheet_id=coerce_str(spreadsheet_id, ("spreadsheet_id", "id")),
    )
    if isinstance(handler, dict):
        return handler
    return handler.worksheets()


# ===== Comparison =====

def _summarize(result: dict) -> dict[str, Any]:
    if result.get("ok"):
        data = result.get("data", {})
        records = data.get("records") or []
        return {
            "status": "success",
            "total_records": data.get("total_records", len(records)),
            "sample_record": records[0] if records else None,
            "headers": data.get("headers", []),
        }
    error = result.get("error", {})
    return {"status": "error", "code": error.get("code"), "message": error.get("message")}


@mcp.tool()
async def sources_compare() -> dict:
    """Read both sources and summarize each independently."""
    google = await sheets_read()
    excel = await excel_read()
    return {
        "ok": True,
        "op": "sources.compare",
        "data": {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "google_sheets": _summarize(google),
            "microsoft_excel": _summarize(excel),
        },
    }


@mcp.tool()
async def tools_help() -> dict:
    """List the tools exposed by this server."""
    tools = [
        {"name": "excel_read", "desc": "Excel worksheet as records", "args": {"worksheet": "string", "table": "string", "schema": "string"}},
        {"name": "excel_locate", "desc": "Locate the workbook in the site's drives", "args": {"document_id": "string", "document_hint": "string"}},
        {"name": "excel_worksheets", "desc": "Worksheet names of the workbook", "args": {}},
        {"name": "sheets_read", "desc": "Google Sheets worksheet as records", "args": {"spreadsheet_id": "string", "sheet_name": "string", "cell_range": "string", "schema": "string"}},
        {"name": "sheets_worksheets", "desc": "Worksheet titles of the spreadsheet", "args": {"spreadsheet_id": "string"}},
        {"name": "sources_compare", "desc": "Summary of both sources", "args": {}},
    ]
    return {"ok": True, "op": "tools.help", "data": {"tools": tools}}


# ===== HTTP Routes =====

def _json(result: dict) -> JSONResponse:
    return JSONResponse(result, status_code=http_status(result))


async def root(request: Request) -> JSONResponse:
    return JSONResponse({
        "message": "Sheets Bridge - Microsoft Excel & Google Sheets reader",
        "endpoints": [
            "GET /microsoft-excel - Excel worksheet records",
            "GET /microsoft-excel/locate - Excel workbook coordinates",
            "GET /microsoft-excel/worksheets - Excel worksheet names",
            "GET /google-sheets - Google Sheets records",
            "GET /google-sheets/worksheets - Google Sheets worksheet titles",
            "GET /compare - Summary of both sources",
            "GET /health - Service status",
            "POST /mcp - MCP endpoint",
        ],
    })


async def health(request: Request) -> JSONResponse:
    google = get_google_sheet_settings()
    excel = get_excel_settings()
    excel_ready = all(get_graph_credentials()) and bool(
        (excel.drive_id and excel.item_id) or excel.document_url or excel.site
    )
    return JSONResponse({
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": {
            "google-sheets": "available" if google.spreadsheet_id else "requires configuration",
            "microsoft-excel": "available" if excel_ready else "requires configuration",
        },
    })


async def healthz(request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok"})


async def google_sheets_route(request: Request) -> JSONResponse:
    q = request.query_params
    return _json(await sheets_read(
        spreadsheet_id=q.get("spreadsheet_id"),
        sheet_name=q.get("sheet"),
        cell_range=q.get("range"),
        schema=q.get("schema"),
    ))


async def google_sheets_worksheets_route(request: Request) -> JSONResponse:
    return _json(await sheets_worksheets(spreadsheet_id=request.query_params.get("spreadsheet_id")))


async def microsoft_excel_route(request: Request) -> JSONResponse:
    q = request.query_params
    return _json(await excel_read(
        worksheet=q.get("worksheet"),
        table=q.get("table"),
        schema=q.get("schema"),
    ))


async def microsoft_excel_locate_route(request: Request) -> JSONResponse:
    q = request.query_params
    return _json(await excel_locate(document_id=q.get("document_id"), document_hint=q.get("hint")))


async def microsoft_excel_worksheets_route(request: Request) -> JSONResponse:
    return _json(await excel_worksheets())


async def compare_route(request: Request) -> JSONResponse:
    return _json(await sources_compare())


routes = [
    Route("/", root),
    Route("/health", health),
    Route("/healthz", healthz),
    Route("/google-sheets", google_sheets_route),
    Route("/google-sheets/worksheets", google_sheets_worksheets_route),
    Route("/microsoft-excel", microsoft_excel_route),
    Route("/microsoft-excel/locate", microsoft_excel_locate_route),
    Route("/microsoft-excel/worksheets", microsoft_excel_worksheets_route),
    Route("/compare", compare_route),
]


def create_app():
    """Combined ASGI app: MCP under /mcp, JSON routes everywhere else."""
    mcp_app = mcp.streamable_http_app()

    @asynccontextmanager
    async def lifespan(app):
        async with mcp.session_manager.run():
            yield

    starlette_app = Starlette(routes=routes, lifespan=lifespan)

    async def combined_app(scope, receive, send):
        path = scope.get("path", "/")
        if path.startswith("/mcp"):
            await mcp_app(scope, receive, send)
        else:
            await starlette_app(scope, receive, send)

    return combined_app


# ===== Server Entry Point =====

if __name__ == "__main__":
    import uvicorn

    port = get_port()
    log(f"Starting server on port {port}")
    uvicorn.run(create_app(), host="0.0.0.0", port=port, lifespan="on")
