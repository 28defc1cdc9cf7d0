"""
Excel handler class.
Reads a worksheet of a workbook hosted in SharePoint/OneDrive through
Microsoft Graph and returns it as normalized records.

The workbook is addressed either by fixed coordinates from configuration or
by running the DocumentLocator over the site's drives.
"""
from __future__ import annotations

from typing import Any, ClassVar

from config import EXCEL_FIXED_COLUMNS
from core.base_handler import BaseHandler
from core.locator import DocumentLocator
from core.normalizer import FixedSchema, HeaderSchema
from env_loader import ExcelSettings
from graph_client import GraphClient
from lib.common import log, normalize
from lib.errors import error_response
from lib.sheet_utils import parse_office_url
from lib.types import RawGrid, ResolvedDocumentCoordinate, WeakDocumentIdentifier


class ExcelHandler(BaseHandler):
    """
    Handler for Excel workbooks behind Microsoft Graph.

    Extends BaseHandler with:
    - Coordinate resolution (fixed ids, Excel web URL, or locator lookup)
    - Advisory worksheet-name validation
    - Used-range or table-rows reads
    """

    SOURCE: ClassVar[str] = "microsoft-excel"

    def __init__(
        self,
        graph: GraphClient,
        settings: ExcelSettings,
        schema: Any = None,
    ) -> None:
        """
        Initialize ExcelHandler.

        Args:
            graph: Authenticated GraphClient
            settings: Document address and read options
            schema: Override for settings.schema
        """
        if schema is None:
            schema = settings.schema
        if schema is None:
            # Table rows carry no header row
            schema = FixedSchema.of(EXCEL_FIXED_COLUMNS) if settings.table else HeaderSchema()
        super().__init__(schema)
        self.graph = graph
        self.settings = settings
        self.coordinate: ResolvedDocumentCoordinate | None = None

    @property
    def identifier(self) -> WeakDocumentIdentifier:
        return WeakDocumentIdentifier(
            guid_fragment=self.settings.document_guid or "",
            name_hint=self.settings.document_hint or "",
        )

    def _fixed_coordinate(self) -> ResolvedDocumentCoordinate | None:
        s = self.settings
        if s.drive_id and s.item_id:
            return ResolvedDocumentCoordinate(drive_id=s.drive_id, item_id=s.item_id)
        parsed = parse_office_url(s.document_url)
        if parsed:
            return ResolvedDocumentCoordinate(drive_id=parsed[0], item_id=parsed[1])
        return None

    # === Resolution ===

    async def lookup(self) -> ResolvedDocumentCoordinate:
        """
        Search the configured site's drives for the workbook.

        Fixed coordinates are not consulted.

        Raises:
            RuntimeError: If no site is configured
            NotFoundError: If the locator exhausts every drive
        """
        if not self.settings.site:
            raise RuntimeError("SHAREPOINT_SITE is required to locate the workbook")
        site_id = await self.graph.resolve_site(self.settings.site)
        return await DocumentLocator(self.graph).locate(site_id, self.identifier)

    async def resolve(self) -> ResolvedDocumentCoordinate:
        """
        Resolve (once) the workbook's storage coordinates.

        Fixed coordinates win over a lookup.

        Raises:
            RuntimeError: If neither fixed coordinates nor a site is configured
            NotFoundError: If the locator exhausts every drive
        """
        if self.coordinate is not None:
            return self.coordinate

        coordinate = self._fixed_coordinate()
        if coordinate is None:
            if not self.settings.site:
                raise RuntimeError(
                    "Set EXCEL_DRIVE_ID and EXCEL_ITEM_ID, EXCEL_DOCUMENT_URL, "
                    "or SHAREPOINT_SITE with EXCEL_DOCUMENT_ID/EXCEL_DOCUMENT_HINT"
                )
            coordinate = await self.lookup()

        self.coordinate = coordinate
        return coordinate

    async def check_worksheet(self, coordinate: ResolvedDocumentCoordinate) -> list[str]:
        """List worksheets and warn when the configured one is missing. Never raises."""
        names = await self.graph.list_worksheets(coordinate.drive_id, coordinate.item_id)
        wanted = normalize(self.settings.worksheet)
        if names and wanted not in [normalize(n) for n in names]:
            log(f"worksheet {self.settings.worksheet!r} not found; available: {names}")
        return names

    # === Loading ===

    async def load_grid(self) -> RawGrid:
        coordinate = await self.resolve()
        await self.check_worksheet(coordinate)
        if self.settings.table:
            return await self.graph.get_table_rows(
                coordinate.drive_id, coordinate.item_id, self.settings.worksheet, self.settings.table
            )
        return await self.graph.get_used_range(
            coordinate.drive_id, coordinate.item_id, self.settings.worksheet
        )

    # === Operations ===

    async def locate(self) -> dict[str, Any]:
        """Run the drive search for the identifier and report what it found."""
        op = "excel.locate"
        try:
            coordinate = await self.lookup()
        except Exception as e:
            log(f"{op} failed:", e)
            return error_response(op, e)
        return self._ok(op, coordinate.as_dict())

    async def worksheets(self) -> dict[str, Any]:
        """List worksheet names of the resolved workbook."""
        op = "excel.worksheets"
        try:
            coordinate = await self.resolve()
        except Exception as e:
            log(f"{op} failed:", e)
            return error_response(op, e)
        names = await self.graph.list_worksheets(coordinate.drive_id, coordinate.item_id)
        return self._ok(op, {
            **coordinate.as_dict(),
            "worksheets": names,
            "configured": self.settings.worksheet,
        })
