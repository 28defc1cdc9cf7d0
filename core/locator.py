"""
Document locator.

Finds a workbook's (drive id, item id) inside a site when only a weak
identifier is known: a GUID fragment that may appear in the item id or URL,
and/or a keyword expected in the file name.

Drives are searched in listing order. For each drive three strategies run in
order (root listing, keyword search, direct fetch) and the first hit across
the whole drive x strategy space wins. A TransportError inside a strategy is
logged and the search moves on.
"""
from __future__ import annotations

from typing import Awaitable, Callable, Iterable, Protocol

from lib.common import log, normalize
from lib.errors import NotFoundError, TransportError
from lib.sheet_utils import is_spreadsheet_name
from lib.types import Drive, DriveItem, ResolvedDocumentCoordinate, WeakDocumentIdentifier


class DriveDirectory(Protocol):
    """Remote calls the locator needs. GraphClient satisfies this."""

    async def list_drives(self, site_id: str) -> list[Drive]:
        ...

    async def list_children(self, drive_id: str) -> list[DriveItem]:
        ...

    async def search_drive(self, drive_id: str, query: str) -> list[DriveItem]:
        ...

    async def get_item(self, drive_id: str, item_id: str) -> DriveItem:
        ...


Strategy = Callable[[Drive, WeakDocumentIdentifier], Awaitable[DriveItem | None]]


def matches_identifier(item: DriveItem, identifier: WeakDocumentIdentifier) -> bool:
    """
    Permissive match of one item against a weak identifier.

    True if the GUID fragment occurs in the item id, or the name hint occurs
    in the item name, or the GUID fragment occurs in the item URL. All
    comparisons ignore case; empty identifier parts never match.
    """
    guid = normalize(identifier.guid_fragment)
    hint = normalize(identifier.name_hint)
    if guid and guid in normalize(item.id):
        return True
    if hint and hint in normalize(item.name):
        return True
    if guid and guid in normalize(item.web_url):
        return True
    return False


def first_match(items: Iterable[DriveItem], identifier: WeakDocumentIdentifier) -> DriveItem | None:
    """First item in listing order that matches, or None."""
    return next((it for it in items if matches_identifier(it, identifier)), None)


class DocumentLocator:
    """Resolves a weak identifier to storage coordinates."""

    def __init__(self, directory: DriveDirectory) -> None:
        self.directory = directory
        self.strategies: list[tuple[str, Strategy]] = [
            ("root_listing", self._match_root_listing),
            ("keyword_search", self._match_keyword_search),
            ("direct_access", self._match_direct_access),
        ]

    # === Strategies ===

    async def _match_root_listing(self, drive: Drive, identifier: WeakDocumentIdentifier) -> DriveItem | None:
        children = await self.directory.list_children(drive.id)
        workbooks = [it for it in children if is_spreadsheet_name(it.name)]
        return first_match(workbooks, identifier)

    async def _match_keyword_search(self, drive: Drive, identifier: WeakDocumentIdentifier) -> DriveItem | None:
        if not identifier.name_hint:
            return None
        results = await self.directory.search_drive(drive.id, identifier.name_hint)
        return first_match(results, identifier)

    async def _match_direct_access(self, drive: Drive, identifier: WeakDocumentIdentifier) -> DriveItem | None:
        if not identifier.guid_fragment:
            return None
        return await self.directory.get_item(drive.id, identifier.guid_fragment)

    # === Driver ===

    async def locate(self, site_id: str, identifier: WeakDocumentIdentifier) -> ResolvedDocumentCoordinate:
        """
        Find the document described by identifier among the site's drives.

        Raises:
            NotFoundError: No drive and no strategy produced a match
            TransportError: The drive listing itself failed
        """
        if not identifier.guid_fragment and not identifier.name_hint:
            raise NotFoundError("document identifier is empty")

        drives = await self.directory.list_drives(site_id)
        log(f"locate: {len(drives)} drive(s) under site {site_id}")

        for drive in drives:
            for name, strategy in self.strategies:
                try:
                    item = await strategy(drive, identifier)
                except TransportError as e:
                    log(f"locate: {name} failed on drive {drive.name or drive.id} (non-fatal):", e)
                    continue
                if item is not None:
                    log(f"locate: {name} matched {item.name or item.id} in drive {drive.name or drive.id}")
                    return ResolvedDocumentCoordinate(drive_id=drive.id, item_id=item.id)

        raise NotFoundError(
            f"document not found in any drive "
            f"(guid={identifier.guid_fragment!r}, hint={identifier.name_hint!r})"
        )
