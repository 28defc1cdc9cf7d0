"""
Type definitions for the bridge.
Raw sheet data and the remote drive entities.
"""
from dataclasses import dataclass
from typing import Any


# Sheet data types
CellValue = str | int | float | bool | None
RawRow = list[CellValue]
RawGrid = list[RawRow]
TypedValue = str | int | float
NormalizedRecord = dict[str, TypedValue]


@dataclass(frozen=True)
class Drive:
    """A storage container (document library) within a site."""
    id: str
    name: str = ""
    drive_type: str = ""

    @classmethod
    def from_graph(cls, payload: dict[str, Any]) -> "Drive":
        return cls(
            id=str(payload.get("id", "")),
            name=str(payload.get("name") or ""),
            drive_type=str(payload.get("driveType") or ""),
        )


@dataclass(frozen=True)
class DriveItem:
    """A file or folder entry inside a drive."""
    id: str
    name: str = ""
    web_url: str = ""
    size: int = 0

    @classmethod
    def from_graph(cls, payload: dict[str, Any]) -> "DriveItem":
        return cls(
            id=str(payload.get("id", "")),
            name=str(payload.get("name") or ""),
            web_url=str(payload.get("webUrl") or ""),
            size=int(payload.get("size") or 0),
        )


@dataclass(frozen=True)
class WeakDocumentIdentifier:
    """
    Approximate reference to a document.

    guid_fragment may appear inside an item id or URL; name_hint is a
    keyword expected in the file name. Either may be empty.
    """
    guid_fragment: str = ""
    name_hint: str = ""


@dataclass(frozen=True)
class ResolvedDocumentCoordinate:
    """Storage address of a located document."""
    drive_id: str
    item_id: str

    def as_dict(self) -> dict[str, str]:
        return {"drive_id": self.drive_id, "item_id": self.item_id}
