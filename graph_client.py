"""
Microsoft Graph API client using httpx.
Provides client-credentials authentication, drive/item enumeration and
workbook reads for Excel files hosted in SharePoint or OneDrive.
"""
from typing import Any
from urllib.parse import quote

import httpx

from config import GRAPH_BASE_URL, GRAPH_SCOPE, LOGIN_AUTHORITY, HTTP_TIMEOUT_SECONDS, HTTP_RETRIES
from lib.common import log
from lib.errors import AuthenticationError, TransportError
from lib.sheet_utils import site_path
from lib.types import Drive, DriveItem, RawGrid


def _http_client() -> httpx.AsyncClient:
    """Create a tuned AsyncClient with redirects, retries, and sane timeouts."""
    timeout = httpx.Timeout(connect=5.0, read=HTTP_TIMEOUT_SECONDS, write=HTTP_TIMEOUT_SECONDS, pool=None)
    transport = httpx.AsyncHTTPTransport(retries=HTTP_RETRIES)
    return httpx.AsyncClient(timeout=timeout, follow_redirects=True, transport=transport)


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def _segment(value: str) -> str:
    return quote(value, safe="!,:")


async def acquire_graph_token(client_id: str, client_secret: str, tenant_id: str) -> str:
    """
    Acquire an app-only access token with the OAuth2 client-credentials grant.

    Raises:
        AuthenticationError: If settings are missing or no token is returned
    """
    if not (client_id and client_secret and tenant_id):
        raise AuthenticationError("CLIENT_ID, CLIENT_SECRET and TENANT_ID are required")

    url = f"{LOGIN_AUTHORITY}/{tenant_id}/oauth2/v2.0/token"
    form = {
        "grant_type": "client_credentials",
        "client_id": client_id,
        "client_secret": client_secret,
        "scope": GRAPH_SCOPE,
    }
    log("TOKEN POST", url)
    try:
        async with _http_client() as client:
            r = await client.post(url, data=form)
            r.raise_for_status()
            data = r.json()
    except httpx.HTTPStatusError as e:
        body = _response_body(e.response)
        raise AuthenticationError(f"token request failed ({e.response.status_code}): {body}") from e
    except (httpx.RequestError, ValueError) as e:
        raise AuthenticationError(f"token request failed: {e}") from e

    token = data.get("access_token") if isinstance(data, dict) else None
    if not token:
        raise AuthenticationError("Failed to acquire access token")
    return token


class GraphClient:
    """Read-only wrapper around the Graph drive and workbook endpoints."""

    def __init__(self, access_token: str, base_url: str = GRAPH_BASE_URL):
        """
        Initialize the client with a bearer token.

        Args:
            access_token: Opaque token for https://graph.microsoft.com
            base_url: API root, overridable for national clouds
        """
        self.base_url = base_url.rstrip("/")
        self._headers = {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/json",
        }

    # === Transport ===

    async def get(self, path: str) -> dict[str, Any]:
        """
        GET a Graph resource.

        Args:
            path: Path below the API root, or an absolute URL (nextLink)

        Raises:
            TransportError: On a non-2xx status or when no response arrives
        """
        url = path if path.startswith("http") else f"{self.base_url}{path}"
        log("GRAPH GET", url)
        try:
            async with _http_client() as client:
                r = await client.get(url, headers=self._headers)
                r.raise_for_status()
                return r.json()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"GET {path} failed",
                status_code=e.response.status_code,
                body=_response_body(e.response),
            ) from e
        except httpx.RequestError as e:
            raise TransportError(f"GET {path} failed: {e}") from e
        except ValueError as e:
            raise TransportError(f"GET {path} returned invalid JSON: {e}") from e

    async def get_collection(self, path: str) -> list[dict[str, Any]]:
        """GET a collection, following @odata.nextLink until exhausted."""
        items: list[dict[str, Any]] = []
        next_url: str | None = path
        while next_url:
            data = await self.get(next_url)
            items.extend(data.get("value") or [])
            next_url = data.get("@odata.nextLink")
        return items

    # === Sites and drives ===

    async def resolve_site(self, site: str) -> str:
        """Resolve a site URL (or hostname:/path) to its Graph site id."""
        data = await self.get(f"/sites/{site_path(site)}")
        return str(data["id"])

    async def list_drives(self, site_id: str) -> list[Drive]:
        """List all drives visible under a site."""
        rows = await self.get_collection(f"/sites/{_segment(site_id)}/drives")
        return [Drive.from_graph(r) for r in rows]

    async def list_children(self, drive_id: str) -> list[DriveItem]:
        """List immediate children of a drive's root."""
        rows = await self.get_collection(f"/drives/{_segment(drive_id)}/root/children")
        return [DriveItem.from_graph(r) for r in rows]

    async def search_drive(self, drive_id: str, query: str) -> list[DriveItem]:
        """Content search scoped to one drive."""
        q = quote(query.replace("'", "''"), safe="")
        rows = await self.get_collection(f"/drives/{_segment(drive_id)}/root/search(q='{q}')")
        return [DriveItem.from_graph(r) for r in rows]

    async def get_item(self, drive_id: str, item_id: str) -> DriveItem:
        """Fetch one item by id; TransportError (404) if it does not exist."""
        data = await self.get(f"/drives/{_segment(drive_id)}/items/{_segment(item_id)}")
        return DriveItem.from_graph(data)

    # === Workbook ===

    def _workbook(self, drive_id: str, item_id: str) -> str:
        return f"/drives/{_segment(drive_id)}/items/{_segment(item_id)}/workbook"

    async def list_worksheets(self, drive_id: str, item_id: str) -> list[str]:
        """
        List worksheet names of a workbook.

        Advisory: failures are logged and an empty list is returned.
        """
        try:
            rows = await self.get_collection(f"{self._workbook(drive_id, item_id)}/worksheets")
        except TransportError as e:
            log("list_worksheets failed (non-fatal):", e, e.body)
            return []
        return [str(r.get("name", "")) for r in rows]

    async def get_used_range(self, drive_id: str, item_id: str, worksheet: str) -> RawGrid:
        """Read the used range of a worksheet as a raw grid."""
        data = await self.get(
            f"{self._workbook(drive_id, item_id)}/worksheets/{quote(worksheet, safe='')}/usedRange"
        )
        return data.get("values") or []

    async def get_table_rows(self, drive_id: str, item_id: str, worksheet: str, table: str) -> RawGrid:
        """Read the data rows of a named table as a raw grid (no header row)."""
        rows = await self.get_collection(
            f"{self._workbook(drive_id, item_id)}/worksheets/{quote(worksheet, safe='')}"
            f"/tables/{quote(table, safe='')}/rows"
        )
        grid: RawGrid = []
        for r in rows:
            values = r.get("values") or [[]]
            grid.append(values[0])
        return grid


async def get_graph_client() -> GraphClient:
    """
    Build a GraphClient from environment settings.
    A fresh token is acquired on every call.
    """
    from env_loader import get_graph_credentials
    client_id, client_secret, tenant_id = get_graph_credentials()
    token = await acquire_graph_token(client_id, client_secret, tenant_id)
    return GraphClient(token)
