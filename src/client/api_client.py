"""HTTP client for the bookmark API."""
from collections.abc import Callable
from typing import Any, TypeVar
from urllib.parse import quote

import httpx

from schemas.bookmark import Bookmark

T = TypeVar("T")


def _get_headers(token: str) -> dict[str, str]:
    """Get common headers for authenticated API requests."""
    return {"Authorization": f"Bearer {token}"}


def _parse_body(response: httpx.Response, parse: Callable[[Any], T]) -> T:
    """
    Check the status, then decode the JSON body with ``parse``.

    A 2xx body that is not the expected JSON (e.g. a proxy's HTML page) raises
    ``httpx.DecodingError`` so callers only ever handle ``httpx.HTTPError``.
    """
    response.raise_for_status()
    try:
        return parse(response.json())
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        raise httpx.DecodingError(
            f"Unexpected response body from {response.request.method} {response.request.url.path}",
            request=response.request,
        ) from e


class BookmarksApiClient:
    """
    Thin async wrapper over the bookmark endpoints.

    Every method raises ``httpx.HTTPStatusError`` for non-2xx responses,
    ``httpx.DecodingError`` for a 2xx body it cannot read, and
    ``httpx.RequestError`` when the API cannot be reached.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @classmethod
    def create(cls, base_url: str, timeout: float = 30.0) -> "BookmarksApiClient":
        """Build a client that owns its own connection pool."""
        return cls(httpx.AsyncClient(base_url=base_url, timeout=timeout))

    async def aclose(self) -> None:
        await self._client.aclose()

    async def health(self) -> dict[str, Any]:
        response = await self._client.get("/health")
        return _parse_body(response, dict)

    async def list_bookmarks(self, token: str) -> list[Bookmark]:
        """Fetch every bookmark of the token's user."""
        response = await self._client.get("/bookmarks", headers=_get_headers(token))
        return _parse_body(
            response,
            lambda body: [Bookmark.model_validate(b) for b in body["bookmarks"]],
        )

    async def create_bookmark(self, token: str, url: str, title: str) -> Bookmark:
        """Create a bookmark and return the server's record."""
        response = await self._client.post(
            "/bookmarks",
            json={"url": url, "title": title},
            headers=_get_headers(token),
        )
        return _parse_body(response, lambda body: Bookmark.model_validate(body["bookmark"]))

    async def delete_bookmark(self, token: str, bookmark_id: str) -> None:
        """Delete a bookmark by id."""
        response = await self._client.delete(
            f"/bookmarks/{quote(bookmark_id, safe='')}",
            headers=_get_headers(token),
        )
        response.raise_for_status()
