"""Bigstock image search API adapter."""

from typing import Any

import httpx
from loguru import logger

from picbot.search.models import ImageHit, SearchPage


class SearchError(Exception):
    """Raised when the image search request fails or returns an error."""

    def __init__(self, message: str, *, status_code: int | None = None, detail: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class ImageSearchClient:
    """Thin async client for the ``/{account}/search/`` endpoint."""

    def __init__(
        self,
        *,
        account_id: str,
        api_base: str = "http://api.bigstockphoto.com/2",
        timeout: float = 10.0,
    ):
        self.account_id = account_id
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout

    @property
    def search_url(self) -> str:
        return f"{self.api_base}/{self.account_id}/search"

    async def search(self, *, query: str, limit: int, thumb_sizes: list[str]) -> SearchPage:
        """Run one search and normalize the returned images."""
        params = {
            "q": query,
            "limit": limit,
            "thumb_size": ",".join(thumb_sizes),
        }
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(self.search_url, params=params, timeout=self.timeout)
        except httpx.HTTPError as e:
            raise SearchError(f"search request failed: {e}", detail=str(e)) from e

        try:
            payload = response.json()
        except ValueError as e:
            raise SearchError(
                "search response is not valid JSON",
                status_code=response.status_code,
                detail=str(e),
            ) from e

        if response.status_code != 200:
            message = _error_message(payload)
            raise SearchError(
                f"search API responded with {response.status_code}",
                status_code=response.status_code,
                detail=message,
            )

        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            raise SearchError(
                "search response has no data object",
                status_code=response.status_code,
                detail=type(payload).__name__,
            )
        paging = data.get("paging")
        if not isinstance(paging, dict):
            paging = {}
        raw_images = data.get("images")
        if not isinstance(raw_images, list):
            raw_images = []
        images = [_to_hit(item) for item in raw_images if isinstance(item, dict)]
        logger.debug("Search for {!r} returned {} images", query, len(images))
        return SearchPage(
            images=images,
            items=_count(paging.get("items"), len(images)),
            total_items=_count(paging.get("total_items"), 0),
        )


def _count(value: Any, default: int) -> int:
    try:
        return int(value) if value else default
    except (TypeError, ValueError):
        return default


def _error_message(payload: Any) -> str:
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict):
            return str(error.get("message", ""))
    return ""


def _to_hit(item: dict[str, Any]) -> ImageHit:
    def _thumb(key: str) -> str:
        thumb = item.get(key)
        return str(thumb.get("url", "")) if isinstance(thumb, dict) else ""

    return ImageHit(
        id=str(item.get("id", "")),
        title=str(item.get("title", "")),
        small_thumb=_thumb("small_thumb"),
        large_thumb=_thumb("large_thumb"),
    )
