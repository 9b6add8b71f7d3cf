"""
Unsplash photo search provider.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from relay.exceptions import APIError
from relay.utils.logging import get_logger
from ..types import ImageResult, ImageResults, ImageSearchParams

logger = get_logger(__name__)


class UnsplashImageSearch:
    def __init__(self, client: httpx.AsyncClient, access_key: str, base_url: str = "https://api.unsplash.com"):
        self.client = client
        self.access_key = access_key
        self.endpoint = base_url.rstrip("/") + "/search/photos"

    async def search(self, params: ImageSearchParams) -> ImageResults:
        """Query /search/photos and normalize the result list.

        Raises:
            APIError: on transport errors, non-2xx status or an unreadable body.
        """
        try:
            response = await self.client.get(
                self.endpoint,
                params={"query": params.query, "per_page": params.per_page},
                headers={"Authorization": f"Client-ID {self.access_key}"},
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise APIError(f"Unsplash returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise APIError(f"Unsplash request failed: {type(e).__name__}: {e}") from e
        except ValueError as e:
            raise APIError(f"Unsplash returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise APIError("Unsplash response is not a JSON object")

        results: ImageResults = []
        for item in data.get("results") or []:
            parsed = self._extract_item(item)
            if parsed is not None:
                results.append(parsed)
        return results

    def _extract_item(self, item: Any) -> Optional[ImageResult]:
        if not isinstance(item, dict):
            return None
        urls: Dict[str, Any] = item.get("urls") or {}
        small = urls.get("small")
        if not isinstance(small, str) or not small:
            return None
        return ImageResult(
            id=str(item.get("id", "")),
            small_url=small,
            description=item.get("alt_description") or item.get("description"),
        )
