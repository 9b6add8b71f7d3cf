"""
Factory to create image search providers and manage the shared HTTP client.
"""
from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

import httpx

from relay.utils.logging import get_logger
from .base import ImageSearchProvider

logger = get_logger(__name__)

_client_lock = asyncio.Lock()
_client: Optional[httpx.AsyncClient] = None


def _build_client(timeout_seconds: float) -> httpx.AsyncClient:
    limits = httpx.Limits(max_connections=10, max_keepalive_connections=10)
    return httpx.AsyncClient(limits=limits, timeout=httpx.Timeout(timeout_seconds))


async def get_search_client(config: Dict[str, Any]) -> httpx.AsyncClient:
    global _client
    if _client is not None:
        return _client
    async with _client_lock:
        if _client is None:
            _client = _build_client(config.get("IMAGE_SEARCH_TIMEOUT_SECONDS", 10.0))
            logger.debug("Created shared httpx.AsyncClient for image search")
    return _client


async def close_search_client() -> None:
    global _client
    if _client is not None:
        try:
            await _client.aclose()
        except httpx.HTTPError as e:
            logger.debug(f"Error closing search HTTP client: {e}")
        finally:
            _client = None


async def get_image_search_provider(config: Dict[str, Any]) -> ImageSearchProvider:
    from .providers.unsplash import UnsplashImageSearch  # local import to avoid cycle

    client = await get_search_client(config)
    return UnsplashImageSearch(
        client=client,
        access_key=config["UNSPLASH_ACCESS_KEY"],
        base_url=config.get("UNSPLASH_API_BASE", "https://api.unsplash.com"),
    )
