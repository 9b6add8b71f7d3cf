"""
Image search client: one random candidate URL per query, or None.
"""
from __future__ import annotations

import random
from typing import Optional

from relay.exceptions import APIError
from relay.utils.logging import get_logger
from .base import ImageSearchProvider
from .types import ImageSearchParams

logger = get_logger(__name__)


class ImageSearchClient:
    def __init__(self, provider: ImageSearchProvider, per_page: int = 5, rng: Optional[random.Random] = None):
        self.provider = provider
        self.per_page = per_page
        self.rng = rng or random.Random()

    async def find_image(self, query: str) -> Optional[str]:
        """Return the small rendition URL of a uniformly chosen result.

        Failures and empty result sets both yield None; nothing is raised.
        """
        try:
            results = await self.provider.search(ImageSearchParams(query=query, per_page=self.per_page))
        except APIError as e:
            logger.error(f"❌ Image search failed for '{query}': {e}", extra={"subsys": "search", "event": "search_fail"})
            return None

        if not results:
            logger.info(f"No images found for '{query}'", extra={"subsys": "search", "event": "search_empty"})
            return None

        chosen = results[self.rng.randrange(len(results))]
        logger.debug(
            f"Picked image {chosen.id} ({chosen.description or 'no description'}) out of {len(results)}",
            extra={"subsys": "search", "event": "search_pick"},
        )
        return chosen.small_url
