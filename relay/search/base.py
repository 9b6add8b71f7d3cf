"""
Base interface for image search providers.
"""
from __future__ import annotations

from typing import Protocol

from .types import ImageResults, ImageSearchParams


class ImageSearchProvider(Protocol):
    async def search(self, params: ImageSearchParams) -> ImageResults:  # noqa: D401
        """Execute an image search and return normalized results."""
        ...
