"""
Image search types.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class ImageSearchParams:
    query: str
    per_page: int = 5


@dataclass(frozen=True)
class ImageResult:
    id: str
    small_url: str
    description: Optional[str] = None


ImageResults = List[ImageResult]
