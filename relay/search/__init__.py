from .client import ImageSearchClient
from .types import ImageSearchParams, ImageResult

__all__ = ["ImageSearchClient", "ImageSearchParams", "ImageResult"]
