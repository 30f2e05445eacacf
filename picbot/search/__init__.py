"""Remote image search client."""

from picbot.search.client import ImageSearchClient, SearchError
from picbot.search.models import ImageHit, ImageResult, SearchPage

__all__ = ["ImageHit", "ImageResult", "ImageSearchClient", "SearchError", "SearchPage"]
