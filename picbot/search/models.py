"""Shared image search models."""

from dataclasses import dataclass, field


@dataclass(slots=True)
class ImageHit:
    """Normalized image item from a search response."""

    id: str
    title: str
    small_thumb: str = ""
    large_thumb: str = ""


@dataclass(slots=True)
class SearchPage:
    """One page of search results plus paging counters."""

    images: list[ImageHit] = field(default_factory=list)
    items: int = 0
    total_items: int = 0


@dataclass(slots=True)
class ImageResult:
    """
    A selected image ready to be formatted.

    ``url`` is the canonical page link; ``url_short`` is either a non-empty
    shortened link or ``None``.
    """

    id: str
    title: str
    url: str
    small_thumb: str
    large_thumb: str
    url_short: str | None = None

    @classmethod
    def from_hit(cls, hit: ImageHit, url: str) -> "ImageResult":
        return cls(
            id=hit.id,
            title=hit.title,
            url=url,
            small_thumb=hit.small_thumb,
            large_thumb=hit.large_thumb,
        )
