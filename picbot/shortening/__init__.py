"""URL shortening coordination."""

from picbot.shortening.coordinator import (
    ShortenCoordinator,
    ShortenOutcome,
    Shortened,
    ShortenSink,
    Skipped,
    shortening_event,
)
from picbot.shortening.tinyurl import TinyUrlShortener

__all__ = [
    "ShortenCoordinator",
    "ShortenOutcome",
    "ShortenSink",
    "Shortened",
    "Skipped",
    "TinyUrlShortener",
    "shortening_event",
]
