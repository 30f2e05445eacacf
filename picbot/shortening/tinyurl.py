"""TinyURL adapter registered as a shortening listener."""

import httpx
from loguru import logger

from picbot.bus.emitter import EventEmitter
from picbot.shortening.coordinator import WILDCARD_ROUTE, ShortenSink, shortening_event


class TinyUrlShortener:
    """Shortens links through the TinyURL ``api-create.php`` endpoint."""

    def __init__(self, *, base_url: str = "https://tinyurl.com/api-create.php", timeout: float = 10.0):
        self.base_url = base_url
        self.timeout = timeout

    def register(self, emitter: EventEmitter, hosts: list[str] | None = None) -> list[str]:
        """Listen for the given hosts, or for every host when none are given."""
        events = [shortening_event(host) for host in hosts] if hosts else [shortening_event(WILDCARD_ROUTE)]
        for event in events:
            emitter.on(event, self.handle)
        return events

    async def handle(self, url: str, sink: ShortenSink) -> None:
        """Resolve ``sink`` with the short link, or reject it on any failure."""
        try:
            short_url = await self.shorten(url)
        except httpx.HTTPError as e:
            logger.warning("TinyURL shortening failed for {}: {}", url, e)
            sink.reject("provider-error")
            return
        if not sink.resolve(short_url):
            logger.debug("TinyURL answered after the round for {} was settled", url)

    async def shorten(self, url: str) -> str:
        async with httpx.AsyncClient() as client:
            response = await client.get(self.base_url, params={"url": url}, timeout=self.timeout)
            response.raise_for_status()
        return response.text.strip()
