"""Ask an optional shortening capability for a short link, bounded by a deadline."""

import asyncio
from dataclasses import dataclass
from urllib.parse import urlsplit

from loguru import logger

from picbot.bus.emitter import EventEmitter

EVENT_PREFIX = "url.shorting."
WILDCARD_ROUTE = "all"


@dataclass(frozen=True, slots=True)
class Shortened:
    """A capability produced a short link."""

    url: str


@dataclass(frozen=True, slots=True)
class Skipped:
    """No short link: no capability, an explicit decline, or the deadline passed."""

    reason: str = ""


ShortenOutcome = Shortened | Skipped


class ShortenSink:
    """
    One-shot result handle passed to shortening listeners.

    The first call to ``resolve`` or ``reject`` settles the round; every later
    call returns ``False`` and has no effect.
    """

    __slots__ = ("_future", "url")

    def __init__(self, future: "asyncio.Future[ShortenOutcome]", url: str):
        self._future = future
        self.url = url

    @property
    def settled(self) -> bool:
        return self._future.done()

    def resolve(self, short_url: str) -> bool:
        if not short_url:
            return self._settle(Skipped("empty"))
        return self._settle(Shortened(short_url))

    def reject(self, reason: str = "declined") -> bool:
        return self._settle(Skipped(reason))

    def _settle(self, outcome: ShortenOutcome) -> bool:
        if self._future.done():
            return False
        self._future.set_result(outcome)
        return True


def shortening_event(route: str) -> str:
    return f"{EVENT_PREFIX}{route}"


class ShortenCoordinator:
    """Discovers a shortening listener for a URL and waits for exactly one outcome."""

    def __init__(self, emitter: EventEmitter, *, timeout: float = 15.0):
        self.emitter = emitter
        self.timeout = timeout

    def route_for(self, url: str) -> str | None:
        """
        Pick the event to emit for ``url``.

        Host specific listeners take priority over the wildcard route.
        """
        host = urlsplit(url).hostname
        candidates = [host, WILDCARD_ROUTE] if host else [WILDCARD_ROUTE]
        for route in candidates:
            event = shortening_event(route)
            if self.emitter.has_listeners(event):
                return event
        return None

    async def shorten(self, url: str, timeout: float | None = None) -> ShortenOutcome:
        """Return ``Shortened`` or ``Skipped``; never raises and never waits past the deadline."""
        loop = asyncio.get_running_loop()
        future: asyncio.Future[ShortenOutcome] = loop.create_future()
        sink = ShortenSink(future, url)

        event = self.route_for(url)
        if event is None:
            logger.debug("No shortening listener for {}", url)
            timer = loop.call_soon(sink.reject, "no-listener")
        else:
            deadline = self.timeout if timeout is None else timeout
            timer = loop.call_later(deadline, sink.reject, "timeout")
            logger.info("Emitting: {}", event)
            self.emitter.emit(event, url, sink)

        try:
            outcome = await future
        finally:
            timer.cancel()

        if isinstance(outcome, Skipped):
            logger.debug("Shortening skipped for {}: {}", url, outcome.reason)
        return outcome
