"""The ``search`` chat command: find one image and reply with a formatted line."""

import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum

from loguru import logger

from picbot.bus.emitter import EventEmitter
from picbot.bus.events import CommandEvent, OutboundMessage
from picbot.config.schema import SearchConfig
from picbot.formatter import DefaultFormatter, Formatter
from picbot.search.client import ImageSearchClient, SearchError
from picbot.search.models import ImageResult
from picbot.shortening.coordinator import ShortenCoordinator, Shortened

SendCallback = Callable[[OutboundMessage], Awaitable[None]]


class SearchState(str, Enum):
    IDLE = "idle"
    AWAITING_SEARCH = "awaiting_search"
    SELECTING_RESULT = "selecting_result"
    AWAITING_SHORTENING = "awaiting_shortening"
    FORMATTING = "formatting"
    REPLIED = "replied"


@dataclass
class SearchRequest:
    """Progress of one command invocation."""

    event: CommandEvent
    state: SearchState = SearchState.IDLE
    image: ImageResult | None = None
    replies: list[str] = field(default_factory=list)

    def advance(self, state: SearchState) -> None:
        logger.debug("Search request {} -> {}", self.state.value, state.value)
        self.state = state


class SearchCommand:
    """
    Handles ``search <query>`` and ``search.help``.

    Steps for one request:
    1. Run the remote search
    2. Pick one image at random
    3. Ask the shortening coordinator for a short link
    4. Format and send the reply
    """

    HELP_LINES = (
        "Usage: {name} queryString",
        "queryString - the search query (all words are assumed to be part of message)",
        "Searches Bigstock for an image based on the provided query string.",
    )
    NO_RESULTS_MESSAGE = "Sorry, no images were found that matched your query"
    API_ERROR_MESSAGE = "Sorry, there was a problem communicating with the API"

    def __init__(
        self,
        config: SearchConfig,
        emitter: EventEmitter,
        send_callback: SendCallback,
        *,
        name: str = "search",
        formatter: Formatter | None = None,
        client: ImageSearchClient | None = None,
        rng: random.Random | None = None,
    ):
        if not config.account_id:
            raise ValueError("Missing required configuration key 'accountId'")
        if formatter is not None and (isinstance(formatter, str) or not isinstance(formatter, Formatter)):
            raise TypeError(f'"formatter" must implement {Formatter.__module__}.Formatter')

        self.config = config
        self.name = name
        self.send_callback = send_callback
        self.formatter: Formatter = formatter or DefaultFormatter(config.template)
        self.client = client or ImageSearchClient(
            account_id=config.account_id,
            api_base=config.api_base,
            timeout=config.request_timeout,
        )
        self.shortener = ShortenCoordinator(emitter, timeout=config.shorten_timeout)
        self._rng = rng or random.Random()

    def subscribed_commands(self) -> dict[str, Callable[[CommandEvent], Awaitable[SearchRequest]]]:
        return {
            self.name: self.handle,
            f"{self.name}.help": self.handle_help,
        }

    async def handle(self, event: CommandEvent) -> SearchRequest:
        """Run one search request to completion."""
        logger.info("Search command received from {}:{}", event.channel, event.source)
        request = SearchRequest(event=event)

        if not event.params:
            logger.debug("No search terms given, replying with help")
            await self._reply_help(request)
            return request

        query = " ".join(event.params)
        logger.info("Performing image search for {!r}", query)
        request.advance(SearchState.AWAITING_SEARCH)
        try:
            page = await self.client.search(
                query=query,
                limit=self.config.limit,
                thumb_sizes=self.config.thumb_sizes,
            )
        except SearchError as e:
            if e.status_code is None:
                logger.warning("Search API failed to respond: {}", e.detail or e)
                await self._reply(request, [self.API_ERROR_MESSAGE])
            else:
                logger.warning("Search API responded with error: code={}, message={}", e.status_code, e.detail)
                await self._reply(request, [self.NO_RESULTS_MESSAGE])
            return request

        request.advance(SearchState.SELECTING_RESULT)
        if not page.images:
            logger.info("Search for {!r} returned no images", query)
            await self._reply(request, [self.NO_RESULTS_MESSAGE])
            return request
        logger.info("Search API successful return: items={}, total={}", page.items, page.total_items)

        hit = self._rng.choice(page.images)
        image = ImageResult.from_hit(hit, self.config.image_url_template.format(id=hit.id))
        request.image = image

        request.advance(SearchState.AWAITING_SHORTENING)
        outcome = await self.shortener.shorten(image.url)
        if isinstance(outcome, Shortened):
            image.url_short = outcome.url

        request.advance(SearchState.FORMATTING)
        message = self.formatter.format(image)
        logger.info(
            "Responding with {} url shortening: {}",
            "successful" if image.url_short else "failed",
            message,
        )
        await self._reply(request, [message])
        return request

    async def handle_help(self, event: CommandEvent) -> SearchRequest:
        request = SearchRequest(event=event)
        await self._reply_help(request)
        return request

    async def _reply_help(self, request: SearchRequest) -> None:
        await self._reply(request, [line.format(name=self.name) for line in self.HELP_LINES])

    async def _reply(self, request: SearchRequest, lines: list[str]) -> None:
        event = request.event
        for target in event.targets:
            for line in lines:
                await self.send_callback(
                    OutboundMessage(
                        channel=event.channel,
                        chat_id=target,
                        content=line,
                        reply_to=event.message_id,
                    )
                )
        request.replies.extend(lines)
        request.advance(SearchState.REPLIED)
