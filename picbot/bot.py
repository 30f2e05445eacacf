"""Bot loop: consumes chat messages from the bus and runs commands."""

import asyncio

from loguru import logger

from picbot.bus.emitter import EventEmitter
from picbot.bus.events import InboundMessage, OutboundMessage
from picbot.bus.queue import MessageBus
from picbot.commands.router import CommandRouter
from picbot.commands.search import SearchCommand
from picbot.config.schema import Config
from picbot.formatter import Formatter
from picbot.shortening.tinyurl import TinyUrlShortener


class SearchBot:
    """
    Reads inbound messages and dispatches commands.

    Every command runs in its own task, so a slow search or shortening round
    never holds up other messages.
    """

    def __init__(self, bus: MessageBus, router: CommandRouter, emitter: EventEmitter | None = None):
        self.bus = bus
        self.router = router
        self.emitter = emitter or EventEmitter()
        self._running = False
        self._tasks: set[asyncio.Task] = set()

    async def run(self) -> None:
        """Run the bot loop, processing messages from the bus."""
        self._running = True
        logger.info("Search bot started")

        while self._running:
            try:
                msg = await asyncio.wait_for(self.bus.consume_inbound(), timeout=1.0)
            except asyncio.TimeoutError:
                continue
            task = self.submit(msg)
            task.add_done_callback(lambda _: self.bus.inbound_done())

    def submit(self, msg: InboundMessage) -> asyncio.Task:
        """Process ``msg`` in the background and return its task."""
        task = asyncio.create_task(self._process_message(msg))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Wait for every in-flight command."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def stop(self) -> None:
        """Stop the bot loop."""
        self._running = False
        logger.info("Search bot stopping")

    async def _process_message(self, msg: InboundMessage) -> None:
        preview = msg.content[:80] + "..." if len(msg.content) > 80 else msg.content
        logger.debug(f"Processing message from {msg.channel}:{msg.sender_id}: {preview}")
        try:
            await self.router.dispatch(msg)
        except Exception as e:
            logger.error("Error processing message: {}", e)


def build_bot(
    config: Config,
    bus: MessageBus,
    *,
    emitter: EventEmitter | None = None,
    formatter: Formatter | None = None,
) -> SearchBot:
    """Wire the search command, optional shortener and router from config."""
    emitter = emitter or EventEmitter()

    if config.shortener.enabled:
        shortener = TinyUrlShortener(
            base_url=config.shortener.base_url,
            timeout=config.shortener.timeout,
        )
        events = shortener.register(emitter, config.shortener.hosts)
        logger.info("TinyURL shortener listening on {}", ", ".join(events))

    async def _send(msg: OutboundMessage) -> None:
        await bus.publish_outbound(msg)

    command = SearchCommand(
        config.search,
        emitter,
        _send,
        name=config.commands.search_command,
        formatter=formatter,
    )
    router = CommandRouter(prefix=config.commands.prefix)
    router.register_all(command.subscribed_commands())
    return SearchBot(bus, router, emitter)
