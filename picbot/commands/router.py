"""Parse prefixed chat messages into commands and dispatch them."""

from collections.abc import Awaitable, Callable
from typing import Any

from loguru import logger

from picbot.bus.events import CommandEvent, InboundMessage

CommandHandler = Callable[[CommandEvent], Awaitable[Any]]


class CommandRouter:
    """Maps command names such as ``search`` or ``search.help`` to handlers."""

    def __init__(self, prefix: str = "!"):
        self.prefix = prefix
        self._handlers: dict[str, CommandHandler] = {}

    def register(self, name: str, handler: CommandHandler) -> None:
        self._handlers[name.lower()] = handler

    def register_all(self, handlers: dict[str, CommandHandler]) -> None:
        for name, handler in handlers.items():
            self.register(name, handler)

    @property
    def commands(self) -> list[str]:
        return sorted(self._handlers)

    def parse(self, msg: InboundMessage) -> CommandEvent | None:
        """Return the command carried by ``msg``, or None for ordinary chat text."""
        text = msg.content.strip()
        if not text.startswith(self.prefix):
            return None
        parts = text[len(self.prefix):].split()
        if not parts:
            return None
        return CommandEvent(
            name=parts[0].lower(),
            params=parts[1:],
            channel=msg.channel,
            source=msg.sender_id,
            targets=[msg.chat_id],
            message_id=msg.metadata.get("message_id"),
        )

    def get(self, name: str) -> CommandHandler | None:
        return self._handlers.get(name)

    async def dispatch(self, msg: InboundMessage) -> Any:
        """Run the handler for ``msg``; unknown commands are ignored."""
        event = self.parse(msg)
        if event is None:
            return None
        handler = self._handlers.get(event.name)
        if handler is None:
            logger.debug("Ignoring unknown command {}", event.name)
            return None
        return await handler(event)
