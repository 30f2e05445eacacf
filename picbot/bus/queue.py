"""Async message queue decoupling chat channels from command handling."""

import asyncio

from picbot.bus.events import InboundMessage, OutboundMessage


class MessageBus:
    """Inbound and outbound asyncio queues."""

    def __init__(self):
        self.inbound: asyncio.Queue[InboundMessage] = asyncio.Queue()
        self.outbound: asyncio.Queue[OutboundMessage] = asyncio.Queue()

    async def publish_inbound(self, msg: InboundMessage) -> None:
        await self.inbound.put(msg)

    async def consume_inbound(self) -> InboundMessage:
        return await self.inbound.get()

    async def publish_outbound(self, msg: OutboundMessage) -> None:
        await self.outbound.put(msg)

    async def consume_outbound(self) -> OutboundMessage:
        return await self.outbound.get()

    @property
    def inbound_size(self) -> int:
        return self.inbound.qsize()

    @property
    def outbound_size(self) -> int:
        return self.outbound.qsize()

    def inbound_done(self) -> None:
        """Mark one consumed inbound message as fully processed."""
        self.inbound.task_done()

    def outbound_done(self) -> None:
        """Mark one consumed outbound message as delivered."""
        self.outbound.task_done()

    async def join_inbound(self) -> None:
        """Wait until every published inbound message has been processed."""
        await self.inbound.join()

    async def join_outbound(self) -> None:
        """Wait until every published outbound message has been delivered."""
        await self.outbound.join()
