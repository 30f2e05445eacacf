"""Message bus, events and the capability emitter."""

from picbot.bus.emitter import EventEmitter
from picbot.bus.events import CommandEvent, InboundMessage, OutboundMessage
from picbot.bus.queue import MessageBus

__all__ = ["CommandEvent", "EventEmitter", "InboundMessage", "MessageBus", "OutboundMessage"]
