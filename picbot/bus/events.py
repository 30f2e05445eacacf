"""Event types exchanged between chat channels and command handlers."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class InboundMessage:
    """Message received from a chat channel."""

    channel: str
    sender_id: str
    chat_id: str
    content: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class OutboundMessage:
    """Message to send to a chat channel."""

    channel: str
    chat_id: str
    content: str
    reply_to: str | None = None


@dataclass
class CommandEvent:
    """
    A parsed chat command.

    ``params`` holds the whitespace separated arguments after the command name.
    Replies for the command go to every entry of ``targets`` on ``channel``.
    """

    name: str
    params: list[str]
    channel: str
    source: str
    targets: list[str]
    message_id: str | None = None
