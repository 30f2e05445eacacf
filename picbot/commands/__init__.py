"""Chat commands."""

from picbot.commands.router import CommandRouter
from picbot.commands.search import SearchCommand, SearchRequest, SearchState

__all__ = ["CommandRouter", "SearchCommand", "SearchRequest", "SearchState"]
