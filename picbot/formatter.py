"""Render a selected image into a single chat line."""

import re
from typing import Protocol, runtime_checkable

from picbot.search.models import ImageResult


@runtime_checkable
class Formatter(Protocol):
    """Anything that turns an image result into reply text."""

    def format(self, image: ImageResult) -> str: ...


class DefaultFormatter:
    """
    Placeholder substitution formatter.

    Known tokens: ``%id%``, ``%title%``, ``%url%``, ``%url_short%``,
    ``%small_thumb%`` and ``%large_thumb%``. Substitution is a single pass over
    the pattern, so values containing tokens are never expanded again. Unknown
    tokens are left as they are.
    """

    DEFAULT_PATTERN = "%title% - %url_short% < %large_thumb% >"
    TOKENS = ("id", "title", "url", "url_short", "small_thumb", "large_thumb")
    _TOKEN_RE = re.compile("|".join(re.escape(f"%{t}%") for t in TOKENS))

    def __init__(self, pattern: str | None = None):
        self._pattern = pattern if pattern is not None else self.DEFAULT_PATTERN

    @property
    def pattern(self) -> str:
        return self._pattern

    def format(self, image: ImageResult) -> str:
        replacements = {
            "%id%": image.id,
            "%title%": image.title,
            "%url%": image.url,
            "%url_short%": image.url_short or image.url,
            "%small_thumb%": image.small_thumb,
            "%large_thumb%": image.large_thumb,
        }
        return self._TOKEN_RE.sub(lambda m: str(replacements[m.group(0)]), self._pattern)
