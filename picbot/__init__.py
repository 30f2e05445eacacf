"""picbot - image search replies for chat bots."""

__version__ = "0.1.0"
