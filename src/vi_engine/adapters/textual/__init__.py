"""Textual integration: the adapter is importable without the demo app."""

from .controller import TextualUIHooks, TextualVimAdapter

__all__ = ["TextualUIHooks", "TextualVimAdapter"]
