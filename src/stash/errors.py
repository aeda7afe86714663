"""Exception hierarchy for stash."""

from __future__ import annotations


class StashError(Exception):
    """Base class for every error raised by stash."""


class NoteFormatError(StashError):
    """A note file is missing its frontmatter or has a malformed field."""


class QueryParseError(StashError):
    """A search string could not be parsed into a query."""

    def __init__(self, message: str, position: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.position = position

    def __str__(self) -> str:
        if self.position is None:
            return self.message
        return f"{self.message} (at column {self.position + 1})"


class TranslatorError(StashError):
    """The natural-language query translator failed."""


class ConfigError(StashError):
    """The configuration file is unreadable or holds invalid values."""
