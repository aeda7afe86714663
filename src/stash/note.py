"""Core Note and LoadFailure records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

#: Soft-deleted notes carry this tag and are hidden from search.
DELETED_TAG = "deleted"


@dataclass(frozen=True)
class Note:
    """A single markdown note, as loaded from disk."""

    id: str
    title: str
    created: datetime
    body: str
    tags: frozenset[str] = field(default_factory=frozenset)
    projects: frozenset[str] = field(default_factory=frozenset)
    updated: datetime | None = None
    #: Targets of ``[[wikilinks]]``, in first-appearance order.
    links_to: tuple[str, ...] = ()
    #: Where the note was read from; ``None`` for notes not yet written.
    source_path: Path | None = field(default=None, compare=False)

    @property
    def is_deleted(self) -> bool:
        return DELETED_TAG in self.tags

    @property
    def short_id(self) -> str:
        return self.id[:8]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "created": self.created.isoformat(),
            "tags": sorted(self.tags),
            "projects": sorted(self.projects),
            "updated": self.updated.isoformat() if self.updated else None,
            "links_to": list(self.links_to),
            "body": self.body,
            "source_path": str(self.source_path) if self.source_path else None,
        }


@dataclass(frozen=True)
class LoadFailure:
    """A note file that could not be loaded, and why."""

    path: Path
    reason: str
    #: For duplicate ids: the already-loaded file that kept the id.
    conflicting_path: Path | None = None

    def __str__(self) -> str:
        if self.conflicting_path is not None:
            return f"{self.path}: {self.reason} (already loaded from {self.conflicting_path})"
        return f"{self.path}: {self.reason}"
