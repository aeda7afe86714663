"""NoteIndex: in-memory lookup tables over a loaded note set."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from stash.extractor import normalize_token
from stash.note import Note


class NoteIndex:
    """Notes keyed by id, tag and project.

    Built once per invocation with :meth:`build` and never mutated afterwards.
    """

    def __init__(
        self,
        by_id: Mapping[str, Note],
        by_tag: Mapping[str, frozenset[str]],
        by_project: Mapping[str, frozenset[str]],
    ) -> None:
        self.by_id = MappingProxyType(dict(by_id))
        self.by_tag = MappingProxyType(dict(by_tag))
        self.by_project = MappingProxyType(dict(by_project))

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    @classmethod
    def build(cls, notes: Iterable[Note]) -> "NoteIndex":
        """Index *notes*.  The first note wins if two share an id."""
        by_id: dict[str, Note] = {}
        tags: dict[str, set[str]] = {}
        projects: dict[str, set[str]] = {}
        for note in notes:
            if note.id in by_id:
                continue
            by_id[note.id] = note
            for tag in note.tags:
                tags.setdefault(tag, set()).add(note.id)
            for project in note.projects:
                projects.setdefault(project, set()).add(note.id)
        return cls(
            by_id,
            {k: frozenset(v) for k, v in tags.items()},
            {k: frozenset(v) for k, v in projects.items()},
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, note_id: str) -> Note | None:
        return self.by_id.get(note_id)

    def lookup_by_tag(self, tag: str) -> frozenset[str]:
        key = normalize_token(tag)
        return self.by_tag.get(key, frozenset()) if key else frozenset()

    def lookup_by_project(self, project: str) -> frozenset[str]:
        key = normalize_token(project)
        return self.by_project.get(key, frozenset()) if key else frozenset()

    def all_ids(self) -> frozenset[str]:
        return frozenset(self.by_id)

    def tags(self) -> list[str]:
        return sorted(self.by_tag)

    def projects(self) -> list[str]:
        return sorted(self.by_project)

    def __len__(self) -> int:
        return len(self.by_id)

    def __contains__(self, note_id: object) -> bool:
        return note_id in self.by_id

    def __iter__(self) -> Iterator[Note]:
        return iter(self.by_id.values())
