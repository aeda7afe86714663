"""One-call search pipeline: load → index → parse → match."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from stash.index import NoteIndex
from stash.loader import load_notes
from stash.matcher import SearchHit, match
from stash.note import LoadFailure
from stash.query import Query, build_query


@dataclass
class SearchOutcome:
    query: Query
    hits: list[SearchHit] = field(default_factory=list)
    failures: list[LoadFailure] = field(default_factory=list)


def load_index(notes_dir: Path, *, workers: int | None = None) -> tuple[NoteIndex, list[LoadFailure]]:
    """Load *notes_dir* from scratch and index it."""
    result = load_notes(notes_dir, workers=workers)
    return NoteIndex.build(result.notes), result.failures


def search(
    notes_dir: Path,
    raw_query: str,
    case_sensitive: bool = False,
    *,
    tags: Iterable[str] = (),
    projects: Iterable[str] = (),
    workers: int | None = None,
) -> SearchOutcome:
    """Search the notes in *notes_dir*.

    The query is parsed before any file is read, so a
    :class:`~stash.errors.QueryParseError` means nothing was loaded.
    """
    query = build_query(raw_query, case_sensitive, tags=tags, projects=projects)
    index, failures = load_index(notes_dir, workers=workers)
    return SearchOutcome(query=query, hits=match(index, query), failures=failures)
