"""Note loader: read every note file in a directory, collecting failures."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from stash.errors import NoteFormatError
from stash.note import LoadFailure, Note
from stash.parser import parse_note

logger = logging.getLogger(__name__)


@dataclass
class LoadResult:
    notes: list[Note] = field(default_factory=list)
    failures: list[LoadFailure] = field(default_factory=list)


def _load_one(path: Path) -> Note | LoadFailure:
    try:
        return parse_note(path)
    except NoteFormatError as exc:
        return LoadFailure(path=path, reason=str(exc))


def note_paths(directory: Path) -> list[Path]:
    """All ``*.md`` files below *directory*, in load order."""
    directory = Path(directory)
    if not directory.is_dir():
        return []
    return sorted(p for p in directory.glob("**/*.md") if p.is_file())


def load_notes(directory: Path, *, workers: int | None = None) -> LoadResult:
    """Parse every note under *directory*.

    A missing directory is an empty note set.  Bad files never abort the
    load; each becomes a :class:`LoadFailure`.  When two files share an id the
    first one in path order is kept and the second is reported.

    ``workers > 1`` parses files on a thread pool; the merge still runs in
    path order so the result is the same as a sequential load.
    """
    paths = note_paths(directory)
    if not paths:
        logger.debug("No notes found in %s", directory)
        return LoadResult()

    if workers and workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            loaded = list(executor.map(_load_one, paths))
    else:
        loaded = [_load_one(p) for p in paths]

    result = LoadResult()
    seen: dict[str, Note] = {}
    for item in loaded:
        if isinstance(item, LoadFailure):
            result.failures.append(item)
            continue
        first = seen.get(item.id)
        if first is not None:
            result.failures.append(
                LoadFailure(
                    path=item.source_path,
                    reason=f"duplicate id {item.id!r}",
                    conflicting_path=first.source_path,
                )
            )
            continue
        seen[item.id] = item
        result.notes.append(item)

    for failure in result.failures:
        logger.warning("Skipped note %s", failure)
    logger.debug("Loaded %d note(s) from %s, %d failure(s)", len(result.notes), directory, len(result.failures))
    return result
