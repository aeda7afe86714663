"""Quick capture: mint new notes and write them to the notes directory."""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path

from stash.extractor import extract_links, merge_metadata
from stash.note import DELETED_TAG, Note
from stash.parser import derive_title, render_note


def _utc(now: datetime | None) -> datetime:
    """*now* (default: the current time) as an aware UTC datetime; naive means UTC."""
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def new_note(
    body: str,
    title: str | None = None,
    tags: Iterable[str] = (),
    projects: Iterable[str] = (),
    *,
    now: datetime | None = None,
) -> Note:
    """Create a note with a fresh id.  The id is never regenerated later."""
    note_id = str(uuid.uuid4())
    created = _utc(now)
    all_tags, all_projects = merge_metadata(tags, projects, body)
    return Note(
        id=note_id,
        title=(title or "").strip() or derive_title(body, note_id[:8]),
        created=created,
        body=body,
        tags=all_tags,
        projects=all_projects,
        links_to=extract_links(body),
    )


def note_filename(note: Note) -> str:
    return f"{note.created:%Y%m%d-%H%M%S}-{note.short_id}.md"


def save_note(note: Note, directory: Path) -> Note:
    """Write *note* into *directory*; returns the note with ``source_path`` set.

    Existing files are never overwritten.
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / note_filename(note)
    with open(path, "x", encoding="utf-8") as fh:
        fh.write(render_note(note))
    return replace(note, source_path=path)


def soft_delete_note(note: Note, *, now: datetime | None = None) -> Note:
    """Tag *note* as deleted and rewrite its file in place.

    Deleted notes stay on disk but are hidden from search unless the query
    asks for ``#deleted``.  Deleting an already-deleted note changes nothing.
    """
    if note.source_path is None:
        raise ValueError(f"note {note.short_id} has not been saved")
    if note.is_deleted:
        return note
    deleted = replace(note, tags=note.tags | {DELETED_TAG}, updated=_utc(now))
    note.source_path.write_text(render_note(deleted), encoding="utf-8")
    return deleted
