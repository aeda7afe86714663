"""YAML-frontmatter note format: parsing and rendering.

A note file looks like::

    ---
    id: 3f2b8c1e-...
    title: Ownership
    tags: [rust]
    projects: [book]
    created: 2026-10-18T09:30:00+00:00
    ---
    Learned about #rust ownership for +book.

``id`` and ``created`` are required.  ``title``, ``tags``, ``projects``,
``updated`` and ``links_to`` may be omitted; when present they must be
well-formed.  Body ``[[wikilinks]]`` are added to ``links_to``.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from stash.errors import NoteFormatError
from stash.extractor import extract_links, merge_metadata
from stash.note import Note

# YAML front-matter block
_FRONTMATTER_RE = re.compile(r"^---[ \t]*\r?\n(?:(.*?)\r?\n)?---[ \t]*(?:\r?\n|$)", re.DOTALL)
_HEADING_RE = re.compile(r"^\s{0,3}#{1,6}\s+(.+?)\s*#*\s*$")

REQUIRED_FIELDS = ("id", "created")
TITLE_MAX = 60


def parse_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """Split YAML front-matter from body text.

    Returns ``(metadata_dict, body)``.  Raises :class:`NoteFormatError` when
    the block is absent, unterminated, not valid YAML, or not a mapping.
    """
    if not content.startswith("---"):
        raise NoteFormatError("missing frontmatter")
    match = _FRONTMATTER_RE.match(content)
    if not match:
        raise NoteFormatError("unterminated frontmatter")
    try:
        meta = yaml.safe_load(match.group(1) or "")
    except (yaml.YAMLError, ValueError) as exc:
        # PyYAML raises ValueError for timestamps like 2026-13-45.
        raise NoteFormatError(f"invalid YAML in frontmatter: {exc}") from exc
    if meta is None:
        meta = {}
    if not isinstance(meta, dict):
        raise NoteFormatError("frontmatter is not a mapping")
    return meta, content[match.end() :]


def parse_timestamp(value: Any, field: str = "created") -> datetime:
    """Coerce a YAML timestamp value into an aware UTC-normalised datetime."""
    if isinstance(value, datetime):
        ts = value
    elif isinstance(value, date):
        ts = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            ts = datetime.fromisoformat(value.strip())
        except ValueError as exc:
            raise NoteFormatError(f"invalid {field!r} timestamp: {value!r}") from exc
    else:
        raise NoteFormatError(f"invalid {field!r} timestamp: {value!r}")
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def _name_list(meta: dict[str, Any], key: str) -> list[str]:
    value = meta.get(key)
    if value is None:
        return []
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return value
    raise NoteFormatError(f"field {key!r} must be a list of strings")


def derive_title(body: str, fallback: str) -> str:
    """First markdown heading, else first non-blank line, else *fallback*."""
    lines = [line for line in body.splitlines() if line.strip()]
    for line in lines:
        m = _HEADING_RE.match(line)
        if m:
            return m.group(1)
    if lines:
        first = lines[0].strip()
        return first if len(first) <= TITLE_MAX else first[: TITLE_MAX - 1].rstrip() + "…"
    return fallback


def parse_text(content: str, source_path: Path | None = None) -> Note:
    """Build a :class:`Note` from the full text of a note file."""
    meta, body = parse_frontmatter(content)

    missing = [key for key in REQUIRED_FIELDS if meta.get(key) in (None, "")]
    if missing:
        raise NoteFormatError(f"missing required field(s): {', '.join(missing)}")

    note_id = meta["id"]
    if not isinstance(note_id, (str, int)) or isinstance(note_id, bool):
        raise NoteFormatError("field 'id' must be a string")
    note_id = str(note_id).strip()
    if not note_id:
        raise NoteFormatError("field 'id' is blank")

    title = meta.get("title")
    if title is not None and not isinstance(title, str):
        raise NoteFormatError("field 'title' must be a string")
    if not title or not title.strip():
        title = derive_title(body, source_path.stem if source_path else note_id)

    tags, projects = merge_metadata(_name_list(meta, "tags"), _name_list(meta, "projects"), body)
    links = list(dict.fromkeys([*_name_list(meta, "links_to"), *extract_links(body)]))
    updated = meta.get("updated")

    return Note(
        id=note_id,
        title=title.strip(),
        created=parse_timestamp(meta["created"]),
        body=body,
        tags=tags,
        projects=projects,
        updated=parse_timestamp(updated, "updated") if updated is not None else None,
        links_to=tuple(links),
        source_path=source_path,
    )


def parse_note(path: Path) -> Note:
    """Read a ``.md`` file and return a fully-populated :class:`Note`."""
    try:
        content = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise NoteFormatError("file is not valid UTF-8") from exc
    except OSError as exc:
        raise NoteFormatError(f"unreadable file: {exc.strerror or exc}") from exc
    return parse_text(content, source_path=path)


def render_note(note: Note) -> str:
    """Serialise *note* back into the on-disk frontmatter format."""
    meta = {
        "id": note.id,
        "title": note.title,
        "tags": sorted(note.tags),
        "projects": sorted(note.projects),
        "created": note.created.isoformat(),
        "updated": note.updated.isoformat() if note.updated else None,
        "links_to": list(note.links_to),
    }
    header = yaml.safe_dump(meta, sort_keys=False, allow_unicode=True).strip()
    return f"---\n{header}\n---\n{note.body}"
