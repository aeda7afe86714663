"""stash: local-first markdown notes with tag, project and fuzzy text search."""

from stash.engine import SearchOutcome, load_index, search
from stash.errors import ConfigError, NoteFormatError, QueryParseError, StashError, TranslatorError
from stash.extractor import extract_links, extract_metadata, extract_projects, extract_tags
from stash.index import NoteIndex
from stash.loader import LoadResult, load_notes
from stash.matcher import SearchHit, match
from stash.note import LoadFailure, Note
from stash.parser import parse_note, render_note
from stash.query import Query, build_query, parse_query

__version__ = "0.1.0"

__all__ = [
    "Note",
    "LoadFailure",
    "LoadResult",
    "NoteIndex",
    "Query",
    "SearchHit",
    "SearchOutcome",
    "load_notes",
    "load_index",
    "search",
    "match",
    "parse_query",
    "build_query",
    "parse_note",
    "render_note",
    "extract_tags",
    "extract_projects",
    "extract_metadata",
    "extract_links",
    "StashError",
    "NoteFormatError",
    "QueryParseError",
    "TranslatorError",
    "ConfigError",
]
