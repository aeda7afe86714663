"""Tabular views over an index or a hit list, as Polars DataFrames."""

from __future__ import annotations

from collections.abc import Mapping

import polars as pl

from stash.index import NoteIndex
from stash.matcher import SearchHit

_COUNT_SCHEMA = {"name": pl.Utf8, "note_count": pl.Int64}
_HIT_SCHEMA = {
    "id": pl.Utf8,
    "title": pl.Utf8,
    "score": pl.Float64,
    "created": pl.Datetime(time_zone="UTC"),
    "tags": pl.List(pl.Utf8),
    "projects": pl.List(pl.Utf8),
}


def _counts(groups: Mapping[str, frozenset[str]]) -> pl.DataFrame:
    df = pl.DataFrame(
        {
            "name": list(groups),
            "note_count": [len(ids) for ids in groups.values()],
        },
        schema=_COUNT_SCHEMA,
    )
    return df.sort(["note_count", "name"], descending=[True, False])


def tag_counts(index: NoteIndex) -> pl.DataFrame:
    """Return a ``name → note_count`` table of tags, most used first."""
    return _counts(index.by_tag)


def project_counts(index: NoteIndex) -> pl.DataFrame:
    """Return a ``name → note_count`` table of projects, most used first."""
    return _counts(index.by_project)


def hits_frame(hits: list[SearchHit]) -> pl.DataFrame:
    """Return search hits as a DataFrame, keeping rank order."""
    return pl.DataFrame(
        {
            "id": [h.note.id for h in hits],
            "title": [h.note.title for h in hits],
            "score": [h.score for h in hits],
            "created": [h.note.created for h in hits],
            "tags": [sorted(h.note.tags) for h in hits],
            "projects": [sorted(h.note.projects) for h in hits],
        },
        schema=_HIT_SCHEMA,
    )
