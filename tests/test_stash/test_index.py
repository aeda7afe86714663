"""Unit tests for stash.index.NoteIndex."""

import random
from datetime import datetime, timezone

import pytest

from stash.index import NoteIndex
from stash.note import Note


def _note(note_id: str, tags=(), projects=(), title: str = "", body: str = "") -> Note:
    return Note(
        id=note_id,
        title=title or note_id,
        created=datetime(2026, 1, 1, tzinfo=timezone.utc),
        body=body,
        tags=frozenset(tags),
        projects=frozenset(projects),
    )


@pytest.fixture()
def notes() -> list[Note]:
    return [
        _note("alpha", tags=["first"], projects=["web"]),
        _note("beta", tags=["second"]),
        _note("gamma", tags=["first", "second"], projects=["web", "cli"]),
    ]


@pytest.fixture()
def index(notes) -> NoteIndex:
    return NoteIndex.build(notes)


# ---------------------------------------------------------------------------
# Build
# ---------------------------------------------------------------------------


class TestBuild:
    def test_by_id(self, index: NoteIndex):
        assert set(index.by_id) == {"alpha", "beta", "gamma"}
        assert len(index) == 3

    def test_by_tag(self, index: NoteIndex):
        assert index.by_tag["first"] == {"alpha", "gamma"}
        assert index.by_tag["second"] == {"beta", "gamma"}

    def test_by_project(self, index: NoteIndex):
        assert index.by_project["web"] == {"alpha", "gamma"}
        assert index.by_project["cli"] == {"gamma"}

    def test_every_indexed_id_exists(self, index: NoteIndex):
        for ids in [*index.by_tag.values(), *index.by_project.values()]:
            assert ids <= set(index.by_id)

    def test_order_independent(self, notes):
        expected = NoteIndex.build(notes)
        shuffled = list(notes)
        for seed in range(5):
            random.Random(seed).shuffle(shuffled)
            idx = NoteIndex.build(shuffled)
            assert dict(idx.by_tag) == dict(expected.by_tag)
            assert dict(idx.by_project) == dict(expected.by_project)
            assert dict(idx.by_id) == dict(expected.by_id)

    def test_empty(self):
        idx = NoteIndex.build([])
        assert len(idx) == 0
        assert idx.tags() == []
        assert idx.lookup_by_tag("anything") == frozenset()

    def test_read_only_views(self, index: NoteIndex):
        with pytest.raises(TypeError):
            index.by_id["new"] = _note("new")  # type: ignore[index]


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


class TestLookups:
    def test_lookup_by_tag(self, index: NoteIndex):
        assert index.lookup_by_tag("first") == {"alpha", "gamma"}

    def test_lookup_normalises(self, index: NoteIndex):
        assert index.lookup_by_tag("#FIRST") == {"alpha", "gamma"}
        assert index.lookup_by_project("+Web") == {"alpha", "gamma"}

    def test_unknown_is_empty(self, index: NoteIndex):
        assert index.lookup_by_tag("missing") == frozenset()
        assert index.lookup_by_project("missing") == frozenset()
        assert index.lookup_by_tag("not a token") == frozenset()

    def test_get(self, index: NoteIndex):
        assert index.get("beta").id == "beta"
        assert index.get("nope") is None

    def test_contains_and_iter(self, index: NoteIndex):
        assert "alpha" in index
        assert "nope" not in index
        assert {n.id for n in index} == {"alpha", "beta", "gamma"}

    def test_sorted_names(self, index: NoteIndex):
        assert index.tags() == ["first", "second"]
        assert index.projects() == ["cli", "web"]
