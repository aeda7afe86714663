"""Unit tests for stash.matcher."""

from datetime import datetime, timedelta, timezone

import pytest

from stash.index import NoteIndex
from stash.matcher import (
    BODY_WEIGHT,
    EXACT_BONUS,
    FUZZY_THRESHOLD,
    TITLE_WEIGHT,
    SearchHit,
    candidate_ids,
    match,
    score_note,
    similarity,
)
from stash.note import Note
from stash.query import Query, parse_query

BASE = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _note(note_id: str, title: str, body: str, tags=(), projects=(), days: int = 0) -> Note:
    return Note(
        id=note_id,
        title=title,
        created=BASE + timedelta(days=days),
        body=body,
        tags=frozenset(tags),
        projects=frozenset(projects),
    )


@pytest.fixture()
def index() -> NoteIndex:
    return NoteIndex.build(
        [
            _note("rust", "ownership", "learned about rust ownership", tags=["rust"], days=0),
            _note("go", "channels", "go concurrency patterns", tags=["go"], projects=["backend"], days=1),
            _note("py", "asyncio", "python concurrency with asyncio", tags=["python"], projects=["backend"], days=2),
        ]
    )


def _ids(hits: list[SearchHit]) -> list[str]:
    return [h.note.id for h in hits]


# ---------------------------------------------------------------------------
# similarity
# ---------------------------------------------------------------------------


class TestSimilarity:
    def test_exact_substring(self):
        assert similarity("own", "ownership") == 100.0

    def test_typo_above_threshold(self):
        assert similarity("concurency", "go concurrency patterns") >= FUZZY_THRESHOLD

    def test_unrelated_below_threshold(self):
        assert similarity("database", "learned about rust ownership") < FUZZY_THRESHOLD

    def test_short_text_is_not_a_free_pass(self):
        # The text being a substring of the term is not a match.
        assert similarity("ownership", "own") < FUZZY_THRESHOLD

    def test_empty_text(self):
        assert similarity("rust", "") == 0.0


# ---------------------------------------------------------------------------
# Candidate selection
# ---------------------------------------------------------------------------


class TestCandidates:
    def test_no_constraints_is_everything(self, index: NoteIndex):
        assert candidate_ids(index, Query()) == {"rust", "go", "py"}

    def test_tag_and_project_intersect(self, index: NoteIndex):
        q = Query(required_tags=frozenset({"go"}), required_projects=frozenset({"backend"}))
        assert candidate_ids(index, q) == {"go"}

    def test_unknown_tag_is_empty(self, index: NoteIndex):
        assert candidate_ids(index, Query(required_tags=frozenset({"nope"}))) == set()

    def test_excluded_tags_removed(self, index: NoteIndex):
        q = Query(excluded_tags=frozenset({"rust", "python"}))
        assert candidate_ids(index, q) == {"go"}


# ---------------------------------------------------------------------------
# match: scenarios
# ---------------------------------------------------------------------------


class TestMatchScenarios:
    def test_tag_query(self, index: NoteIndex):
        assert _ids(match(index, parse_query("#rust"))) == ["rust"]

    def test_text_with_tag_exclusion(self, index: NoteIndex):
        assert _ids(match(index, parse_query("concurrency -#python"))) == ["go"]

    def test_required_term_must_match(self, index: NoteIndex):
        assert match(index, parse_query("concurrency kubernetes")) == []

    def test_fuzzy_term(self, index: NoteIndex):
        assert set(_ids(match(index, parse_query("concurency")))) == {"go", "py"}

    def test_title_matches(self, index: NoteIndex):
        assert _ids(match(index, parse_query("channels"))) == ["go"]

    def test_excluded_term_drops(self, index: NoteIndex):
        assert _ids(match(index, parse_query("concurrency -asyncio"))) == ["go"]

    def test_excluded_term_fuzzy(self, index: NoteIndex):
        assert _ids(match(index, parse_query("-ownersip"))) == ["py", "go"]

    def test_empty_query_lists_newest_first(self, index: NoteIndex):
        hits = match(index, Query())
        assert _ids(hits) == ["py", "go", "rust"]
        assert all(h.score == 0.0 for h in hits)

    def test_empty_index(self):
        assert match(NoteIndex.build([]), parse_query("anything #x")) == []

    def test_restartable(self, index: NoteIndex):
        q = parse_query("concurrency")
        assert match(index, q) == match(index, q)

    def test_hits_unpack_as_pairs(self, index: NoteIndex):
        note, score = match(index, parse_query("#go"))[0]
        assert note.id == "go"
        assert score == 0.0


class TestExclusionOnly:
    @pytest.mark.parametrize("raw", ["-#rust", "-#go -#python", "-ownership", "-#nothing", '-"go concurrency"'])
    def test_all_minus_excluded(self, index: NoteIndex, raw):
        q = parse_query(raw)
        excluded = {
            n.id
            for n in index
            if n.tags & q.excluded_tags
            or any(
                similarity(t.casefold(), n.title.casefold()) >= FUZZY_THRESHOLD
                or similarity(t.casefold(), n.body.casefold()) >= FUZZY_THRESHOLD
                for t in q.excluded_terms
            )
        }
        assert set(_ids(match(index, q))) == set(index.by_id) - excluded


# ---------------------------------------------------------------------------
# Case sensitivity
# ---------------------------------------------------------------------------


class TestCaseSensitivity:
    def test_case_sensitive_rejects_other_case(self):
        idx = NoteIndex.build([_note("n", "deploy log", "the api call failed")])
        assert match(idx, parse_query("API", case_sensitive=True)) == []

    def test_case_sensitive_accepts_same_case(self):
        idx = NoteIndex.build([_note("n", "deploy log", "the API call failed")])
        assert _ids(match(idx, parse_query("API", case_sensitive=True))) == ["n"]

    def test_insensitive_by_default(self):
        idx = NoteIndex.build([_note("n", "deploy log", "the api call failed")])
        assert _ids(match(idx, parse_query("API"))) == ["n"]

    def test_tags_ignore_case_flag(self):
        idx = NoteIndex.build([_note("n", "t", "b", tags=["rust"])])
        assert _ids(match(idx, parse_query("#RUST", case_sensitive=True))) == ["n"]


# ---------------------------------------------------------------------------
# Ranking
# ---------------------------------------------------------------------------


class TestRanking:
    def test_title_beats_body(self):
        idx = NoteIndex.build(
            [
                _note("body", "misc", "notes on kafka", days=5),
                _note("title", "kafka", "misc notes", days=0),
            ]
        )
        assert _ids(match(idx, parse_query("kafka"))) == ["title", "body"]

    def test_exact_beats_fuzzy(self):
        idx = NoteIndex.build(
            [
                _note("fuzzy", "misc", "notes on streamng data", days=5),
                _note("exact", "misc", "notes on streaming data", days=0),
            ]
        )
        assert _ids(match(idx, parse_query("streaming"))) == ["exact", "fuzzy"]

    def test_tie_broken_by_newest(self):
        idx = NoteIndex.build(
            [
                _note("old", "misc", "kafka", days=0),
                _note("new", "misc", "kafka", days=3),
            ]
        )
        assert _ids(match(idx, parse_query("kafka"))) == ["new", "old"]

    def test_score_sums_over_terms(self):
        note = _note("n", "kafka", "kafka streams")
        single = score_note(note, parse_query("kafka"))
        both = score_note(note, parse_query("kafka streams"))
        assert single == (TITLE_WEIGHT + BODY_WEIGHT) * (EXACT_BONUS + 1.0)
        assert both == single + BODY_WEIGHT * (EXACT_BONUS + 1.0)

    def test_score_note_none_when_term_missing(self):
        assert score_note(_note("n", "a", "b"), parse_query("zebra")) is None


# ---------------------------------------------------------------------------
# soft-deleted notes
# ---------------------------------------------------------------------------


class TestDeletedNotes:
    @pytest.fixture()
    def with_deleted(self) -> NoteIndex:
        return NoteIndex.build(
            [
                _note("live", "ownership", "rust ownership", tags=["rust"], days=0),
                _note("gone", "ownership draft", "rust ownership", tags=["rust", "deleted"], days=1),
            ]
        )

    @pytest.mark.parametrize("raw", ["", "ownership", "#rust", "-#go"])
    def test_hidden_by_default(self, with_deleted: NoteIndex, raw):
        assert _ids(match(with_deleted, parse_query(raw))) == ["live"]

    def test_found_when_deleted_tag_required(self, with_deleted: NoteIndex):
        assert _ids(match(with_deleted, parse_query("#deleted ownership"))) == ["gone"]

    def test_excluding_deleted_is_harmless(self, with_deleted: NoteIndex):
        assert _ids(match(with_deleted, parse_query("-#deleted"))) == ["live"]
