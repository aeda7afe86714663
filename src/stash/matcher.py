"""Match a parsed :class:`Query` against a :class:`NoteIndex` and rank the hits.

Scoring
-------
Every required term is scored against the note title and body separately:

* exact substring: ``EXACT_BONUS + 1.0``
* fuzzy similarity at or above ``FUZZY_THRESHOLD``: ``similarity / 100``
* otherwise: nothing

Title scores are multiplied by ``TITLE_WEIGHT`` and body scores by
``BODY_WEIGHT``; the note score is the sum over all terms.  A term that
reaches the threshold in neither field drops the note, as does any excluded
term that reaches it in either field.

Notes tagged ``#deleted`` are skipped unless the query requires that tag.
"""

from __future__ import annotations

from typing import NamedTuple

from rapidfuzz import fuzz

from stash.index import NoteIndex
from stash.note import DELETED_TAG, Note
from stash.query import Query

#: Minimum rapidfuzz similarity (0-100) for a fuzzy match.
FUZZY_THRESHOLD = 80.0
EXACT_BONUS = 2.0
TITLE_WEIGHT = 2.0
BODY_WEIGHT = 1.0


class SearchHit(NamedTuple):
    note: Note
    score: float


def similarity(term: str, text: str) -> float:
    """How well *term* occurs somewhere in *text*, on a 0-100 scale."""
    if term in text:
        return 100.0
    if len(text) < len(term):
        return fuzz.ratio(term, text)
    return fuzz.partial_ratio(term, text)


def _field_score(term: str, text: str) -> float:
    if term in text:
        return EXACT_BONUS + 1.0
    sim = similarity(term, text)
    if sim >= FUZZY_THRESHOLD:
        return sim / 100.0
    return 0.0


def candidate_ids(index: NoteIndex, query: Query) -> set[str]:
    """Ids satisfying the tag and project constraints of *query*."""
    constraints = [index.lookup_by_tag(t) for t in query.required_tags]
    constraints += [index.lookup_by_project(p) for p in query.required_projects]
    if not constraints:
        ids = set(index.all_ids())
    else:
        ids = set(constraints[0]).intersection(*constraints[1:])
    if query.excluded_tags:
        ids = {i for i in ids if not (index.by_id[i].tags & query.excluded_tags)}
    if DELETED_TAG not in query.required_tags:
        ids = {i for i in ids if not index.by_id[i].is_deleted}
    return ids


def score_note(note: Note, query: Query) -> float | None:
    """Free-text score of *note*, or ``None`` if the terms rule it out."""
    fold = (lambda s: s) if query.case_sensitive else str.casefold
    title = fold(note.title)
    body = fold(note.body)

    for term in query.excluded_terms:
        t = fold(term)
        if similarity(t, title) >= FUZZY_THRESHOLD or similarity(t, body) >= FUZZY_THRESHOLD:
            return None

    total = 0.0
    for term in query.terms:
        t = fold(term)
        title_score = _field_score(t, title)
        body_score = _field_score(t, body)
        if not title_score and not body_score:
            return None
        total += TITLE_WEIGHT * title_score + BODY_WEIGHT * body_score
    return total


def match(index: NoteIndex, query: Query) -> list[SearchHit]:
    """Return the notes matching *query*, best first.

    Ties on score go to the newest note, then to the larger id, so the order
    never depends on load order.
    """
    hits: list[SearchHit] = []
    for note_id in candidate_ids(index, query):
        note = index.by_id[note_id]
        score = score_note(note, query)
        if score is not None:
            hits.append(SearchHit(note, score))
    hits.sort(key=lambda h: (h.score, h.note.created, h.note.id), reverse=True)
    return hits
