"""Search-string parser.

Grammar: whitespace-separated tokens, each classified by the first prefix it
carries, tested in this order:

==========  ==========================
``-#tag``   excluded tag
``-word``   excluded free-text term
``#tag``    required tag
``+proj``   required project
``word``    required free-text term
==========  ==========================

So ``-+x`` is the excluded term ``+x``, not an excluded project.  A
double-quoted span (``"error handling"``) is one free-text term even when it
holds spaces or prefix characters; ``-"..."`` is one excluded term.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import NamedTuple

from stash.errors import QueryParseError
from stash.extractor import normalize_token

_PREFIXES = ("-", "#", "+")


@dataclass(frozen=True)
class Query:
    """A parsed search.  The default instance matches every note."""

    terms: tuple[str, ...] = ()
    required_tags: frozenset[str] = frozenset()
    required_projects: frozenset[str] = frozenset()
    excluded_tags: frozenset[str] = frozenset()
    excluded_terms: frozenset[str] = frozenset()
    case_sensitive: bool = False

    @property
    def is_empty(self) -> bool:
        return not (
            self.terms
            or self.required_tags
            or self.required_projects
            or self.excluded_tags
            or self.excluded_terms
        )

    def to_string(self) -> str:
        """Render a search string that parses back to this query."""
        parts = [_quote_term(t) for t in self.terms]
        parts += [f"#{t}" for t in sorted(self.required_tags)]
        parts += [f"+{p}" for p in sorted(self.required_projects)]
        parts += [f"-#{t}" for t in sorted(self.excluded_tags)]
        parts += [f"-{_quote_excluded(t)}" for t in sorted(self.excluded_terms)]
        return " ".join(parts)


class _Token(NamedTuple):
    text: str
    position: int
    quoted: bool = False
    negated: bool = False


def _check_quotable(term: str) -> None:
    if '"' in term or not term:
        raise ValueError(f"term cannot be written as a query token: {term!r}")


def _quote_term(term: str) -> str:
    _check_quotable(term)
    if term.startswith(_PREFIXES) or any(c.isspace() for c in term):
        return f'"{term}"'
    return term


def _quote_excluded(term: str) -> str:
    _check_quotable(term)
    if term.startswith("#") or any(c.isspace() for c in term):
        return f'"{term}"'
    return term


def _tokenize(raw: str) -> Iterator[_Token]:
    i, n = 0, len(raw)
    while i < n:
        if raw[i].isspace():
            i += 1
            continue
        start = i
        negated = raw.startswith('-"', i)
        if negated:
            i += 1
        if raw[i] == '"':
            end = raw.find('"', i + 1)
            if end == -1:
                raise QueryParseError("unterminated quote", i)
            text = raw[i + 1 : end].strip()
            if not text:
                raise QueryParseError("empty quoted term", i)
            if end + 1 < n and not raw[end + 1].isspace():
                raise QueryParseError("unexpected text after closing quote", end + 1)
            yield _Token(text, start, quoted=True, negated=negated)
            i = end + 1
            continue
        j = i
        while j < n and not raw[j].isspace():
            if raw[j] == '"':
                raise QueryParseError("quote inside a term", j)
            j += 1
        yield _Token(raw[i:j], start)
        i = j


def _name(token: _Token, skip: int, kind: str) -> str:
    raw = token.text[skip:]
    if not raw:
        raise QueryParseError(f"missing {kind} name after {token.text!r}", token.position)
    name = None if raw.startswith(("#", "+")) else normalize_token(raw)
    if name is None:
        raise QueryParseError(f"invalid {kind} name {raw!r}", token.position + skip)
    return name


def parse_query(raw: str, case_sensitive: bool = False) -> Query:
    """Parse *raw* into a :class:`Query`.

    Raises :class:`QueryParseError` on an unterminated or misplaced quote, or
    on a prefix with no valid name after it.  Blank input matches everything.
    """
    terms: list[str] = []
    required_tags: set[str] = set()
    required_projects: set[str] = set()
    excluded_tags: set[str] = set()
    excluded_terms: set[str] = set()

    for token in _tokenize(raw):
        text = token.text
        if token.quoted:
            if token.negated:
                excluded_terms.add(text)
            elif text not in terms:
                terms.append(text)
        elif text.startswith("-#"):
            excluded_tags.add(_name(token, 2, "tag"))
        elif text.startswith("-"):
            if len(text) == 1:
                raise QueryParseError("missing term after '-'", token.position)
            excluded_terms.add(text[1:])
        elif text.startswith("#"):
            required_tags.add(_name(token, 1, "tag"))
        elif text.startswith("+"):
            required_projects.add(_name(token, 1, "project"))
        elif text not in terms:
            terms.append(text)

    return Query(
        terms=tuple(terms),
        required_tags=frozenset(required_tags),
        required_projects=frozenset(required_projects),
        excluded_tags=frozenset(excluded_tags),
        excluded_terms=frozenset(excluded_terms),
        case_sensitive=case_sensitive,
    )


def _names(values: Iterable[str], kind: str) -> set[str]:
    names: set[str] = set()
    for value in values:
        for part in value.split(","):
            if not part.strip():
                continue
            name = normalize_token(part)
            if name is None:
                raise QueryParseError(f"invalid {kind} filter {part.strip()!r}")
            names.add(name)
    return names


def build_query(
    raw: str,
    case_sensitive: bool = False,
    *,
    tags: Iterable[str] = (),
    projects: Iterable[str] = (),
) -> Query:
    """Parse *raw* and add extra required tags/projects.

    *tags* and *projects* accept comma-separated values, as given to the
    ``--tags``/``--projects`` command-line options.
    """
    query = parse_query(raw, case_sensitive)
    extra_tags = _names(tags, "tag")
    extra_projects = _names(projects, "project")
    if not extra_tags and not extra_projects:
        return query
    return dataclasses.replace(
        query,
        required_tags=query.required_tags | extra_tags,
        required_projects=query.required_projects | extra_projects,
    )
