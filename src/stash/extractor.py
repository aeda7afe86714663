"""Inline ``#tag`` and ``+project`` extraction.

A marker is ``#`` or ``+`` directly followed by a token: word characters with
optional inner hyphens (``#open-source``, ``+side_project``).  Markers glued to
a preceding word, slash, backtick or another marker are ignored, so URL
fragments (``page#section``), ``c++``, ``a+b`` and ``## headings`` never
produce tags.  Fenced code blocks and inline code spans are blanked out before
scanning.  Every token is lowercased.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

_TOKEN = r"\w(?:[\w-]*\w)?"
_TAG_RE = re.compile(rf"(?<![\w/`#+])#({_TOKEN})")
_PROJECT_RE = re.compile(rf"(?<![\w/`#+])\+({_TOKEN})")
_TOKEN_RE = re.compile(rf"{_TOKEN}")
# fenced blocks first, then single-line inline spans
_CODE_RE = re.compile(r"^(```|~~~).*?^\1|`[^`\n]+`", re.DOTALL | re.MULTILINE)
_WIKILINK_RE = re.compile(r"\[\[([^\]|#]+)(?:[|#][^\]]*)?\]\]")


def normalize_token(raw: str) -> str | None:
    """Normalise a declared tag/project name; ``None`` if it is not a valid token.

    Surrounding whitespace and a single leading ``#``/``+`` are stripped.
    """
    token = raw.strip()
    if token[:1] in ("#", "+"):
        token = token[1:]
    token = token.lower()
    if not _TOKEN_RE.fullmatch(token):
        return None
    return token


def strip_code(text: str) -> str:
    """Replace code blocks and inline code spans with a single space."""
    return _CODE_RE.sub(" ", text)


def extract_tags(text: str) -> frozenset[str]:
    """Return every ``#tag`` in *text* outside code, lowercased."""
    return frozenset(m.group(1).lower() for m in _TAG_RE.finditer(strip_code(text)))


def extract_projects(text: str) -> frozenset[str]:
    """Return every ``+project`` in *text* outside code, lowercased."""
    return frozenset(m.group(1).lower() for m in _PROJECT_RE.finditer(strip_code(text)))


def extract_links(text: str) -> tuple[str, ...]:
    """Return ``[[wikilink]]`` targets outside code, deduplicated in order.

    Aliases (``[[target|label]]``) and anchors (``[[target#h]]``) are dropped.
    """
    targets = (m.group(1).strip() for m in _WIKILINK_RE.finditer(strip_code(text)))
    return tuple(dict.fromkeys(t for t in targets if t))


def extract_metadata(text: str) -> tuple[frozenset[str], frozenset[str]]:
    return extract_tags(text), extract_projects(text)


def merge_metadata(
    declared_tags: Iterable[str],
    declared_projects: Iterable[str],
    text: str,
) -> tuple[frozenset[str], frozenset[str]]:
    """Union declared tags/projects with the ones found in *text*.

    Declared names that are not valid tokens are dropped.
    """
    tags, projects = extract_metadata(text)
    tags |= {t for t in map(normalize_token, declared_tags) if t}
    projects |= {p for p in map(normalize_token, declared_projects) if p}
    return frozenset(tags), frozenset(projects)
