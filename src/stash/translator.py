"""Natural-language → query-string translator backed by a chat-completions API.

The translator only produces text in the search grammar of :mod:`stash.query`;
its output is parsed like any typed query.  Every failure is raised as
:class:`~stash.errors.TranslatorError` so callers can fall back to searching
for the literal input.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from stash.config import StashConfig
from stash.errors import TranslatorError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
You convert natural-language requests into search strings for the 'stash' note tool.

Return ONLY the search string. No explanation, no code fences, no surrounding quotes.

Search syntax (whitespace-separated tokens):
- word            notes containing the word (fuzzy)
- "two words"     notes containing the phrase
- #tag            notes with the tag
- +project        notes in the project
- -word           notes NOT containing the word
- -#tag           notes WITHOUT the tag

Examples:
- find rust notes -> #rust
- show me my webapp project -> +webapp
- notes about rust in my webapp -> #rust +webapp
- math notes -> math
- error handling in rust but nothing old -> "error handling" #rust -#old
"""

_PREFIXES = ("stash search ", "search ")


def clean_translation(raw: str) -> str:
    """Strip code fences, wrapping quotes and a leading ``stash search``."""
    text = raw.strip().strip("`").strip()
    for prefix in _PREFIXES:
        if text.lower().startswith(prefix):
            text = text[len(prefix) :].strip()
    if len(text) >= 2 and text[0] == text[-1] == "'":
        text = text[1:-1].strip()
    # Quotes around a single word are noise; a quoted phrase is a real query.
    if len(text) >= 2 and text[0] == text[-1] == '"' and text.count('"') == 2 and " " not in text:
        text = text[1:-1].strip()
    return text


class QueryTranslator:
    """Thin HTTP client for an OpenAI-compatible ``/chat/completions`` endpoint."""

    def __init__(
        self,
        api_key: str | None,
        *,
        model: str = "gpt-4o-mini",
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._url = base_url.rstrip("/") + "/chat/completions"
        self._timeout = timeout
        self._session = session or requests.Session()

    @classmethod
    def from_config(cls, config: StashConfig, **kwargs: Any) -> "QueryTranslator":
        return cls(
            config.api_key,
            model=config.model,
            base_url=config.base_url,
            timeout=config.timeout,
            **kwargs,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    def translate(self, text: str) -> str:
        """Turn *text* into a search string."""
        if not self.is_configured:
            raise TranslatorError("no API key configured")

        payload = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": f"Convert this request to a stash search string: {text}"},
            ],
            "max_tokens": 100,
            "temperature": 0.1,
        }
        try:
            r = self._session.post(
                self._url,
                json=payload,
                headers={"Authorization": f"Bearer {self._api_key}"},
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise TranslatorError(f"request failed: {exc}") from exc

        if not r.ok:
            raise TranslatorError(f"API error {r.status_code}: {r.text[:200]}")

        try:
            content = r.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise TranslatorError("malformed API response") from exc
        if not isinstance(content, str):
            raise TranslatorError("malformed API response")

        query = clean_translation(content)
        if not query:
            raise TranslatorError("empty translation")
        logger.debug("Translated %r -> %r", text, query)
        return query

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "QueryTranslator":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()
