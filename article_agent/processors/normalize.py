from __future__ import annotations

import html
import re
import unicodedata
from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Iterable, List, Optional

from bs4 import BeautifulSoup

from ..models import SearchResult
from ..utils.logging import get_logger

_whitespace_re = re.compile(r"\s+")
_control_chars_re = re.compile(r"[\u0000-\u0008\u000B\u000C\u000E-\u001F\u007F]")
_tag_hint_re = re.compile(r"<[a-zA-Z/!][^>]*>")

_PUNCT_TRANSLATION = {
    ord("\u2018"): "'",  # left single quote
    ord("\u2019"): "'",  # right single quote
    ord("\u201C"): '"',  # left double quote
    ord("\u201D"): '"',  # right double quote
    ord("\u2013"): "-",  # en dash
    ord("\u2014"): "-",  # em dash
    ord("\u00A0"): " ",  # non-breaking space
}

_logger = get_logger("ag.processors.normalize")


def clean_html_to_text(raw_html: str | None) -> str:
    """Clean HTML to normalized plain text.

    - Strip tags
    - Unescape HTML entities
    - Collapse whitespace
    """
    if not raw_html:
        return ""

    soup = BeautifulSoup(raw_html, "html.parser")
    text = soup.get_text("\n")
    text = html.unescape(text)
    text = _whitespace_re.sub(" ", text)
    return text.strip()


def normalize_plain_text(text: str | None) -> str:
    """Normalize plain text for keyword extraction and prompting.

    - Strip BOM
    - Replace curly quotes/dashes and non-breaking spaces
    - Unicode normalize (NFKC)
    - Remove control characters
    - Collapse whitespace
    """
    if not text:
        return ""

    if text.startswith("\ufeff"):
        text = text.lstrip("\ufeff")

    text = text.translate(_PUNCT_TRANSLATION)
    text = unicodedata.normalize("NFKC", text)
    text = _control_chars_re.sub(" ", text)
    return _whitespace_re.sub(" ", text).strip()


def normalize_search_result(result: SearchResult) -> SearchResult:
    """Return a copy of ``result`` with plain-text title and body.

    Providers sometimes hand back HTML snippets; those are stripped before the
    text length check so markup does not count towards "enough content".
    """
    text = result.text or ""
    if _tag_hint_re.search(text):
        text = clean_html_to_text(text)
    return replace(
        result,
        title=normalize_plain_text(result.title),
        url=(result.url or "").strip(),
        text=normalize_plain_text(text),
    )


def batch_normalize(results: Iterable[SearchResult]) -> List[SearchResult]:
    """Normalize search results; entries that fail are skipped with a warning."""
    normalized: List[SearchResult] = []
    for r in results:
        try:
            normalized.append(normalize_search_result(r))
        except Exception as exc:  # noqa: BLE001 - one bad provider row must not sink the batch
            _logger.warning("Failed to normalize search result '%s': %s", getattr(r, "title", "?"), exc)
    return normalized


def parse_datetime(value: str | date | datetime | None) -> Optional[datetime]:
    """Parse a provider date into an aware UTC datetime, or None.

    Accepts ISO 8601 (with or without a trailing ``Z``) plus a few day-first
    and slash formats. Naive values are assumed to be UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    else:
        raw = str(value).strip()
        if raw.endswith("Z") or raw.endswith("z"):
            raw = raw[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(raw)
        except ValueError:
            dt = None
            for fmt in ("%Y/%m/%d", "%d.%m.%Y", "%a, %d %b %Y %H:%M:%S %z"):
                try:
                    dt = datetime.strptime(raw, fmt)
                    break
                except ValueError:
                    continue
            if dt is None:
                return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
