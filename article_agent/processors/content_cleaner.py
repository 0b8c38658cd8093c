from __future__ import annotations

import re
from typing import Iterable, List

_word_count_paren_re = re.compile(r"\(\d+(?:\s*-\s*\d+)?\s*words?\)", re.IGNORECASE)
_word_count_bracket_re = re.compile(r"\[\d+(?:\s*-\s*\d+)?\s*words?\]", re.IGNORECASE)
_target_length_re = re.compile(r"-\s*Target\s+Length:\s*\d+(?:\s*-\s*\d+)?\s*words?", re.IGNORECASE)
_section_prefix_re = re.compile(r"^Section\s+\d+:\s*", re.IGNORECASE | re.MULTILINE)
_section_label_re = re.compile(r"\[Section\s+\d+(?::[^\]\n]*)?\]", re.IGNORECASE)
_blank_runs_re = re.compile(r"\n{3,}")
_surrounding_quotes_re = re.compile(r"^[\"'\s]+|[\"'\s]+$")
_whitespace_re = re.compile(r"\s+")

MAX_TAGS = 5


def clean_article_content(text: str) -> str:
    """Remove authoring artifacts models leave in the body.

    Word-count annotations like "(150-200 words)", "[300 words]" and
    "- Target Length: 300 words", "Section 2:" prefixes and "[Section 2]"
    labels are stripped, then runs of blank lines are collapsed.
    """
    if not text:
        return text or ""
    text = text.replace("\r\n", "\n")
    text = _word_count_paren_re.sub("", text)
    text = _word_count_bracket_re.sub("", text)
    text = _target_length_re.sub("", text)
    text = _section_label_re.sub("", text)
    text = _section_prefix_re.sub("", text)
    text = _blank_runs_re.sub("\n\n", text)
    return text.strip()


def clean_title(title: str) -> str:
    title = _surrounding_quotes_re.sub("", title or "")
    return _whitespace_re.sub(" ", title).strip()


def clean_summary(summary: str) -> str:
    summary = _surrounding_quotes_re.sub("", summary or "")
    return _whitespace_re.sub(" ", summary).strip()


def clean_tags(tags: Iterable[object], *, limit: int = MAX_TAGS) -> List[str]:
    """Lowercase, trim and dedupe tags, keeping the first ``limit``."""
    seen: set[str] = set()
    cleaned: List[str] = []
    for tag in tags or []:
        if not isinstance(tag, str):
            continue
        value = _whitespace_re.sub(" ", tag.lower()).strip()
        if not value or value in seen:
            continue
        seen.add(value)
        cleaned.append(value)
        if len(cleaned) >= limit:
            break
    return cleaned


def truncate(text: str, limit: int) -> str:
    return (text or "")[:limit]


def word_count(text: str) -> int:
    return len((text or "").split())
