"""Recovering structured JSON from free-form model output.

Models asked for "JSON only" still wrap it in code fences, prepend chatter,
leave trailing commas or emit raw newlines inside strings. Each recovery
strategy below is a plain function so it can be exercised on its own;
``parse_article_response`` chains them and reports which one worked.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple, Union

_code_block_re = re.compile(r"```(?:json|JSON)?\s*([\s\S]*?)```")
_title_patterns = (
    re.compile(r'"title"\s*:\s*"([^"]+)"'),
    re.compile(r"^#\s+(.+)$", re.MULTILINE),
)
_content_re = re.compile(r'"content"\s*:\s*"([\s\S]+?)"\s*,?\s*"tags"')
_heading_re = re.compile(r"^#\s+.+$", re.MULTILINE)
_json_field_re = re.compile(r'"(?:title|content)"\s*:')

MIN_FALLBACK_CONTENT = 500
MIN_FALLBACK_TITLE = 10


class ParseError(ValueError):
    """Raised when a model response holds no usable JSON object."""


@dataclass(frozen=True, slots=True)
class StructuredJson:
    data: Dict[str, Any]
    strategy: str


@dataclass(frozen=True, slots=True)
class FallbackExtracted:
    title: str
    content: str


@dataclass(frozen=True, slots=True)
class Unrecoverable:
    reason: str


ParseOutcome = Union[StructuredJson, FallbackExtracted, Unrecoverable]


def sanitize_json(text: str) -> str:
    """Repair the usual defects of model-written JSON.

    Inside string literals raw newlines, carriage returns and tabs are escaped
    and other control characters dropped. Outside strings control characters
    become spaces and commas directly before ``}`` or ``]`` are removed.
    """
    out: list[str] = []
    in_string = False
    escaped = False
    n = len(text)
    i = 0
    while i < n:
        ch = text[i]
        if in_string:
            if escaped:
                out.append(ch)
                escaped = False
            elif ch == "\\":
                out.append(ch)
                escaped = True
            elif ch == '"':
                out.append(ch)
                in_string = False
            elif ch == "\n":
                out.append("\\n")
            elif ch == "\r":
                out.append("\\r")
            elif ch == "\t":
                out.append("\\t")
            elif ord(ch) < 0x20 or ch == "\x7f":
                pass
            else:
                out.append(ch)
        else:
            if ch == '"':
                in_string = True
                out.append(ch)
            elif ch == ",":
                j = i + 1
                while j < n and text[j] in " \t\r\n":
                    j += 1
                if j < n and text[j] in "}]":
                    i += 1
                    continue
                out.append(ch)
            elif ord(ch) < 0x20 and ch not in "\n\r\t":
                out.append(" ")
            else:
                out.append(ch)
        i += 1
    return "".join(out)


def _loads_object(candidate: str) -> Optional[Dict[str, Any]]:
    for attempt in (candidate, sanitize_json(candidate)):
        try:
            obj = json.loads(attempt)
        except (json.JSONDecodeError, ValueError):
            continue
        if isinstance(obj, dict):
            return obj
    return None


def parse_strict(raw: str) -> Optional[Dict[str, Any]]:
    return _loads_object(raw.strip())


def parse_code_block(raw: str) -> Optional[Dict[str, Any]]:
    match = _code_block_re.search(raw)
    if not match:
        return None
    return _loads_object(match.group(1).strip())


def parse_brace_slice(raw: str) -> Optional[Dict[str, Any]]:
    first = raw.find("{")
    last = raw.rfind("}")
    if first == -1 or last <= first:
        return None
    return _loads_object(raw[first : last + 1])


_STRATEGIES: Tuple[Tuple[str, Callable[[str], Optional[Dict[str, Any]]]], ...] = (
    ("strict", parse_strict),
    ("code_block", parse_code_block),
    ("brace_slice", parse_brace_slice),
)


def parse_json_object(raw: str) -> Tuple[Dict[str, Any], str]:
    """Return ``(object, strategy_name)`` from the first strategy that succeeds."""
    if not raw or not raw.strip():
        raise ParseError("Empty AI response")
    for name, strategy in _STRATEGIES:
        data = strategy(raw)
        if data is not None:
            return data, name
    raise ParseError("No JSON object found in AI response")


def _unescape_json_text(value: str) -> str:
    return value.replace("\\n", "\n").replace('\\"', '"').replace("\\t", "\t").strip()


def extract_fallback(
    raw: str,
    *,
    default_title: Optional[str] = None,
    min_content_length: int = MIN_FALLBACK_CONTENT,
) -> Union[FallbackExtracted, Unrecoverable]:
    """Pull ``title`` and ``content`` out of text that is not parseable JSON.

    Handles half-written JSON (``"content": "..." , "tags"``) and plain
    markdown articles that start with a ``# Title`` heading.
    """
    title = ""
    for pattern in _title_patterns:
        match = pattern.search(raw)
        if match and len(match.group(1).strip()) > MIN_FALLBACK_TITLE:
            title = match.group(1).strip()
            break
    title = title or (default_title or "").strip()

    content = ""
    match = _content_re.search(raw)
    if match and len(match.group(1)) > min_content_length:
        content = _unescape_json_text(match.group(1))
    elif not _json_field_re.search(raw):
        heading = _heading_re.search(raw)
        body = raw[heading.end():] if heading else raw
        if len(body.strip()) > min_content_length:
            content = body.strip()

    if not title:
        return Unrecoverable("No title could be recovered from AI response")
    if len(content) < min_content_length:
        return Unrecoverable("Failed to parse generated article content")
    return FallbackExtracted(title=title, content=content)


def parse_article_response(raw: str, *, default_title: Optional[str] = None) -> ParseOutcome:
    if not raw or not raw.strip():
        return Unrecoverable("Empty AI response")
    try:
        data, strategy = parse_json_object(raw)
    except ParseError:
        return extract_fallback(raw, default_title=default_title)
    return StructuredJson(data=data, strategy=strategy)
