from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, FrozenSet, List, Literal, Mapping, Optional

ResultSource = Literal["exa", "fallback", "manual"]


@dataclass(frozen=True, slots=True)
class SearchResult:
    """One candidate topic as returned by a search provider."""

    title: str
    url: str
    text: str
    published_date: Optional[str] = None
    score: Optional[float] = None
    source: ResultSource = "manual"
    source_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SearchResult":
        """Build from a provider payload; accepts camelCase or snake_case keys."""
        published = data.get("published_date", data.get("publishedDate"))
        score = data.get("score")
        return cls(
            title=str(data.get("title") or ""),
            url=str(data.get("url") or ""),
            text=str(data.get("text") or ""),
            published_date=str(published) if published else None,
            score=float(score) if score is not None else None,
            source=data.get("source") or "manual",
            source_name=data.get("source_name", data.get("sourceName")),
        )


@dataclass(frozen=True, slots=True)
class ExistingArticleFingerprint:
    """Summary of a stored article used only for duplicate comparison."""

    title: str
    keywords: FrozenSet[str] = frozenset()
    urls: FrozenSet[str] = frozenset()


@dataclass(frozen=True, slots=True)
class ScoredTopic:
    title: str
    url: str
    text: str
    published_date: Optional[str]
    relevance_score: float
    recency_score: float
    combined_score: float
    suggested_category: str
    source_name: Optional[str] = None

    @classmethod
    def from_result(
        cls,
        result: SearchResult,
        *,
        relevance_score: float,
        recency_score: float,
        combined_score: float,
        suggested_category: str,
    ) -> "ScoredTopic":
        return cls(
            title=result.title,
            url=result.url,
            text=result.text,
            published_date=result.published_date,
            relevance_score=relevance_score,
            recency_score=recency_score,
            combined_score=combined_score,
            suggested_category=suggested_category,
            source_name=result.source_name,
        )


@dataclass(frozen=True, slots=True)
class DuplicationCheckResult:
    is_duplicate: bool
    similarity: float
    similar_to: Optional[str] = None


@dataclass(frozen=True, slots=True)
class SkippedTopic:
    title: str
    url: str
    similar_to: str
    similarity: float


@dataclass(slots=True)
class FilteredTopics:
    filtered: List[SearchResult] = field(default_factory=list)
    skipped: List[SkippedTopic] = field(default_factory=list)
