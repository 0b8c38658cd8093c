from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True, slots=True)
class ArticleSource:
    url: str
    title: str
    domain: str


@dataclass(slots=True)
class GeneratedArticleData:
    """Cleaned output of a generation run, ready to hand to persistence."""

    title: str
    summary: str
    content: str
    category: str
    tags: List[str] = field(default_factory=list)
    sources: List[ArticleSource] = field(default_factory=list)
    meta_title: str = ""
    meta_description: str = ""

    @property
    def word_count(self) -> int:
        return len(self.content.split())

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class SavedArticle:
    """Reference to a persisted article as reported back by the store."""

    id: str
    slug: str
    title: str
    summary: str
    category: str
    thumbnail_url: Optional[str]
    reading_time: int
    created_at: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
