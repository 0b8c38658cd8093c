from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Union

import pytest

from article_agent.models import (
    ExistingArticleFingerprint,
    GeneratedArticleData,
    SavedArticle,
    ScoredTopic,
    SearchResult,
)
from article_agent.pipeline.collaborators import ArticleStore, SearchProvider
from article_agent.processors.ai.base import AIClient, ChatMessage, ChatResponse
from article_agent.utils.pipeline_config import PipelineConfig

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)

LONG_TEXT = (
    "Online sellers are rethinking how they reach shoppers. This research covers marketing "
    "campaigns, social media engagement and brand promotion tactics that worked this year, "
    "with concrete numbers from several mid-sized stores."
)


def article_body(words: int = 1600) -> str:
    paragraph = "Sellers who test their product pages weekly see steadier conversion gains over time. "
    sentences = [paragraph] * (words // len(paragraph.split()) + 1)
    return "## Introduction\n\n" + "".join(sentences)


def article_json(title: str = "Social Commerce Playbook for Small Stores", **overrides) -> str:
    payload = {
        "title": title,
        "summary": "How small stores turn social feeds into a sales channel.",
        "content": article_body(),
        "tags": ["Social Commerce", "tiktok shop", "social commerce", "growth", "retail", "extra"],
        "metaTitle": "Social Commerce Playbook",
        "metaDescription": "A practical guide to selling through social platforms.",
    }
    payload.update(overrides)
    return json.dumps(payload)


Reply = Union[str, Exception]


class FakeAIClient(AIClient):
    """Replays scripted replies; an Exception entry is raised instead of returned."""

    def __init__(self, replies: Sequence[Reply]) -> None:
        self.replies: List[Reply] = list(replies)
        self.calls: List[dict] = []

    async def chat(
        self,
        messages: Sequence[ChatMessage],
        *,
        temperature: float = 0.7,
        max_tokens: int = 2000,
    ) -> ChatResponse:
        self.calls.append({"messages": list(messages), "temperature": temperature, "max_tokens": max_tokens})
        if not self.replies:
            raise RuntimeError("no scripted reply left")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return ChatResponse(content=reply, model="fake")


class FakeStore(ArticleStore):
    def __init__(
        self,
        existing: Sequence[ExistingArticleFingerprint] = (),
        *,
        fail_load: bool = False,
        fail_save: bool = False,
    ) -> None:
        self.existing = list(existing)
        self.fail_load = fail_load
        self.fail_save = fail_save
        self.load_limits: List[int] = []
        self.saved: List[tuple] = []
        self.save_attempts = 0

    def get_existing_articles(self, limit: int) -> List[ExistingArticleFingerprint]:
        self.load_limits.append(limit)
        if self.fail_load:
            raise ConnectionError("database unavailable")
        return self.existing[:limit]

    def create_article(
        self,
        data: GeneratedArticleData,
        *,
        thumbnail_url: Optional[str],
        is_published: bool = True,
    ) -> SavedArticle:
        self.save_attempts += 1
        if self.fail_save:
            raise IOError("disk full")
        self.saved.append((data, thumbnail_url, is_published))
        return SavedArticle(
            id=f"art-{len(self.saved)}",
            slug="saved-article",
            title=data.title,
            summary=data.summary,
            category=data.category,
            thumbnail_url=thumbnail_url,
            reading_time=8,
            created_at=NOW.isoformat(),
        )


class FakeSearchProvider(SearchProvider):
    def __init__(self, results: Sequence[SearchResult] = (), *, error: Optional[Exception] = None) -> None:
        self.results = list(results)
        self.error = error
        self.queries: List[str] = []

    async def search(self, query: str, *, num_results: int = 5) -> List[SearchResult]:
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return list(self.results)


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def make_result(
    title: str = "Social Commerce Revolution for Independent Sellers",
    url: str = "https://news.example.com/social-commerce",
    *,
    text: str = LONG_TEXT,
    published_date: Optional[str] = "2025-06-15T08:00:00Z",
    score: Optional[float] = 0.8,
) -> SearchResult:
    return SearchResult(title=title, url=url, text=text, published_date=published_date, score=score, source="exa")


def make_topic(**overrides) -> ScoredTopic:
    fields = dict(
        title="Social Commerce Revolution for Independent Sellers",
        url="https://news.example.com/social-commerce",
        text=LONG_TEXT,
        published_date="2025-06-15T08:00:00Z",
        relevance_score=0.8,
        recency_score=1.0,
        combined_score=0.88,
        suggested_category="marketing",
    )
    fields.update(overrides)
    return ScoredTopic(**fields)


@pytest.fixture
def config() -> PipelineConfig:
    return PipelineConfig()


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()
