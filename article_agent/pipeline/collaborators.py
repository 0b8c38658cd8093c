"""Interfaces of the services the pipeline depends on but does not own."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Tuple

from ..models import ExistingArticleFingerprint, GeneratedArticleData, SavedArticle, SearchResult
from ..utils.pipeline_config import DAILY_RATE_LIMIT, PipelineConfig

ThumbnailLookup = Callable[[str], Optional[str]]


class SearchError(Exception):
    """Raised by search providers on transport or API errors."""


class ArticleStore(ABC):
    """Persistence for published articles."""

    @abstractmethod
    def get_existing_articles(self, limit: int) -> List[ExistingArticleFingerprint]:
        """Fingerprints of the ``limit`` most recently published articles, newest first."""

    @abstractmethod
    def create_article(
        self,
        data: GeneratedArticleData,
        *,
        thumbnail_url: Optional[str],
        is_published: bool = True,
    ) -> SavedArticle:
        """Persist ``data``; raises on storage failure."""


class SearchProvider(ABC):
    @abstractmethod
    async def search(self, query: str, *, num_results: int = 5) -> List[SearchResult]:
        """Return candidate topics for ``query``; raises ``SearchError`` on failure."""


@dataclass(frozen=True, slots=True)
class RateLimitStatus:
    allowed: bool
    remaining: int
    reset_at: datetime
    generated_today: int


class RateLimiter(ABC):
    @abstractmethod
    def check(self, admin_id: str, *, now: Optional[datetime] = None) -> RateLimitStatus:
        ...

    @abstractmethod
    def record(self, admin_id: str, *, now: Optional[datetime] = None) -> None:
        ...


class DailyRateLimiter(RateLimiter):
    """Per-admin generation budget over the current UTC day, kept in memory."""

    def __init__(self, *, limit: int = DAILY_RATE_LIMIT) -> None:
        self.limit = limit
        self._counts: Dict[Tuple[str, str], int] = defaultdict(int)

    @staticmethod
    def _day_window(now: Optional[datetime]) -> Tuple[str, datetime]:
        current = now or datetime.now(timezone.utc)
        if current.tzinfo is None:
            current = current.replace(tzinfo=timezone.utc)
        current = current.astimezone(timezone.utc)
        start = datetime(current.year, current.month, current.day, tzinfo=timezone.utc)
        return start.date().isoformat(), start + timedelta(days=1)

    def check(self, admin_id: str, *, now: Optional[datetime] = None) -> RateLimitStatus:
        day, reset_at = self._day_window(now)
        used = self._counts.get((admin_id, day), 0)
        remaining = max(0, self.limit - used)
        return RateLimitStatus(allowed=remaining > 0, remaining=remaining, reset_at=reset_at, generated_today=used)

    def record(self, admin_id: str, *, now: Optional[datetime] = None) -> None:
        day, _ = self._day_window(now)
        for key in [k for k in self._counts if k[1] < day]:
            del self._counts[key]
        self._counts[(admin_id, day)] += 1


def thumbnail_for_category(config: Optional[PipelineConfig] = None) -> ThumbnailLookup:
    """Category -> image URL lookup backed by the configured mapping."""
    mapping = dict((config or PipelineConfig()).thumbnails)

    def _lookup(category: str) -> Optional[str]:
        return mapping.get(category)

    return _lookup
