from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

from ..models import ScoredTopic, SearchResult
from ..processors.normalize import parse_datetime
from ..utils.pipeline_config import RECENCY_WEIGHT, RELEVANCE_WEIGHT, PipelineConfig

NEUTRAL_SCORE = 0.5

# (max age in days, score); first matching bucket wins
_RECENCY_STEPS = ((0.0, 1.0), (7.0, 0.9), (30.0, 0.7), (60.0, 0.5), (90.0, 0.3))
_RECENCY_FLOOR = 0.1


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def recency_score(
    published_date: str | date | datetime | None, *, now: Optional[datetime] = None
) -> float:
    """Step-decay score for an item's age; unknown dates score neutral (0.5)."""
    published = parse_datetime(published_date)
    if published is None:
        return NEUTRAL_SCORE
    current = now or datetime.now(timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)
    age_days = (current - published).total_seconds() / 86400.0
    for max_age, score in _RECENCY_STEPS:
        if age_days <= max_age:
            return score
    return _RECENCY_FLOOR


def relevance_score(score: Optional[float]) -> float:
    # A provider score of 0 is indistinguishable from "missing" upstream
    if not score:
        return NEUTRAL_SCORE
    return _clamp(float(score))


def combined_score(
    relevance: float,
    recency: float,
    *,
    relevance_weight: float = RELEVANCE_WEIGHT,
    recency_weight: float = RECENCY_WEIGHT,
) -> float:
    return _clamp(relevance * relevance_weight + recency * recency_weight)


def score_topic(
    result: SearchResult,
    category: str,
    *,
    config: Optional[PipelineConfig] = None,
    now: Optional[datetime] = None,
) -> ScoredTopic:
    cfg = config or PipelineConfig()
    recency = recency_score(result.published_date, now=now)
    relevance = relevance_score(result.score)
    combined = combined_score(
        relevance,
        recency,
        relevance_weight=cfg.relevance_weight,
        recency_weight=cfg.recency_weight,
    )
    return ScoredTopic.from_result(
        result,
        relevance_score=relevance,
        recency_score=recency,
        combined_score=combined,
        suggested_category=category,
    )
