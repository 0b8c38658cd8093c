from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from ..models import ExistingArticleFingerprint, ScoredTopic, SearchResult
from ..processors.classify import classify_category
from ..processors.dedup import Deduplicator
from ..utils.logging import get_logger
from ..utils.pipeline_config import PipelineConfig
from .scoring import score_topic

logger = get_logger("ag.analysis.topic_selection")


def validate_search_results(
    results: Iterable[SearchResult], *, min_text_length: int = 100
) -> List[SearchResult]:
    """Drop results that lack a title, url or text, or whose text is too short to write from."""
    return [
        r
        for r in results
        if r.title and r.url and r.text and len(r.text) > min_text_length
    ]


def rank_topics(
    candidates: Sequence[SearchResult],
    existing: Optional[Sequence[ExistingArticleFingerprint]] = None,
    *,
    config: Optional[PipelineConfig] = None,
    now: Optional[datetime] = None,
) -> List[ScoredTopic]:
    """Score every non-duplicate candidate, best first.

    ``sorted`` is stable, so equal combined scores keep their input order.
    """
    cfg = config or PipelineConfig()
    pool: Sequence[SearchResult] = candidates
    if existing:
        outcome = Deduplicator(cfg).filter(candidates, existing)
        pool = outcome.filtered
        if not pool and outcome.skipped:
            logger.warning(
                "All %d topics were duplicates: %s",
                len(outcome.skipped),
                [s.title for s in outcome.skipped],
            )

    scored = [
        score_topic(
            result,
            classify_category(
                result.title,
                result.text,
                category_keywords=cfg.category_keywords,
                default_category=cfg.default_category,
            ),
            config=cfg,
            now=now,
        )
        for result in pool
    ]
    return sorted(scored, key=lambda t: t.combined_score, reverse=True)


def select_best_topic(
    candidates: Sequence[SearchResult],
    existing: Optional[Sequence[ExistingArticleFingerprint]] = None,
    *,
    config: Optional[PipelineConfig] = None,
    now: Optional[datetime] = None,
) -> Optional[ScoredTopic]:
    """Return the highest-ranked unique topic, or None.

    None means either there were no candidates or every candidate duplicated
    an existing article; callers distinguish the two by checking the input.
    """
    if not candidates:
        return None
    ranked = rank_topics(candidates, existing, config=config, now=now)
    if not ranked:
        return None
    best = ranked[0]
    logger.info(
        "Selected topic '%s' (combined=%.2f relevance=%.2f recency=%.2f category=%s)",
        best.title,
        best.combined_score,
        best.relevance_score,
        best.recency_score,
        best.suggested_category,
    )
    return best
