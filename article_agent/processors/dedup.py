from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from ..models import (
    DuplicationCheckResult,
    ExistingArticleFingerprint,
    FilteredTopics,
    SearchResult,
    SkippedTopic,
)
from ..utils.logging import get_logger
from ..utils.pipeline_config import PipelineConfig
from .similarity import combined_similarity, extract_keywords

logger = get_logger("ag.processors.dedup")


def build_fingerprint(
    title: str,
    urls: Iterable[str] = (),
    *,
    config: Optional[PipelineConfig] = None,
) -> ExistingArticleFingerprint:
    cfg = config or PipelineConfig()
    keywords = extract_keywords(title, stop_words=cfg.stop_words, max_keywords=cfg.max_keywords)
    return ExistingArticleFingerprint(
        title=title,
        keywords=frozenset(keywords),
        urls=frozenset(u for u in urls if u),
    )


class Deduplicator:
    """Decide whether candidate topics repeat articles we already published.

    Strategies, in order:
    - Exact source URL match (similarity 1.0, no further comparison)
    - Weighted keyword Jaccard + title bigram similarity against every
      fingerprint, keeping the maximum

    The fingerprint list is read-only here and may be shared across runs.
    """

    def __init__(self, config: Optional[PipelineConfig] = None) -> None:
        self.config = config or PipelineConfig()

    @property
    def threshold(self) -> float:
        return self.config.similarity_threshold

    def _bounded(self, existing: Sequence[ExistingArticleFingerprint]) -> Sequence[ExistingArticleFingerprint]:
        limit = self.config.duplicate_check_limit
        if len(existing) > limit:
            logger.warning(
                "Received %d existing articles; comparing only the %d most recent", len(existing), limit
            )
            return existing[:limit]
        return existing

    def similarity(self, title: str, article: ExistingArticleFingerprint) -> float:
        return combined_similarity(
            title,
            article,
            keyword_weight=self.config.keyword_similarity_weight,
            ngram_weight=self.config.ngram_similarity_weight,
            stop_words=self.config.stop_words,
            max_keywords=self.config.max_keywords,
        )

    def check(
        self,
        candidate: SearchResult,
        existing: Sequence[ExistingArticleFingerprint],
    ) -> DuplicationCheckResult:
        existing = self._bounded(existing)

        if candidate.url:
            for article in existing:
                if candidate.url in article.urls:
                    logger.info("Duplicate by URL: '%s' matches '%s'", candidate.title, article.title)
                    return DuplicationCheckResult(is_duplicate=True, similarity=1.0, similar_to=article.title)

        max_similarity = 0.0
        most_similar = ""
        near_miss = self.threshold * 0.8
        for article in existing:
            sim = self.similarity(candidate.title, article)
            if sim > max_similarity:
                max_similarity, most_similar = sim, article.title
            if sim >= near_miss:
                logger.debug("Similarity '%s' vs '%s' = %.1f%%", candidate.title, article.title, sim * 100)

        is_duplicate = max_similarity >= self.threshold
        if is_duplicate:
            logger.info(
                "Duplicate detected: '%s' is %.1f%% similar to '%s'",
                candidate.title,
                max_similarity * 100,
                most_similar,
            )
        return DuplicationCheckResult(
            is_duplicate=is_duplicate,
            similarity=max_similarity,
            similar_to=most_similar if is_duplicate else None,
        )

    def filter(
        self,
        candidates: Iterable[SearchResult],
        existing: Sequence[ExistingArticleFingerprint],
    ) -> FilteredTopics:
        """Split candidates into unique and skipped, preserving input order."""
        existing = self._bounded(existing)
        result = FilteredTopics()
        for candidate in candidates:
            check = self.check(candidate, existing)
            if check.is_duplicate:
                result.skipped.append(
                    SkippedTopic(
                        title=candidate.title,
                        url=candidate.url,
                        similar_to=check.similar_to or "",
                        similarity=check.similarity,
                    )
                )
            else:
                result.filtered.append(candidate)
        if result.skipped:
            logger.info(
                "Topic deduplication: %d unique, %d duplicates skipped",
                len(result.filtered),
                len(result.skipped),
            )
        return result


def check_topic_duplication(
    candidate: SearchResult,
    existing: Sequence[ExistingArticleFingerprint],
    *,
    config: Optional[PipelineConfig] = None,
) -> DuplicationCheckResult:
    return Deduplicator(config).check(candidate, existing)


def filter_duplicate_topics(
    candidates: Iterable[SearchResult],
    existing: Sequence[ExistingArticleFingerprint],
    *,
    config: Optional[PipelineConfig] = None,
) -> FilteredTopics:
    return Deduplicator(config).filter(candidates, existing)


def bounded_fingerprints(
    rows: Iterable[tuple[str, Iterable[str]]],
    *,
    config: Optional[PipelineConfig] = None,
) -> List[ExistingArticleFingerprint]:
    """Build fingerprints from ``(title, urls)`` rows ordered newest first.

    Stops after ``duplicate_check_limit`` rows so callers never hold more than
    the bounded comparison set.
    """
    cfg = config or PipelineConfig()
    out: List[ExistingArticleFingerprint] = []
    for title, urls in rows:
        if len(out) >= cfg.duplicate_check_limit:
            break
        if title:
            out.append(build_fingerprint(title, urls, config=cfg))
    return out
