from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from ..analysis.search_agent import SearchAgent, default_queries
from ..analysis.topic_selection import select_best_topic, validate_search_results
from ..models import (
    ExistingArticleFingerprint,
    GeneratedArticleData,
    GenerationError,
    GenerationErrorCode,
    GenerationFailure,
    GenerationResult,
    SavedArticle,
    ScoredTopic,
    SearchResult,
)
from ..orchestrator import ContentGenerator
from ..output.progress import ProgressEmitter, ProgressListener
from ..processors.ai.base import AIClient
from ..processors.ai.retry import Sleep
from ..processors.normalize import batch_normalize
from ..utils.logging import get_logger
from ..utils.pipeline_config import PipelineConfig
from .collaborators import ArticleStore, RateLimiter, SearchProvider, ThumbnailLookup, thumbnail_for_category

logger = get_logger("ag.pipeline.article")

SEARCH_RESULTS_PER_QUERY = 5

NO_VALID_TOPICS_SUGGESTIONS = [
    "Try a broader search query",
    "Check that the search provider returns article text",
]
ALL_DUPLICATES_SUGGESTIONS = [
    "Try a different search query",
    "Search for more specific topics",
]
SEARCH_SUGGESTIONS = ["Check your search API key", "Try again later"]


@dataclass(slots=True)
class _RunState:
    """Per-call scratch space; never shared between runs."""

    progress: ProgressEmitter
    topic: Optional[ScoredTopic] = None
    existing: List[ExistingArticleFingerprint] = field(default_factory=list)


class ArticlePipeline:
    """End-to-end generation: search, select, generate, thumbnail, save.

    ``run`` always returns exactly one ``GenerationResult``; every failure
    (expected or not) is reported through it rather than raised. The pipeline
    object only holds collaborators and configuration, so concurrent runs do
    not share mutable state.
    """

    def __init__(
        self,
        client: AIClient,
        store: ArticleStore,
        *,
        config: Optional[PipelineConfig] = None,
        listeners: Iterable[ProgressListener] = (),
        thumbnails: Optional[ThumbnailLookup] = None,
        rate_limiter: Optional[RateLimiter] = None,
        search_provider: Optional[SearchProvider] = None,
        search_agent: Optional[SearchAgent] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.client = client
        self.store = store
        self.config = config or PipelineConfig()
        self.listeners = list(listeners)
        self.thumbnails = thumbnails or thumbnail_for_category(self.config)
        self.rate_limiter = rate_limiter
        self.search_provider = search_provider
        self.search_agent = search_agent
        self.sleep = sleep

    async def run(
        self,
        candidates: Optional[Sequence[SearchResult]] = None,
        *,
        category: Optional[str] = None,
        query: Optional[str] = None,
        admin_id: Optional[str] = None,
        max_retries: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> GenerationResult:
        state = _RunState(progress=ProgressEmitter(self.listeners))
        try:
            return await self._run(
                state,
                candidates,
                category=category,
                query=query,
                admin_id=admin_id,
                max_retries=max_retries,
                now=now,
            )
        except GenerationFailure as exc:
            error = exc.error
            logger.error("Article generation failed [%s]: %s", error.code.value, error.message)
        except Exception as exc:  # noqa: BLE001 - the run contract is a result, never an exception
            logger.exception("Unexpected error in article pipeline")
            error = GenerationError(
                code=GenerationErrorCode.CONTENT_GENERATION_FAILED,
                message=str(exc) or "Unknown error occurred",
            )
        state.progress.emit("error", error.message, error=error.message)
        return GenerationResult.fail(error, topic=state.topic)

    # ---------------- Stages -----------------
    def _check_rate_limit(self, admin_id: Optional[str], now: Optional[datetime]) -> None:
        if self.rate_limiter is None or not admin_id:
            return
        status = self.rate_limiter.check(admin_id, now=now)
        if not status.allowed:
            raise GenerationFailure.of(
                GenerationErrorCode.RATE_LIMIT_EXCEEDED,
                f"Daily generation limit reached ({status.generated_today} articles today)",
                suggestions=[f"Try again after {status.reset_at.isoformat()}"],
                reset_at=status.reset_at,
            )
        self.rate_limiter.record(admin_id, now=now)
        logger.info("Rate limit ok for %s: %d remaining today", admin_id, status.remaining - 1)

    def _load_existing(self) -> List[ExistingArticleFingerprint]:
        limit = self.config.duplicate_check_limit
        try:
            rows = list(self.store.get_existing_articles(limit))
        except Exception:  # noqa: BLE001 - missing history only weakens dedup
            logger.exception("Failed to load existing articles; continuing without duplicate history")
            return []
        if len(rows) > limit:
            logger.warning("Store returned %d articles; keeping the %d most recent", len(rows), limit)
            rows = rows[:limit]
        logger.info("Loaded %d existing articles for duplicate check", len(rows))
        return rows

    async def _search(
        self,
        *,
        category: Optional[str],
        query: Optional[str],
        existing_titles: Sequence[str],
        now: Optional[datetime],
    ) -> List[SearchResult]:
        if self.search_provider is None:
            raise GenerationFailure.of(
                GenerationErrorCode.EXA_SEARCH_FAILED,
                "No search provider configured and no candidates supplied",
                suggestions=SEARCH_SUGGESTIONS,
            )

        if self.search_agent is not None:
            plan = await self.search_agent.plan_queries(
                category=category, user_query=query, existing_titles=existing_titles, now=now
            )
            queries = plan.queries
            logger.info("Search plan: %s (%s)", queries, plan.reasoning)
        elif query:
            queries = [query]
        else:
            queries = default_queries(category, now=now, config=self.config)[:3]

        results: List[SearchResult] = []
        seen_urls: set[str] = set()
        for q in queries:
            try:
                batch = await self.search_provider.search(q, num_results=SEARCH_RESULTS_PER_QUERY)
            except Exception as exc:  # noqa: BLE001 - any provider failure is a search failure
                logger.error("Search failed for query '%s': %s", q, exc)
                raise GenerationFailure.of(
                    GenerationErrorCode.EXA_SEARCH_FAILED,
                    f"Search failed: {exc}",
                    suggestions=SEARCH_SUGGESTIONS,
                ) from exc
            for item in batch:
                if item.url and item.url not in seen_urls:
                    seen_urls.add(item.url)
                    results.append(item)
        logger.info("Search returned %d unique results for %d queries", len(results), len(queries))

        if self.search_agent is not None and results:
            results = await self.search_agent.filter_results(
                results, category=category, existing_titles=existing_titles
            )
        return results

    def _save(self, data: GeneratedArticleData, thumbnail_url: Optional[str]) -> SavedArticle:
        try:
            return self.store.create_article(data, thumbnail_url=thumbnail_url, is_published=True)
        except Exception as exc:  # noqa: BLE001 - storage errors are reported, not retried
            logger.error("Failed to save article '%s': %s", data.title, exc)
            raise GenerationFailure.of(
                GenerationErrorCode.SAVE_FAILED,
                f"Failed to save article: {exc}",
                suggestions=["Check the article store", "Try again later"],
            ) from exc

    async def _run(
        self,
        state: _RunState,
        candidates: Optional[Sequence[SearchResult]],
        *,
        category: Optional[str],
        query: Optional[str],
        admin_id: Optional[str],
        max_retries: Optional[int],
        now: Optional[datetime],
    ) -> GenerationResult:
        progress = state.progress
        self._check_rate_limit(admin_id, now)

        progress.emit("searching", "Fetching existing articles...", 5)
        state.existing = self._load_existing()
        existing_titles = [a.title for a in state.existing]

        if candidates is None:
            progress.emit("searching", "Searching for topics...", 7)
            candidates = await self._search(
                category=category, query=query, existing_titles=existing_titles, now=now
            )

        progress.emit("searching", "Processing search results...", 10)
        valid = validate_search_results(batch_normalize(candidates), min_text_length=self.config.min_text_length)
        logger.info("%d of %d candidates passed validation", len(valid), len(candidates))
        if not valid:
            raise GenerationFailure.of(
                GenerationErrorCode.NO_TOPICS_FOUND,
                "No valid topics found in search results",
                suggestions=NO_VALID_TOPICS_SUGGESTIONS,
            )

        progress.emit("selecting", "Selecting best unique topic...", 30)
        topic = select_best_topic(valid, state.existing, config=self.config, now=now)
        if topic is None:
            raise GenerationFailure.of(
                GenerationErrorCode.NO_TOPICS_FOUND,
                "All topics were duplicates of existing articles",
                suggestions=ALL_DUPLICATES_SUGGESTIONS,
            )
        state.topic = topic

        progress.emit("generating", "Generating article content...", 50)
        generator = ContentGenerator(self.client, config=self.config, progress=progress, sleep=self.sleep)
        data = await generator.generate(
            topic, category=category, existing_titles=existing_titles, max_retries=max_retries
        )

        progress.emit("creating-thumbnail", "Assigning thumbnail...", 80)
        thumbnail_url = self.thumbnails(data.category)
        if thumbnail_url is None:
            logger.warning("No thumbnail configured for category '%s'", data.category)

        progress.emit("saving", "Saving to database...", 90)
        saved = self._save(data, thumbnail_url)

        progress.emit("complete", "Article generated successfully!", 100)
        logger.info("Saved article %s ('%s') in %s", saved.id, saved.title, saved.category)
        return GenerationResult.ok(saved, topic=topic)
