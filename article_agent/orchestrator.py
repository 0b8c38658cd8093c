from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from .models import (
    ArticleSource,
    GeneratedArticleData,
    GenerationErrorCode,
    GenerationFailure,
    ScoredTopic,
)
from .output.progress import ProgressEmitter
from .processors.ai.base import AIClient, ChatMessage
from .processors.ai.parsing import (
    FallbackExtracted,
    StructuredJson,
    Unrecoverable,
    parse_article_response,
)
from .processors.ai.retry import Sleep, with_retries
from .processors.content_cleaner import (
    clean_article_content,
    clean_summary,
    clean_tags,
    clean_title,
    truncate,
    word_count,
)
from .processors.prompts import build_system_prompt, build_uniqueness_instruction, build_user_prompt
from .utils.domain import extract_domain
from .utils.logging import get_logger
from .utils.pipeline_config import PipelineConfig

logger = get_logger("ag.orchestrator")

META_TITLE_LIMIT = 70
META_DESCRIPTION_LIMIT = 160

GENERATION_SUGGESTIONS = ["Check your generation API key", "Try again later"]


class GenerationState(str, Enum):
    IDLE = "idle"
    GENERATING = "generating"
    RETRYING = "retrying"
    SUCCESS = "success"
    FAILED = "failed"


class AttemptError(RuntimeError):
    """A single generation attempt produced nothing usable."""


class ContentGenerator:
    """Turn one selected topic into cleaned article data.

    Each attempt calls the generation service, recovers JSON from the reply
    and cleans the result. Failed attempts are retried with capped exponential
    backoff, reusing the same topic and uniqueness context. Instances hold
    per-run state; create one per topic.
    """

    def __init__(
        self,
        client: AIClient,
        *,
        config: Optional[PipelineConfig] = None,
        progress: Optional[ProgressEmitter] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.client = client
        self.config = config or PipelineConfig()
        self.progress = progress or ProgressEmitter()
        self.sleep = sleep
        self.state = GenerationState.IDLE
        self.attempts = 0
        self.last_error: Optional[str] = None

    # ---------------- Prompting -----------------
    def build_messages(self, topic: ScoredTopic, existing_titles: Sequence[str] = ()) -> List[ChatMessage]:
        cfg = self.config
        system = build_system_prompt(min_words=cfg.min_word_count, max_words=cfg.max_word_count)
        system += build_uniqueness_instruction(existing_titles, limit=cfg.uniqueness_title_limit)
        user = build_user_prompt(topic, min_words=cfg.min_word_count, max_words=cfg.max_word_count)
        return [ChatMessage(role="system", content=system), ChatMessage(role="user", content=user)]

    def resolve_category(self, topic: ScoredTopic, requested: Optional[str]) -> str:
        if requested and self.config.is_category(requested):
            return requested
        if requested:
            logger.warning("Unknown category '%s'; using suggested '%s'", requested, topic.suggested_category)
        return topic.suggested_category

    # ---------------- Result assembly -----------------
    def _check_length(self, content: str) -> None:
        words = word_count(content)
        logger.info("Generated article word count: %d", words)
        # Short output is only flagged, never rejected
        if words < self.config.min_word_count * 0.8:
            logger.warning("Article too short: %d words (minimum: %d)", words, self.config.min_word_count)

    def _sources(self, topic: ScoredTopic) -> List[ArticleSource]:
        return [ArticleSource(url=topic.url, title=topic.title, domain=extract_domain(topic.url))]

    def _from_structured(self, data: Dict[str, Any], topic: ScoredTopic, category: str) -> GeneratedArticleData:
        raw_title = data.get("title")
        raw_content = data.get("content")
        if not isinstance(raw_title, str) or not raw_title.strip() or not isinstance(raw_content, str) or not raw_content.strip():
            raise AttemptError("Generated article missing required fields")

        title = clean_title(clean_article_content(raw_title))
        content = clean_article_content(raw_content)
        self._check_length(content)

        summary_raw = data.get("summary") if isinstance(data.get("summary"), str) else ""
        summary = clean_summary(clean_article_content(summary_raw or raw_title))
        meta_title_raw = data.get("metaTitle") or data.get("meta_title") or raw_title
        meta_desc_raw = data.get("metaDescription") or data.get("meta_description") or summary_raw or ""
        tags = data.get("tags") if isinstance(data.get("tags"), list) else []

        return GeneratedArticleData(
            title=title,
            summary=summary,
            content=content,
            category=category,
            tags=clean_tags(tags),
            sources=self._sources(topic),
            meta_title=truncate(clean_title(clean_article_content(str(meta_title_raw))), META_TITLE_LIMIT),
            meta_description=truncate(
                clean_summary(clean_article_content(str(meta_desc_raw))), META_DESCRIPTION_LIMIT
            ),
        )

    def _from_fallback(self, extracted: FallbackExtracted, topic: ScoredTopic, category: str) -> GeneratedArticleData:
        title = clean_title(extracted.title)
        content = clean_article_content(extracted.content)
        self._check_length(content)
        return GeneratedArticleData(
            title=truncate(title, 100),
            summary=clean_summary(truncate(topic.text, 200)),
            content=content,
            category=category,
            tags=[],
            sources=self._sources(topic),
            meta_title=truncate(title, 60),
            meta_description=clean_summary(truncate(topic.text, 155)),
        )

    # ---------------- Generation -----------------
    async def generate_once(
        self,
        topic: ScoredTopic,
        *,
        category: Optional[str] = None,
        existing_titles: Sequence[str] = (),
    ) -> GeneratedArticleData:
        """Run one attempt; raises on any failure."""
        self.state = GenerationState.GENERATING
        self.attempts += 1
        if self.attempts > 1:
            logger.info("Retry attempt %d for article generation", self.attempts - 1)

        messages = self.build_messages(topic, existing_titles)
        response = await self.client.chat(
            messages, temperature=self.config.temperature, max_tokens=self.config.max_tokens
        )
        raw = (response.content or "").strip() if response else ""
        if not raw:
            raise AttemptError("AI returned empty response")
        logger.debug("AI response length: %d", len(raw))

        target_category = self.resolve_category(topic, category)
        outcome = parse_article_response(raw, default_title=topic.title)
        if isinstance(outcome, StructuredJson):
            logger.debug("Parsed article JSON via %s strategy", outcome.strategy)
            return self._from_structured(outcome.data, topic, target_category)
        if isinstance(outcome, FallbackExtracted):
            logger.warning("Article JSON unparseable; recovered fields by pattern extraction")
            return self._from_fallback(outcome, topic, target_category)
        assert isinstance(outcome, Unrecoverable)
        raise AttemptError(outcome.reason)

    def _on_retry(self, next_attempt: int, exc: BaseException, delay: float, total: int) -> None:
        self.state = GenerationState.RETRYING
        self.last_error = str(exc)
        self.progress.emit(
            "retrying",
            f"Retrying (attempt {next_attempt + 1}/{total}) in {delay:.0f}s...",
            min(50 + next_attempt * 10, 79),
            error=str(exc),
        )

    async def generate(
        self,
        topic: ScoredTopic,
        *,
        category: Optional[str] = None,
        existing_titles: Sequence[str] = (),
        max_retries: Optional[int] = None,
    ) -> GeneratedArticleData:
        """Generate with bounded retries.

        Raises ``GenerationFailure`` (CONTENT_GENERATION_FAILED) carrying the
        last underlying error once ``max_retries + 1`` attempts have failed.
        """
        retries = self.config.max_retries if max_retries is None else max(0, max_retries)
        total = retries + 1
        try:
            article = await with_retries(
                lambda attempt: self.generate_once(topic, category=category, existing_titles=existing_titles),
                retries=retries,
                base_ms=self.config.retry_base_ms,
                cap_ms=self.config.retry_cap_ms,
                sleep=self.sleep,
                on_retry=lambda n, exc, delay: self._on_retry(n, exc, delay, total),
            )
        except Exception as exc:  # noqa: BLE001 - surfaced as a single aggregated failure
            self.state = GenerationState.FAILED
            self.last_error = str(exc)
            logger.error("Article generation failed after %d attempts: %s", self.attempts, exc)
            raise GenerationFailure.of(
                GenerationErrorCode.CONTENT_GENERATION_FAILED,
                f"Failed after {total} attempts: {exc}",
                suggestions=GENERATION_SUGGESTIONS,
            ) from exc
        self.state = GenerationState.SUCCESS
        logger.info("Article generated successfully: '%s'", article.title)
        return article


async def retry_article_generation(
    client: AIClient,
    topic: ScoredTopic,
    *,
    category: Optional[str] = None,
    existing_titles: Sequence[str] = (),
    max_retries: Optional[int] = None,
    config: Optional[PipelineConfig] = None,
    sleep: Sleep = asyncio.sleep,
) -> GeneratedArticleData:
    """Regenerate content for an already-selected topic outside the full pipeline."""
    generator = ContentGenerator(client, config=config, sleep=sleep)
    return await generator.generate(
        topic, category=category, existing_titles=existing_titles, max_retries=max_retries
    )
