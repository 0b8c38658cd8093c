"""Application entrypoint for the e-commerce article agent.

This script orchestrates the high-level flow:
1) load configuration
2) gather candidate topics (file, offline samples or Exa search)
3) select a unique topic, generate the article and save it (or dry-run)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .analysis.search_agent import SearchAgent, default_queries
from .analysis.topic_selection import rank_topics, validate_search_results
from .fetchers import ExaSearchClient, fallback_results
from .models import GenerationError, GenerationErrorCode, GenerationResult, SearchResult
from .output.article_store import JsonArticleStore
from .output.pipeline_reporter import PipelineReport
from .output.progress import ProgressRecorder, log_progress
from .pipeline.article_pipeline import ArticlePipeline
from .pipeline.collaborators import DailyRateLimiter, SearchError
from .processors.ai import create_ai_client
from .processors.ai.factory import SUPPORTED_BACKENDS
from .processors.normalize import batch_normalize
from .utils.config_loader import ConfigError, load_pipeline_config
from .utils.logging import configure_logging, get_logger
from .utils.pipeline_config import PipelineConfig

DEFAULT_CONFIG_PATH = "config/pipeline.yaml"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="E-commerce article agent: pick a fresh topic, generate an article and store it"
    )
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG_PATH,
        help="Path to pipeline configuration file (YAML)",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--candidates",
        default=None,
        help="JSON file with a list of search results to choose from",
    )
    source.add_argument(
        "--offline",
        action="store_true",
        help="Use built-in sample candidates instead of searching",
    )
    parser.add_argument("--query", default=None, help="Search query hint")
    parser.add_argument("--category", default=None, help="Target article category")
    parser.add_argument(
        "--max-retries",
        type=int,
        default=None,
        help="Generation retries after the first attempt",
    )
    parser.add_argument(
        "--store",
        default=".cache/articles.json",
        help="Path of the JSON article store",
    )
    parser.add_argument(
        "--backend",
        default=None,
        choices=sorted(SUPPORTED_BACKENDS),
        help="Generation backend (defaults to GENERATION_BACKEND env)",
    )
    parser.add_argument(
        "--agentic",
        action="store_true",
        help="Let the model plan search queries and filter results",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Rank candidate topics and print the selection without generating",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity",
    )
    return parser.parse_args(argv)


def load_candidates(path: Path | str) -> List[SearchResult]:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    rows = data.get("results", []) if isinstance(data, dict) else data
    if not isinstance(rows, list):
        raise ValueError("candidates file must hold a list of results")
    return [SearchResult.from_dict(row) for row in rows if isinstance(row, dict)]


def _load_config(path: str) -> PipelineConfig:
    # A missing default file means built-in defaults; an explicit path must exist.
    if path == DEFAULT_CONFIG_PATH and not Path(path).exists():
        return load_pipeline_config(None)
    return load_pipeline_config(path)


def _unauthorized(message: str) -> GenerationResult:
    return GenerationResult.fail(
        GenerationError(
            code=GenerationErrorCode.UNAUTHORIZED,
            message=message,
            suggestions=["Set the required API key in the environment or .env file"],
        )
    )


def dry_run(args: argparse.Namespace, cfg: PipelineConfig, candidates: Optional[List[SearchResult]]) -> int:
    logger = get_logger("ag.agent")
    if candidates is None:
        queries = [args.query] if args.query else default_queries(args.category, config=cfg)[:3]
        client = ExaSearchClient(excluded_domains=cfg.excluded_domains)
        candidates = []
        for q in queries:
            candidates.extend(client.search_sync(q))
    store = JsonArticleStore(store_path=args.store, config=cfg)
    existing = store.get_existing_articles(cfg.duplicate_check_limit)
    valid = validate_search_results(batch_normalize(candidates), min_text_length=cfg.min_text_length)
    ranked = rank_topics(valid, existing, config=cfg)
    logger.info("Dry run: %d candidates, %d valid, %d unique", len(candidates), len(valid), len(ranked))
    if not ranked:
        print("No unique topics found.")
        return 1
    for pos, topic in enumerate(ranked, start=1):
        print(
            f"{pos}. [{topic.combined_score:.2f}] {topic.title} "
            f"({topic.suggested_category}) {topic.url}"
        )
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv(override=False)
    args = parse_args(argv)
    configure_logging(level=args.log_level)
    logger = get_logger("ag.agent")

    try:
        cfg = _load_config(args.config)
    except ConfigError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 1

    candidates: Optional[List[SearchResult]] = None
    if args.candidates:
        try:
            candidates = load_candidates(args.candidates)
        except (OSError, ValueError) as exc:
            logger.error("Failed to read candidates from %s: %s", args.candidates, exc)
            return 1
        logger.info("Loaded %d candidate(s) from %s", len(candidates), args.candidates)
    elif args.offline:
        candidates = fallback_results()

    if args.dry_run:
        try:
            return dry_run(args, cfg, candidates)
        except (RuntimeError, SearchError) as exc:
            logger.error("Dry run failed: %s", exc)
            return 1

    recorder = ProgressRecorder()
    try:
        client = create_ai_client(backend=args.backend)
        search_provider = (
            ExaSearchClient(excluded_domains=cfg.excluded_domains) if candidates is None else None
        )
    except ValueError as exc:
        logger.error("%s", exc)
        return 1
    except RuntimeError as exc:
        result = _unauthorized(str(exc))
    else:
        pipeline = ArticlePipeline(
            client,
            JsonArticleStore(store_path=args.store, config=cfg),
            config=cfg,
            listeners=[log_progress, recorder],
            rate_limiter=DailyRateLimiter(limit=cfg.daily_rate_limit),
            search_provider=search_provider,
            search_agent=SearchAgent(client, config=cfg) if args.agentic else None,
        )
        result = asyncio.run(
            pipeline.run(
                candidates,
                category=args.category,
                query=args.query,
                admin_id=os.getenv("ARTICLE_AGENT_ADMIN_ID", "cli"),
                max_retries=args.max_retries,
            )
        )

    print(PipelineReport(result=result, events=recorder.events).to_markdown())
    return 0 if result.success else 1


if __name__ == "__main__":  # pragma: no cover - script entrypoint
    raise SystemExit(main())
