from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from ..models import SearchResult
from ..processors.ai.base import AIClient, ChatMessage
from ..processors.ai.parsing import parse_json_object
from ..utils.logging import get_logger
from ..utils.pipeline_config import PipelineConfig

logger = get_logger("ag.analysis.search_agent")

MIN_FILTER_SCORE = 60
CONTEXT_TITLE_LIMIT = 100
DESCRIPTION_CHARS = 300

# {year} and {month} are filled from the run date.
DEFAULT_SEARCH_QUERIES: Dict[str, List[str]] = {
    "marketing": [
        "ecommerce marketing strategies {year}",
        "social media marketing online stores",
        "digital marketing ecommerce trends",
        "influencer marketing brands",
        "email marketing automation retail",
    ],
    "seller-tools": [
        "ecommerce seller tools {year}",
        "Amazon seller software",
        "ecommerce analytics tools",
        "inventory management software",
        "AI tools online sellers",
    ],
    "logistics": [
        "ecommerce shipping solutions {year}",
        "fulfillment strategies retail",
        "dropshipping logistics",
        "last mile delivery innovations",
        "supply chain ecommerce",
    ],
    "trends": [
        "ecommerce trends {month} {year}",
        "future online retail",
        "emerging ecommerce technologies",
        "AI ecommerce developments",
        "social commerce trends",
    ],
    "case-studies": [
        "ecommerce success stories {year}",
        "online business growth",
        "Amazon seller success",
        "Shopify store success",
        "D2C brand growth",
    ],
    "default": [
        "ecommerce news {year}",
        "online selling tips",
        "marketplace trends",
        "ecommerce business growth",
        "digital commerce innovations",
    ],
}


def default_queries(
    category: Optional[str] = None,
    *,
    now: Optional[datetime] = None,
    config: Optional[PipelineConfig] = None,
) -> List[str]:
    """Configured queries for ``category`` (or the generic set), dated to ``now``."""
    cfg = config or PipelineConfig()
    current = now or datetime.now(timezone.utc)
    key = category if category else "default"
    templates = cfg.search_queries.get(key) or DEFAULT_SEARCH_QUERIES.get(key) or DEFAULT_SEARCH_QUERIES["default"]
    return [t.format(year=current.year, month=current.strftime("%B")) for t in templates]


@dataclass(frozen=True, slots=True)
class SearchPlan:
    queries: List[str] = field(default_factory=list)
    reasoning: str = ""


def _numbered(titles: Sequence[str]) -> str:
    return "\n".join(f'{i}. "{t}"' for i, t in enumerate(titles[:CONTEXT_TITLE_LIMIT], start=1))


class SearchAgent:
    """Model-assisted query planning and relevance filtering.

    Both steps degrade gracefully: a failed or unparseable model call falls
    back to default queries, or to the unfiltered results.
    """

    def __init__(self, client: AIClient, *, config: Optional[PipelineConfig] = None) -> None:
        self.client = client
        self.config = config or PipelineConfig()

    async def plan_queries(
        self,
        *,
        category: Optional[str] = None,
        user_query: Optional[str] = None,
        existing_titles: Sequence[str] = (),
        now: Optional[datetime] = None,
    ) -> SearchPlan:
        current = now or datetime.now(timezone.utc)
        avoid = ""
        if existing_titles:
            avoid = (
                f"\n\nCRITICAL - AVOID THESE EXISTING TOPICS:\n"
                f"We already have {len(existing_titles)} articles. Your queries MUST find DIFFERENT topics:\n\n"
                f"{_numbered(existing_titles)}\n\n"
                "Focus on fresh angles, new trends and different aspects of e-commerce."
            )
        system = (
            "You are an expert e-commerce content strategist. Generate search queries that will find "
            "the best, most relevant and unique topics for an e-commerce blog.\n\n"
            f"Current date: {current.strftime('%B %d, %Y')}\n\n"
            "Target audience: online sellers, e-commerce merchants, dropshippers, Amazon/Shopify sellers, "
            f"digital marketers.{avoid}\n\n"
            "Generate 3-4 specific search queries.\n\n"
            "RESPOND WITH JSON ONLY:\n"
            '{"queries": ["query1", "query2", "query3"], "reasoning": "why these queries cover new ground"}'
        )
        hint = f' User hint: "{user_query}"' if user_query else ""
        if category:
            user = f'Generate search queries for UNIQUE e-commerce blog articles in the "{category}" category.{hint}'
        else:
            user = f"Generate search queries for UNIQUE trending e-commerce blog topics.{hint}"

        try:
            response = await self.client.chat(
                [ChatMessage(role="system", content=system), ChatMessage(role="user", content=user)],
                temperature=0.7,
                max_tokens=500,
            )
            data, _ = parse_json_object(response.content or "")
            queries = [q.strip() for q in data.get("queries", []) if isinstance(q, str) and q.strip()]
            if not queries:
                raise ValueError("model returned no queries")
        except Exception as exc:  # noqa: BLE001 - planning falls back to configured queries
            logger.warning("Query planning failed, using defaults: %s", exc)
            return SearchPlan(
                queries=default_queries(category, now=current, config=self.config)[:3],
                reasoning="Using default queries (AI generation failed)",
            )
        logger.info("Planned %d search queries", len(queries))
        return SearchPlan(queries=queries, reasoning=str(data.get("reasoning") or ""))

    async def filter_results(
        self,
        results: Sequence[SearchResult],
        *,
        category: Optional[str] = None,
        existing_titles: Sequence[str] = (),
    ) -> List[SearchResult]:
        """Keep results the model scores as relevant (>= 60 out of 100)."""
        if not results:
            return []
        listing = [
            {
                "index": i,
                "title": r.title,
                "description": r.text[:DESCRIPTION_CHARS],
                "source": r.source_name or r.source,
                "url": r.url,
            }
            for i, r in enumerate(results)
        ]
        avoid = ""
        if existing_titles:
            avoid = f"\n\nExisting articles to avoid ({len(existing_titles)} total):\n{_numbered(existing_titles)}"
        system = (
            "You are an expert e-commerce content filter. Reject general news, politics, sports, "
            "entertainment, crime, travel and anything not about online business. Reject topics too "
            "similar to existing articles. Accept e-commerce strategies, selling tools and platforms, "
            "digital marketing for online stores, logistics, case studies and industry trends."
            f"{avoid}\n\n"
            "For each result provide isRelevant (true/false), relevanceScore (0-100) and a brief reason.\n\n"
            "RESPOND WITH JSON ONLY:\n"
            '{"results": [{"index": 0, "isRelevant": true, "relevanceScore": 85, "reason": "..."}], '
            '"summary": "Filtered X results: Y relevant, Z rejected"}'
        )
        scope = f" (category: {category})" if category else ""
        user = (
            f"Filter these {len(listing)} search results for e-commerce relevance{scope}:\n\n"
            f"{json.dumps(listing, indent=2)}"
        )

        try:
            response = await self.client.chat(
                [ChatMessage(role="system", content=system), ChatMessage(role="user", content=user)],
                temperature=0.2,
                max_tokens=2000,
            )
            data, _ = parse_json_object(response.content or "")
            verdicts = data.get("results")
            if not isinstance(verdicts, list):
                raise ValueError("filter response has no results list")
            kept: List[SearchResult] = []
            for verdict in verdicts:
                if not isinstance(verdict, dict):
                    continue
                index = verdict.get("index")
                score = verdict.get("relevanceScore", 0)
                if not isinstance(index, int) or not 0 <= index < len(results):
                    continue
                if verdict.get("isRelevant") and isinstance(score, (int, float)) and score >= MIN_FILTER_SCORE:
                    kept.append(results[index])
        except Exception as exc:  # noqa: BLE001 - unfiltered results are still usable
            logger.warning("Result filtering failed, keeping all %d results: %s", len(results), exc)
            return list(results)
        logger.info("Relevance filter kept %d/%d results", len(kept), len(results))
        return kept
