from __future__ import annotations

import asyncio
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence

import requests

from ..models import SearchResult
from ..pipeline.collaborators import SearchError, SearchProvider
from ..utils.logging import get_logger
from ..utils.pipeline_config import EXCLUDED_DOMAINS

logger = get_logger("ag.fetchers.exa")

EXA_SEARCH_URL = "https://api.exa.ai/search"
QUERY_SUFFIX = "e-commerce online retail business"


class ExaSearchClient(SearchProvider):
    """Neural web search via Exa's REST API.

    Results are limited to pages published in the last ``lookback_days`` and
    exclude social networks. Transport and HTTP errors raise ``SearchError``.
    """

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        excluded_domains: Optional[Sequence[str]] = None,
        lookback_days: int = 30,
        max_characters: int = 3000,
        timeout: int = 30,
    ) -> None:
        self.api_key = api_key or os.getenv("EXA_API_KEY")
        if not self.api_key:
            raise RuntimeError("EXA_API_KEY is required for Exa search")
        self.excluded_domains = list(excluded_domains if excluded_domains is not None else EXCLUDED_DOMAINS)
        self.lookback_days = lookback_days
        self.max_characters = max_characters
        self.timeout = timeout

    def _payload(self, query: str, num_results: int, now: datetime) -> Dict[str, Any]:
        start = (now - timedelta(days=self.lookback_days)).date().isoformat()
        return {
            "query": f"{query} {QUERY_SUFFIX}",
            "numResults": num_results,
            "type": "neural",
            "useAutoprompt": True,
            "startPublishedDate": start,
            "excludeDomains": self.excluded_domains,
            "contents": {"text": {"maxCharacters": self.max_characters}},
        }

    def search_sync(self, query: str, *, num_results: int = 5, now: Optional[datetime] = None) -> List[SearchResult]:
        payload = self._payload(query, num_results, now or datetime.now(timezone.utc))
        logger.debug("Exa search: %s", payload["query"])
        try:
            resp = requests.post(
                EXA_SEARCH_URL,
                json=payload,
                headers={"Content-Type": "application/json", "x-api-key": self.api_key},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as exc:
            raise SearchError(f"Exa search failed for '{query}': {exc}") from exc
        except ValueError as exc:
            raise SearchError(f"Exa returned invalid JSON for '{query}'") from exc

        rows = data.get("results") or []
        results: List[SearchResult] = []
        for row in rows:
            text = row.get("text") or " ".join(row.get("highlights") or [])
            if not (row.get("title") and row.get("url") and text):
                continue
            results.append(
                SearchResult(
                    title=row["title"],
                    url=row["url"],
                    text=text,
                    published_date=row.get("publishedDate"),
                    score=row.get("score"),
                    source="exa",
                    source_name=row.get("author"),
                )
            )
        logger.info("Exa returned %d usable results for '%s'", len(results), query)
        return results

    async def search(self, query: str, *, num_results: int = 5) -> List[SearchResult]:
        return await asyncio.to_thread(self.search_sync, query, num_results=num_results)


def fallback_results(now: Optional[datetime] = None) -> List[SearchResult]:
    """Canned candidates for offline runs and demos."""
    current = now or datetime.now(timezone.utc)
    return [
        SearchResult(
            title=f"E-commerce Trends {current.year}: AI-Powered Personalization Takes Center Stage",
            url="https://example.com/ecommerce-trends",
            published_date=current.isoformat(),
            score=0.95,
            source="fallback",
            text=(
                "The e-commerce landscape is rapidly evolving with AI-powered personalization becoming the "
                "cornerstone of successful online retail strategies. Merchants are leveraging machine learning "
                "algorithms to create hyper-personalized shopping experiences that significantly boost conversion "
                "rates. From dynamic pricing to personalized product recommendations, AI is transforming how "
                "sellers connect with customers. Studies show that personalized experiences can increase sales "
                "by up to 20% and improve customer satisfaction scores dramatically."
            ),
        ),
        SearchResult(
            title="Social Commerce Revolution: Selling on TikTok, Instagram, and Beyond",
            url="https://example.com/social-commerce",
            published_date=(current - timedelta(days=2)).isoformat(),
            score=0.88,
            source="fallback",
            text=(
                "Social commerce is reshaping how consumers discover and purchase products. Platforms like "
                "TikTok Shop, Instagram Shopping, and Pinterest are becoming primary sales channels for many "
                "brands. The integration of entertainment and shopping creates unique opportunities for sellers "
                "who can create engaging content. Live shopping events and influencer partnerships are driving "
                "significant sales growth."
            ),
        ),
        SearchResult(
            title="Dropshipping Success Strategies: Building a Profitable Online Store",
            url="https://example.com/dropshipping-strategies",
            published_date=(current - timedelta(days=3)).isoformat(),
            score=0.82,
            source="fallback",
            text=(
                "Dropshipping continues to be a viable business model for entrepreneurs looking to enter "
                "e-commerce with minimal upfront investment. However, success requires strategic planning and "
                "execution. Top performers focus on niche selection, supplier relationships, and brand building. "
                "The key differentiators include fast shipping times and excellent customer service."
            ),
        ),
    ]
