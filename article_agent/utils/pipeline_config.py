from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional

# Ranking weights. Each pair must sum to 1.0.
RELEVANCE_WEIGHT = 0.6
RECENCY_WEIGHT = 0.4
KEYWORD_SIMILARITY_WEIGHT = 0.5
NGRAM_SIMILARITY_WEIGHT = 0.5

SIMILARITY_THRESHOLD = 0.35
DUPLICATE_CHECK_LIMIT = 500

MIN_WORD_COUNT = 1500
MAX_WORD_COUNT = 2500
DAILY_RATE_LIMIT = 5

STOP_WORDS: FrozenSet[str] = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with",
        "by", "from", "as", "is", "was", "are", "were", "been", "be", "have", "has", "had",
        "do", "does", "did", "will", "would", "could", "should", "may", "might", "must",
        "shall", "can", "need", "dare", "ought", "used", "it", "its", "this", "that",
        "these", "those", "i", "you", "he", "she", "we", "they", "what", "which", "who",
        "whom", "whose", "where", "when", "why", "how", "all", "each", "every", "both",
        "few", "more", "most", "other", "some", "such", "no", "nor", "not", "only", "own",
        "same", "so", "than", "too", "very", "just", "your", "our", "their", "my", "his",
        "her", "about", "into", "through", "during", "before", "after", "above", "below",
        "between", "under", "again", "further", "then", "once", "here", "there", "any",
        # e-commerce filler, too common to tell topics apart
        "ecommerce", "e-commerce", "online", "store", "business", "seller", "sellers",
        "guide", "tips", "strategies", "best", "top", "new", "ultimate", "complete",
    }
)

# Declaration order matters: ties resolve to the earlier category.
CATEGORY_KEYWORDS: Dict[str, List[str]] = {
    "marketing": [
        "marketing", "advertising", "social media", "SEO", "content",
        "brand", "promotion", "campaign", "audience", "engagement",
    ],
    "seller-tools": [
        "tools", "software", "automation", "analytics", "dashboard",
        "platform", "integration", "app", "plugin", "extension",
    ],
    "logistics": [
        "shipping", "logistics", "fulfillment", "warehouse", "delivery",
        "supply chain", "inventory", "FBA", "dropshipping", "freight",
    ],
    "trends": [
        "trends", "future", "prediction", "growth", "market",
        "industry", "innovation", "emerging", "2025", "2026",
    ],
    "case-studies": [
        "case study", "success story", "example", "how", "achieved",
        "results", "strategy", "implementation", "real-world",
    ],
}
DEFAULT_CATEGORY = "trends"

EXCLUDED_DOMAINS: List[str] = [
    "pinterest.com",
    "facebook.com",
    "instagram.com",
    "twitter.com",
    "tiktok.com",
    "youtube.com",
    "reddit.com",
]


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    return float(raw) if raw else default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    return int(raw) if raw else default


@dataclass(slots=True)
class PipelineConfig:
    """Tunable constants for topic selection and article generation.

    Defaults mirror the module-level constants; environment variables override
    them at construction time and ``load_pipeline_config`` overlays YAML values.
    Instances are treated as read-only once built so they can be shared
    between concurrent pipeline runs.
    """

    relevance_weight: float = field(default_factory=lambda: _env_float("PIPELINE_RELEVANCE_WEIGHT", RELEVANCE_WEIGHT))
    recency_weight: float = field(default_factory=lambda: _env_float("PIPELINE_RECENCY_WEIGHT", RECENCY_WEIGHT))
    keyword_similarity_weight: float = KEYWORD_SIMILARITY_WEIGHT
    ngram_similarity_weight: float = NGRAM_SIMILARITY_WEIGHT
    similarity_threshold: float = field(
        default_factory=lambda: _env_float("PIPELINE_SIMILARITY_THRESHOLD", SIMILARITY_THRESHOLD)
    )
    duplicate_check_limit: int = field(
        default_factory=lambda: _env_int("PIPELINE_DUPLICATE_CHECK_LIMIT", DUPLICATE_CHECK_LIMIT)
    )
    max_keywords: int = 20
    min_text_length: int = 100
    min_word_count: int = field(default_factory=lambda: _env_int("PIPELINE_MIN_WORD_COUNT", MIN_WORD_COUNT))
    max_word_count: int = MAX_WORD_COUNT
    max_retries: int = field(default_factory=lambda: _env_int("PIPELINE_MAX_RETRIES", 2))
    retry_base_ms: int = 2000
    retry_cap_ms: int = 10000
    temperature: float = 0.7
    max_tokens: int = 6000
    uniqueness_title_limit: int = 10
    daily_rate_limit: int = DAILY_RATE_LIMIT
    stop_words: FrozenSet[str] = STOP_WORDS
    category_keywords: Dict[str, List[str]] = field(default_factory=lambda: {k: list(v) for k, v in CATEGORY_KEYWORDS.items()})
    default_category: str = DEFAULT_CATEGORY
    thumbnails: Dict[str, str] = field(default_factory=dict)
    search_queries: Dict[str, List[str]] = field(default_factory=dict)
    excluded_domains: List[str] = field(default_factory=lambda: list(EXCLUDED_DOMAINS))

    @property
    def categories(self) -> list[str]:
        return list(self.category_keywords)

    def is_category(self, value: Optional[str]) -> bool:
        return bool(value) and value in self.category_keywords
