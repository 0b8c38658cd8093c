from __future__ import annotations

from typing import Mapping, Optional, Sequence

from ..utils.logging import get_logger
from ..utils.pipeline_config import CATEGORY_KEYWORDS, DEFAULT_CATEGORY

logger = get_logger("ag.processors.classify")


def category_scores(
    title: str,
    text: str,
    *,
    category_keywords: Optional[Mapping[str, Sequence[str]]] = None,
) -> dict[str, int]:
    """Count keyword occurrences per category in ``title + text``.

    Matching is case-insensitive substring counting, so "market" also counts
    inside "marketing".
    """
    keywords_by_category = CATEGORY_KEYWORDS if category_keywords is None else category_keywords
    content = f"{title or ''} {text or ''}".lower()
    return {
        category: sum(content.count(kw.lower()) for kw in keywords if kw)
        for category, keywords in keywords_by_category.items()
    }


def classify_category(
    title: str,
    text: str,
    *,
    category_keywords: Optional[Mapping[str, Sequence[str]]] = None,
    default_category: str = DEFAULT_CATEGORY,
) -> str:
    """Pick the category whose keywords occur most often.

    Ties go to the category declared first; when nothing matches the default
    category is returned.
    """
    best_category = default_category
    best_score = 0
    for category, score in category_scores(title, text, category_keywords=category_keywords).items():
        if score > best_score:
            best_category, best_score = category, score
    logger.debug("Classified '%s' as %s (hits=%d)", (title or "")[:60], best_category, best_score)
    return best_category
