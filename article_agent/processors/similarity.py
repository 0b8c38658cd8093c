"""Keyword extraction and set-similarity helpers used for topic deduplication."""

from __future__ import annotations

import re
from typing import AbstractSet, Iterable, List, Optional, Set

from ..models import ExistingArticleFingerprint
from ..utils.pipeline_config import (
    KEYWORD_SIMILARITY_WEIGHT,
    NGRAM_SIMILARITY_WEIGHT,
    STOP_WORDS,
)

_non_alnum_re = re.compile(r"[^a-z0-9\s]")


def _tokenize(text: str) -> List[str]:
    return _non_alnum_re.sub(" ", (text or "").lower()).split()


def extract_keywords(
    text: str,
    *,
    stop_words: Optional[AbstractSet[str]] = None,
    max_keywords: int = 20,
) -> List[str]:
    """Return up to ``max_keywords`` distinctive tokens of ``text`` in order of appearance.

    Tokens of two characters or fewer and stop words are dropped. Repeated
    tokens are kept; callers that need a set build one.
    """
    stops = STOP_WORDS if stop_words is None else stop_words
    keywords = [w for w in _tokenize(text) if len(w) > 2 and w not in stops]
    return keywords[:max_keywords]


def jaccard_similarity(a: Iterable[str], b: Iterable[str]) -> float:
    set_a = set(a)
    set_b = set(b)
    if not set_a or not set_b:
        return 0.0
    union = len(set_a | set_b)
    return len(set_a & set_b) / union if union else 0.0


def bigrams(text: str) -> Set[str]:
    words = [w for w in _tokenize(text) if len(w) > 1]
    return {f"{words[i]} {words[i + 1]}" for i in range(len(words) - 1)}


def bigram_similarity(text_a: str, text_b: str) -> float:
    """Jaccard similarity over consecutive-word bigrams of two texts."""
    return jaccard_similarity(bigrams(text_a), bigrams(text_b))


def combined_similarity(
    topic_title: str,
    article: ExistingArticleFingerprint,
    *,
    keyword_weight: float = KEYWORD_SIMILARITY_WEIGHT,
    ngram_weight: float = NGRAM_SIMILARITY_WEIGHT,
    stop_words: Optional[AbstractSet[str]] = None,
    max_keywords: int = 20,
) -> float:
    """Weighted blend of keyword overlap and title bigram overlap, in [0, 1]."""
    keywords = extract_keywords(topic_title, stop_words=stop_words, max_keywords=max_keywords)
    keyword_sim = jaccard_similarity(keywords, article.keywords)
    ngram_sim = bigram_similarity(topic_title, article.title)
    score = keyword_sim * keyword_weight + ngram_sim * ngram_weight
    return max(0.0, min(1.0, score))
