"""Typed models used across the application."""

from .search import (
    SearchResult,
    ExistingArticleFingerprint,
    ScoredTopic,
    DuplicationCheckResult,
    SkippedTopic,
    FilteredTopics,
)
from .article import ArticleSource, GeneratedArticleData, SavedArticle
from .errors import GenerationErrorCode, GenerationError, GenerationFailure, GenerationResult

__all__ = [
    "SearchResult",
    "ExistingArticleFingerprint",
    "ScoredTopic",
    "DuplicationCheckResult",
    "SkippedTopic",
    "FilteredTopics",
    "ArticleSource",
    "GeneratedArticleData",
    "SavedArticle",
    "GenerationErrorCode",
    "GenerationError",
    "GenerationFailure",
    "GenerationResult",
]
