from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from .article import SavedArticle
    from .search import ScoredTopic


class GenerationErrorCode(str, Enum):
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    EXA_SEARCH_FAILED = "EXA_SEARCH_FAILED"
    NO_TOPICS_FOUND = "NO_TOPICS_FOUND"
    CONTENT_GENERATION_FAILED = "CONTENT_GENERATION_FAILED"
    SAVE_FAILED = "SAVE_FAILED"
    UNAUTHORIZED = "UNAUTHORIZED"


@dataclass(frozen=True, slots=True)
class GenerationError:
    code: GenerationErrorCode
    message: str
    suggestions: List[str] = field(default_factory=list)
    reset_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"code": self.code.value, "message": self.message}
        if self.suggestions:
            payload["suggestions"] = list(self.suggestions)
        if self.reset_at is not None:
            payload["resetAt"] = self.reset_at.isoformat()
        return payload


class GenerationFailure(Exception):
    """Raised inside the pipeline; the coordinator turns it into a result."""

    def __init__(self, error: GenerationError) -> None:
        super().__init__(error.message)
        self.error = error

    @classmethod
    def of(
        cls,
        code: GenerationErrorCode,
        message: str,
        *,
        suggestions: Optional[List[str]] = None,
        reset_at: Optional[datetime] = None,
    ) -> "GenerationFailure":
        return cls(GenerationError(code=code, message=message, suggestions=list(suggestions or []), reset_at=reset_at))


@dataclass(frozen=True, slots=True)
class GenerationResult:
    success: bool
    article: Optional["SavedArticle"] = None
    error: Optional[GenerationError] = None
    topic: Optional["ScoredTopic"] = None

    @classmethod
    def ok(cls, article: "SavedArticle", *, topic: Optional["ScoredTopic"] = None) -> "GenerationResult":
        return cls(success=True, article=article, topic=topic)

    @classmethod
    def fail(cls, error: GenerationError, *, topic: Optional["ScoredTopic"] = None) -> "GenerationResult":
        return cls(success=False, error=error, topic=topic)
