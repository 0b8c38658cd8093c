from __future__ import annotations

import json
import math
import re
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..models import ExistingArticleFingerprint, GeneratedArticleData, SavedArticle
from ..pipeline.collaborators import ArticleStore
from ..processors.dedup import bounded_fingerprints
from ..utils.logging import get_logger
from ..utils.pipeline_config import PipelineConfig

logger = get_logger("ag.output.article_store")

WORDS_PER_MINUTE = 200

_tag_re = re.compile(r"<[^>]*>")
_non_slug_re = re.compile(r"[^\w\s-]")
_separator_re = re.compile(r"[\s_-]+")


def generate_slug(title: str) -> str:
    """Lowercase, URL-safe slug: "E-commerce Tips & Tricks!" -> "e-commerce-tips-tricks"."""
    slug = _non_slug_re.sub(" ", (title or "").lower().strip())
    return _separator_re.sub("-", slug).strip("-")


def unique_slug(title: str, taken: set[str]) -> str:
    base = generate_slug(title) or "article"
    if base not in taken:
        return base
    counter = 2
    while f"{base}-{counter}" in taken:
        counter += 1
    return f"{base}-{counter}"


def reading_time(content: str, *, words_per_minute: int = WORDS_PER_MINUTE) -> int:
    """Minutes to read ``content`` (HTML tags ignored), never less than one."""
    words = len(_tag_re.sub(" ", content or "").split())
    return max(1, math.ceil(words / words_per_minute))


class JsonArticleStore(ArticleStore):
    """File-backed article store for local runs.

    Rows are kept newest first in a single JSON document. A missing file is
    an empty store; a corrupt one is reported and replaced on the next save.
    """

    def __init__(
        self,
        *,
        store_path: Path | str = ".cache/articles.json",
        config: Optional[PipelineConfig] = None,
    ) -> None:
        self.store_path = Path(store_path)
        self.store_path.parent.mkdir(parents=True, exist_ok=True)
        self.config = config or PipelineConfig()
        self._rows: List[Dict[str, Any]] = []
        self._load()

    def _load(self) -> None:
        if not self.store_path.exists():
            return
        try:
            data = json.loads(self.store_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Article store %s unreadable, starting empty: %s", self.store_path, exc)
            return
        if isinstance(data, list):
            self._rows = [row for row in data if isinstance(row, dict) and row.get("title")]

    def _persist(self, rows: List[Dict[str, Any]]) -> None:
        self.store_path.write_text(json.dumps(rows, indent=2, ensure_ascii=False), encoding="utf-8")

    def __len__(self) -> int:
        return len(self._rows)

    def articles(self) -> List[Dict[str, Any]]:
        return [dict(row) for row in self._rows]

    def get_existing_articles(self, limit: int) -> List[ExistingArticleFingerprint]:
        rows = (
            (row["title"], [s.get("url", "") for s in row.get("sources") or [] if isinstance(s, dict)])
            for row in self._rows
            if row.get("is_published", True)
        )
        return bounded_fingerprints(rows, config=self.config)[:limit]

    def create_article(
        self,
        data: GeneratedArticleData,
        *,
        thumbnail_url: Optional[str],
        is_published: bool = True,
    ) -> SavedArticle:
        slug = unique_slug(data.title, {row.get("slug", "") for row in self._rows})
        saved = SavedArticle(
            id=uuid.uuid4().hex,
            slug=slug,
            title=data.title,
            summary=data.summary,
            category=data.category,
            thumbnail_url=thumbnail_url,
            reading_time=reading_time(data.content),
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        row = {**data.to_dict(), **saved.to_dict(), "is_published": is_published}
        # Rows only change once the file write went through
        self._persist([row, *self._rows])
        self._rows.insert(0, row)
        logger.info("Stored article %s as '%s' (%d total)", saved.id, slug, len(self._rows))
        return saved
