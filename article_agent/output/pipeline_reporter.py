from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from ..models import GenerationResult
from .progress import GenerationProgress


@dataclass(slots=True)
class PipelineReport:
    result: GenerationResult
    events: List[GenerationProgress] = field(default_factory=list)

    @property
    def retries(self) -> int:
        return sum(1 for e in self.events if e.status == "retrying")

    def to_markdown(self) -> str:
        lines = ["### Article Generation Summary", ""]
        res = self.result
        lines.append(f"- Status: {'success' if res.success else 'failed'}")
        if res.topic is not None:
            lines.append(f"- Topic: {res.topic.title} ({res.topic.url})")
            lines.append(
                f"- Scores: combined {res.topic.combined_score:.2f}, "
                f"relevance {res.topic.relevance_score:.2f}, recency {res.topic.recency_score:.2f}"
            )
        if res.article is not None:
            art = res.article
            lines.append(f"- Article: {art.title} [{art.category}]")
            lines.append(f"- Slug: {art.slug}")
            lines.append(f"- Reading time: {art.reading_time} min")
        if res.error is not None:
            lines.append(f"- Error: {res.error.code.value}: {res.error.message}")
            for suggestion in res.error.suggestions:
                lines.append(f"  - {suggestion}")
        lines.append(f"- Retries: {self.retries}")
        if self.events:
            lines.append(f"- Last progress: {self.events[-1].progress}%")
        return "\n".join(lines) + "\n"
