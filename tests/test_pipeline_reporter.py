from __future__ import annotations

from article_agent.models import GenerationError, GenerationErrorCode, GenerationResult, SavedArticle
from article_agent.output.pipeline_reporter import PipelineReport
from article_agent.output.progress import GenerationProgress
from conftest import make_topic


def test_success_report():
    article = SavedArticle(
        id="1", slug="live-shopping", title="Live Shopping", summary="s", category="trends",
        thumbnail_url=None, reading_time=9, created_at="2025-06-15T00:00:00+00:00",
    )
    events = [
        GenerationProgress(status="retrying", message="r", progress=60),
        GenerationProgress(status="complete", message="done", progress=100),
    ]
    report = PipelineReport(result=GenerationResult.ok(article, topic=make_topic()), events=events)
    text = report.to_markdown()
    assert "- Status: success" in text
    assert "- Slug: live-shopping" in text
    assert "- Retries: 1" in text
    assert "- Last progress: 100%" in text


def test_failure_report_lists_suggestions():
    error = GenerationError(
        code=GenerationErrorCode.NO_TOPICS_FOUND,
        message="All topics were duplicates of existing articles",
        suggestions=["Try a different search query"],
    )
    text = PipelineReport(result=GenerationResult.fail(error)).to_markdown()
    assert "- Error: NO_TOPICS_FOUND: All topics were duplicates of existing articles" in text
    assert "  - Try a different search query" in text
    assert "Topic:" not in text
