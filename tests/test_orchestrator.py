from __future__ import annotations

import json
import logging

import pytest

from article_agent.models import GenerationErrorCode, GenerationFailure
from article_agent.orchestrator import ContentGenerator, GenerationState, retry_article_generation
from article_agent.output.progress import ProgressEmitter, ProgressRecorder
from conftest import FakeAIClient, article_body, article_json, make_topic


def _generator(client, config, recording_sleep, recorder=None):
    progress = ProgressEmitter([recorder] if recorder else [])
    return ContentGenerator(client, config=config, progress=progress, sleep=recording_sleep)


@pytest.mark.asyncio
async def test_fails_twice_then_succeeds(config, recording_sleep):
    client = FakeAIClient([RuntimeError("upstream 503"), "not json at all {", article_json()])
    recorder = ProgressRecorder()
    gen = _generator(client, config, recording_sleep, recorder)

    article = await gen.generate(make_topic(), max_retries=2)

    assert article.title == "Social Commerce Playbook for Small Stores"
    assert len(client.calls) == 3
    assert recording_sleep.delays == [2.0, 4.0]
    assert recorder.count("retrying") == 2
    assert [e.progress for e in recorder.events] == [60, 70]
    assert gen.state is GenerationState.SUCCESS
    assert gen.attempts == 3


@pytest.mark.asyncio
async def test_never_exceeds_retry_bound(config, recording_sleep):
    client = FakeAIClient([RuntimeError(f"boom {i}") for i in range(10)])
    gen = _generator(client, config, recording_sleep)

    with pytest.raises(GenerationFailure) as info:
        await gen.generate(make_topic(), max_retries=2)

    assert len(client.calls) == 3
    error = info.value.error
    assert error.code is GenerationErrorCode.CONTENT_GENERATION_FAILED
    assert error.message == "Failed after 3 attempts: boom 2"
    assert error.suggestions
    assert gen.state is GenerationState.FAILED
    assert gen.last_error == "boom 2"


@pytest.mark.asyncio
async def test_zero_retries_means_single_call(config, recording_sleep):
    client = FakeAIClient(["", article_json()])
    gen = _generator(client, config, recording_sleep)
    with pytest.raises(GenerationFailure, match="AI returned empty response"):
        await gen.generate(make_topic(), max_retries=0)
    assert len(client.calls) == 1
    assert recording_sleep.delays == []


@pytest.mark.asyncio
async def test_backoff_caps_at_ten_seconds(config, recording_sleep):
    client = FakeAIClient([RuntimeError("x")] * 4 + [article_json()])
    gen = _generator(client, config, recording_sleep)
    await gen.generate(make_topic(), max_retries=4)
    assert recording_sleep.delays == [2.0, 4.0, 8.0, 10.0]


@pytest.mark.asyncio
async def test_retry_progress_stays_below_thumbnail_stage(config, recording_sleep):
    client = FakeAIClient([RuntimeError("x")] * 5 + [article_json()])
    recorder = ProgressRecorder()
    gen = _generator(client, config, recording_sleep, recorder)
    await gen.generate(make_topic(), max_retries=5)
    assert [e.progress for e in recorder.events] == [60, 70, 79, 79, 79]


@pytest.mark.asyncio
async def test_fenced_json_with_trailing_comma_is_recovered(config, recording_sleep):
    payload = json.loads(article_json())
    body = json.dumps(payload)[:-1] + ",}"
    raw = f"Here you go:\n```json\n{body}\n```"
    gen = _generator(FakeAIClient([raw]), config, recording_sleep)

    article = await gen.generate(make_topic())

    assert article.title == "Social Commerce Playbook for Small Stores"
    assert article.tags == ["social commerce", "tiktok shop", "growth", "retail", "extra"]
    assert article.category == "marketing"
    assert article.meta_title == "Social Commerce Playbook"
    assert article.sources[0].domain == "news.example.com"
    assert article.word_count >= 1500


@pytest.mark.asyncio
async def test_output_is_cleaned_and_meta_truncated(config, recording_sleep):
    raw = article_json(
        title='"Quoted   Title For Cleaning"',
        content="Section 1: Opening (150 words)\n\n\n\n[Section 2] Body text [300 words] here.",
        metaDescription="d" * 300,
    )
    article = await _generator(FakeAIClient([raw]), config, recording_sleep).generate(make_topic())
    assert article.title == "Quoted Title For Cleaning"
    assert article.content == "Opening \n\n Body text  here."
    assert len(article.meta_description) == 160


@pytest.mark.asyncio
async def test_short_article_only_warns(config, recording_sleep, caplog):
    raw = article_json(content="Too short to meet the target length.")
    with caplog.at_level(logging.WARNING, logger="ag.orchestrator"):
        article = await _generator(FakeAIClient([raw]), config, recording_sleep).generate(make_topic())
    assert article.content == "Too short to meet the target length."
    assert "Article too short" in caplog.text


@pytest.mark.asyncio
async def test_missing_content_field_is_retried(config, recording_sleep):
    client = FakeAIClient([json.dumps({"title": "Only a title"}), article_json()])
    article = await _generator(client, config, recording_sleep).generate(make_topic(), max_retries=1)
    assert len(client.calls) == 2
    assert article.content.startswith("## Introduction")


@pytest.mark.asyncio
async def test_requested_category_overrides_and_unknown_is_ignored(config, recording_sleep):
    gen = _generator(FakeAIClient([article_json(), article_json()]), config, recording_sleep)
    assert (await gen.generate(make_topic(), category="logistics")).category == "logistics"
    assert (await gen.generate(make_topic(), category="gardening")).category == "marketing"


@pytest.mark.asyncio
async def test_markdown_reply_uses_fallback_fields(config, recording_sleep):
    raw = "# Seven Ways to Cut Return Rates\n\n" + article_body(700)
    topic = make_topic()
    article = await _generator(FakeAIClient([raw]), config, recording_sleep).generate(topic)
    assert article.title == "Seven Ways to Cut Return Rates"
    assert article.summary == topic.text[:200].strip()
    assert article.tags == []
    assert len(article.meta_description) <= 155


@pytest.mark.asyncio
async def test_prompt_carries_uniqueness_context(config, recording_sleep):
    client = FakeAIClient([article_json()])
    await _generator(client, config, recording_sleep).generate(
        make_topic(), existing_titles=["Old Article One", "Old Article Two"]
    )
    call = client.calls[0]
    system, user = call["messages"]
    assert system.role == "system"
    assert '"Old Article One"' in system.content
    assert "UNIQUENESS REQUIREMENT" in system.content
    assert "SOURCE URL: https://news.example.com/social-commerce" in user.content
    assert call["temperature"] == 0.7
    assert call["max_tokens"] == 6000


@pytest.mark.asyncio
async def test_retry_article_generation_helper(config, recording_sleep):
    client = FakeAIClient([RuntimeError("x"), article_json()])
    article = await retry_article_generation(
        client, make_topic(), config=config, sleep=recording_sleep, max_retries=1
    )
    assert article.title == "Social Commerce Playbook for Small Stores"
    assert recording_sleep.delays == [2.0]
