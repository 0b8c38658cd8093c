from __future__ import annotations

import pytest

from article_agent.analysis.search_agent import SearchAgent, default_queries
from conftest import FakeAIClient, make_result


def test_default_queries_fill_date_placeholders(config, now):
    queries = default_queries("trends", now=now, config=config)
    assert queries[0] == "ecommerce trends June 2025"
    assert default_queries(None, now=now, config=config)[0] == "ecommerce news 2025"
    assert default_queries("unknown", now=now, config=config)[0] == "ecommerce news 2025"


def test_configured_queries_take_precedence(config, now):
    config.search_queries = {"logistics": ["freight {year}"]}
    assert default_queries("logistics", now=now, config=config) == ["freight 2025"]


@pytest.mark.asyncio
async def test_plan_queries_parses_model_reply(config, now):
    client = FakeAIClient(['```json\n{"queries": ["a", " ", "b"], "reasoning": "why"}\n```'])
    plan = await SearchAgent(client, config=config).plan_queries(
        category="marketing", user_query="tiktok", existing_titles=["Old One"], now=now
    )
    assert plan.queries == ["a", "b"]
    assert plan.reasoning == "why"
    call = client.calls[0]
    assert call["temperature"] == 0.7
    assert call["max_tokens"] == 500
    assert '"marketing"' in call["messages"][1].content
    assert 'User hint: "tiktok"' in call["messages"][1].content
    assert '1. "Old One"' in call["messages"][0].content


@pytest.mark.asyncio
@pytest.mark.parametrize("reply", [RuntimeError("down"), "no json here", '{"queries": []}'])
async def test_plan_queries_falls_back_to_defaults(config, now, reply):
    plan = await SearchAgent(FakeAIClient([reply]), config=config).plan_queries(category="logistics", now=now)
    assert plan.queries == ["ecommerce shipping solutions 2025", "fulfillment strategies retail", "dropshipping logistics"]
    assert "default" in plan.reasoning.lower()


@pytest.mark.asyncio
async def test_filter_keeps_relevant_results_at_or_above_sixty(config):
    results = [make_result(url=f"https://a.example.com/{i}") for i in range(4)]
    reply = (
        '{"results": ['
        '{"index": 0, "isRelevant": true, "relevanceScore": 60},'
        '{"index": 1, "isRelevant": true, "relevanceScore": 59},'
        '{"index": 2, "isRelevant": false, "relevanceScore": 95},'
        '{"index": 3, "isRelevant": true, "relevanceScore": 88},'
        '{"index": 9, "isRelevant": true, "relevanceScore": 99}'
        '], "summary": "2 kept"}'
    )
    client = FakeAIClient([reply])
    kept = await SearchAgent(client, config=config).filter_results(results, category="trends")
    assert [r.url for r in kept] == ["https://a.example.com/0", "https://a.example.com/3"]
    assert client.calls[0]["temperature"] == 0.2


@pytest.mark.asyncio
@pytest.mark.parametrize("reply", [RuntimeError("down"), "garbage", '{"summary": "no list"}'])
async def test_filter_failure_returns_everything(config, reply):
    results = [make_result(url="https://a.example.com/1"), make_result(url="https://a.example.com/2")]
    kept = await SearchAgent(FakeAIClient([reply]), config=config).filter_results(results)
    assert kept == results


@pytest.mark.asyncio
async def test_filter_empty_input_skips_model(config):
    client = FakeAIClient([])
    assert await SearchAgent(client, config=config).filter_results([]) == []
    assert client.calls == []
