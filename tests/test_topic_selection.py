from __future__ import annotations

import pytest

from article_agent.analysis.topic_selection import rank_topics, select_best_topic, validate_search_results
from article_agent.processors.dedup import build_fingerprint
from conftest import LONG_TEXT, make_result


def test_empty_candidates_select_nothing(config, now):
    assert select_best_topic([], [], config=config, now=now) is None


def test_single_candidate_is_selected_with_scores(config, now):
    result = make_result(score=0.8, published_date=now.isoformat())
    topic = select_best_topic([result], [], config=config, now=now)
    assert topic is not None
    assert topic.url == result.url
    assert topic.relevance_score == pytest.approx(0.8)
    assert topic.recency_score == 1.0
    assert topic.combined_score == pytest.approx(0.8 * 0.6 + 1.0 * 0.4)
    assert topic.suggested_category == "marketing"


def test_recent_topic_beats_more_relevant_stale_one(config, now):
    fresh = make_result(title="Live Shopping Formats That Convert", url="https://a.example.com/fresh",
                        score=0.7, published_date=now.isoformat())
    stale = make_result(title="Holiday Gift Guide Merchandising", url="https://a.example.com/stale",
                        score=0.9, published_date="2024-01-10T00:00:00Z")
    ranked = rank_topics([stale, fresh], [], config=config, now=now)
    assert [t.url for t in ranked] == ["https://a.example.com/fresh", "https://a.example.com/stale"]
    assert ranked[0].combined_score == pytest.approx(0.82)
    assert ranked[1].combined_score == pytest.approx(0.58)
    assert select_best_topic([stale, fresh], [], config=config, now=now).url == "https://a.example.com/fresh"


def test_all_duplicates_select_nothing(config, now):
    existing = [build_fingerprint("E-commerce Marketing Strategies", config=config)]
    candidates = [make_result(title="E-commerce Marketing Strategies 2025")]
    assert select_best_topic(candidates, existing, config=config, now=now) is None


def test_duplicates_are_skipped_before_ranking(config, now):
    existing = [build_fingerprint("E-commerce Marketing Strategies", config=config)]
    dup = make_result(title="E-commerce Marketing Strategies 2025", url="https://a.example.com/dup", score=1.0)
    other = make_result(title="Warehouse Slotting for Fast Movers", url="https://a.example.com/ok", score=0.3)
    topic = select_best_topic([dup, other], existing, config=config, now=now)
    assert topic.url == "https://a.example.com/ok"


def test_equal_scores_keep_input_order(config, now):
    a = make_result(title="Alpha Payments Update", url="https://a.example.com/a")
    b = make_result(title="Beta Checkout Study", url="https://a.example.com/b")
    ranked = rank_topics([a, b], [], config=config, now=now)
    assert [t.url for t in ranked] == ["https://a.example.com/a", "https://a.example.com/b"]


def test_validity_filter_requires_fields_and_length():
    results = [
        make_result(),
        make_result(title=""),
        make_result(url=""),
        make_result(text="too short"),
        make_result(text="x" * 100),
        make_result(text="x" * 101),
    ]
    valid = validate_search_results(results, min_text_length=100)
    assert len(valid) == 2
    assert valid[0].text == LONG_TEXT
    assert valid[1].text == "x" * 101
