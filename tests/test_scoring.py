from __future__ import annotations

from datetime import timedelta

import pytest

from article_agent.analysis.scoring import combined_score, recency_score, relevance_score, score_topic
from conftest import make_result


@pytest.mark.parametrize(
    "age_days,expected",
    [(0, 1.0), (3, 0.9), (7, 0.9), (20, 0.7), (45, 0.5), (75, 0.3), (200, 0.1)],
)
def test_recency_steps(now, age_days, expected):
    assert recency_score(now - timedelta(days=age_days), now=now) == expected


def test_future_dates_count_as_fresh(now):
    assert recency_score(now + timedelta(days=2), now=now) == 1.0


@pytest.mark.parametrize("value", [None, "", "not a date", "31/31/2025"])
def test_unknown_dates_score_neutral(now, value):
    assert recency_score(value, now=now) == 0.5


def test_recency_is_monotonic_in_publication_date(now):
    ages = [0, 1, 6, 8, 29, 31, 59, 61, 89, 91, 400]
    scores = [recency_score(now - timedelta(days=a), now=now) for a in ages]
    # older items never score higher than newer ones
    assert scores == sorted(scores, reverse=True)


def test_recency_accepts_iso_strings_with_z_suffix(now):
    assert recency_score("2025-06-10T00:00:00Z", now=now) == 0.9


def test_relevance_defaults_and_clamps():
    assert relevance_score(None) == 0.5
    assert relevance_score(0) == 0.5
    assert relevance_score(0.73) == pytest.approx(0.73)
    assert relevance_score(4.2) == 1.0
    assert relevance_score(-1) == 0.0


def test_combined_score_weights():
    assert combined_score(0.7, 1.0) == pytest.approx(0.82)
    assert combined_score(0.9, 0.1) == pytest.approx(0.58)
    assert 0.0 <= combined_score(5.0, 5.0) <= 1.0


def test_score_topic_carries_result_fields(config, now):
    result = make_result(score=0.6, published_date=(now - timedelta(days=10)).isoformat())
    topic = score_topic(result, "marketing", config=config, now=now)
    assert topic.title == result.title
    assert topic.url == result.url
    assert topic.relevance_score == pytest.approx(0.6)
    assert topic.recency_score == 0.7
    assert topic.combined_score == pytest.approx(0.6 * 0.6 + 0.7 * 0.4)
    assert topic.suggested_category == "marketing"
