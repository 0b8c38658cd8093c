from __future__ import annotations

from article_agent.processors.classify import category_scores, classify_category


def test_logistics_keywords_win():
    title = "Cutting Shipping Costs with Smarter Fulfillment"
    text = "Warehouse automation and last-mile delivery partners reduce freight spend."
    assert classify_category(title, text) == "logistics"


def test_no_keyword_hits_falls_back_to_default():
    assert classify_category("Quarterly recap", "Nothing relevant here.") == "trends"
    assert classify_category("Quarterly recap", "", default_category="marketing") == "marketing"


def test_ties_resolve_to_first_declared_category():
    keywords = {"alpha": ["widget"], "beta": ["gadget"]}
    assert classify_category("widget gadget", "", category_keywords=keywords) == "alpha"


def test_matching_is_case_insensitive_substring_count():
    scores = category_scores("SEO for Marketing teams", "", category_keywords={"m": ["market", "seo"]})
    # "market" is counted inside "Marketing"
    assert scores == {"m": 2}


def test_injected_dictionary_replaces_defaults():
    keywords = {"pets": ["dog", "cat"], "garden": ["soil"]}
    assert classify_category("Dog food", "cat toys and dog beds", category_keywords=keywords) == "pets"
