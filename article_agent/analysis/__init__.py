"""Topic scoring, selection and model-assisted search planning."""

from .scoring import recency_score, relevance_score, combined_score, score_topic
from .topic_selection import validate_search_results, rank_topics, select_best_topic
from .search_agent import SearchAgent, SearchPlan, default_queries

__all__ = [
    "recency_score",
    "relevance_score",
    "combined_score",
    "score_topic",
    "validate_search_results",
    "rank_topics",
    "select_best_topic",
    "SearchAgent",
    "SearchPlan",
    "default_queries",
]
