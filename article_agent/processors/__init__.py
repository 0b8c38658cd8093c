"""Processing pipeline: normalization, similarity, deduplication, classification, cleaning."""

from .normalize import clean_html_to_text, normalize_plain_text, normalize_search_result, batch_normalize, parse_datetime
from .similarity import extract_keywords, jaccard_similarity, bigram_similarity, combined_similarity
from .dedup import Deduplicator, check_topic_duplication, filter_duplicate_topics
from .classify import classify_category

__all__ = [
    "clean_html_to_text",
    "normalize_plain_text",
    "normalize_search_result",
    "batch_normalize",
    "parse_datetime",
    "extract_keywords",
    "jaccard_similarity",
    "bigram_similarity",
    "combined_similarity",
    "Deduplicator",
    "check_topic_duplication",
    "filter_duplicate_topics",
    "classify_category",
]
