from __future__ import annotations

import math
from pathlib import Path
from typing import Any, Dict, List

import yaml

from .pipeline_config import PipelineConfig


class ConfigError(Exception):
    """Raised when the configuration file is invalid or missing required fields."""


_FLOAT_FIELDS = {
    "relevance_weight",
    "recency_weight",
    "keyword_similarity_weight",
    "ngram_similarity_weight",
    "similarity_threshold",
    "temperature",
}
_INT_FIELDS = {
    "duplicate_check_limit",
    "max_keywords",
    "min_text_length",
    "min_word_count",
    "max_word_count",
    "max_retries",
    "retry_base_ms",
    "retry_cap_ms",
    "max_tokens",
    "uniqueness_title_limit",
    "daily_rate_limit",
}


def _string_list(value: Any, *, name: str) -> List[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) and v.strip() for v in value):
        raise ConfigError(f"'{name}' must be a list of non-empty strings")
    return [v.strip() for v in value]


def _string_mapping(value: Any, *, name: str) -> Dict[str, str]:
    if not isinstance(value, dict) or not all(isinstance(k, str) and isinstance(v, str) for k, v in value.items()):
        raise ConfigError(f"'{name}' must be a mapping of string keys to string values")
    return {k.strip(): v.strip() for k, v in value.items()}


def validate_pipeline_config(cfg: PipelineConfig) -> PipelineConfig:
    """Check cross-field invariants; returns the config unchanged when valid."""
    if not math.isclose(cfg.relevance_weight + cfg.recency_weight, 1.0, abs_tol=1e-9):
        raise ConfigError(
            f"relevance_weight + recency_weight must equal 1.0, got {cfg.relevance_weight + cfg.recency_weight}"
        )
    if not math.isclose(cfg.keyword_similarity_weight + cfg.ngram_similarity_weight, 1.0, abs_tol=1e-9):
        raise ConfigError("keyword_similarity_weight + ngram_similarity_weight must equal 1.0")
    if not (0.0 < cfg.similarity_threshold <= 1.0):
        raise ConfigError(f"similarity_threshold must be in (0, 1], got {cfg.similarity_threshold}")
    for name in ("duplicate_check_limit", "max_keywords", "min_word_count", "retry_base_ms", "retry_cap_ms"):
        if getattr(cfg, name) <= 0:
            raise ConfigError(f"'{name}' must be positive")
    if cfg.max_retries < 0:
        raise ConfigError("'max_retries' must be zero or positive")
    if not cfg.category_keywords:
        raise ConfigError("'category_keywords' must declare at least one category")
    for category, keywords in cfg.category_keywords.items():
        if not keywords:
            raise ConfigError(f"Category '{category}' has no keywords")
    if cfg.default_category not in cfg.category_keywords:
        raise ConfigError(
            f"default_category '{cfg.default_category}' is not declared. Allowed: {cfg.categories}"
        )
    unknown = sorted(set(cfg.thumbnails) - set(cfg.category_keywords))
    if unknown:
        raise ConfigError("Thumbnails reference unknown categories: " + ", ".join(unknown))
    return cfg


def load_pipeline_config(path: Path | str | None = None) -> PipelineConfig:
    """Load ``pipeline.yaml`` on top of the built-in defaults.

    YAML structure (every key optional):
      - scalar tunables, e.g. ``similarity_threshold: 0.35``
      - stop_words: list[string] (replaces the built-in list)
      - extra_stop_words: list[string] (added to the built-in list)
      - category_keywords: mapping category -> list[string], declaration order kept
      - default_category: string
      - thumbnails: mapping category -> url
      - search_queries: mapping category (or 'default') -> list[string]
      - excluded_domains: list[string]

    Unknown top-level keys are ignored for forward compatibility. Without a
    path the defaults are validated and returned.
    """
    cfg = PipelineConfig()
    if path is None:
        return validate_pipeline_config(cfg)

    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError("Top-level YAML value must be a mapping")

    for key in _FLOAT_FIELDS & set(data):
        try:
            setattr(cfg, key, float(data[key]))
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"'{key}' must be a number: {exc}") from exc
    for key in _INT_FIELDS & set(data):
        try:
            setattr(cfg, key, int(data[key]))
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"'{key}' must be an integer: {exc}") from exc

    if data.get("stop_words") is not None:
        cfg.stop_words = frozenset(w.lower() for w in _string_list(data["stop_words"], name="stop_words"))
    if data.get("extra_stop_words") is not None:
        extra = _string_list(data["extra_stop_words"], name="extra_stop_words")
        cfg.stop_words = cfg.stop_words | {w.lower() for w in extra}

    if data.get("category_keywords") is not None:
        raw = data["category_keywords"]
        if not isinstance(raw, dict):
            raise ConfigError("'category_keywords' must be a mapping of category to keyword list")
        cfg.category_keywords = {
            str(cat).strip(): _string_list(kws, name=f"category_keywords.{cat}") for cat, kws in raw.items()
        }
    if data.get("default_category") is not None:
        cfg.default_category = str(data["default_category"]).strip()
    if data.get("thumbnails") is not None:
        cfg.thumbnails = _string_mapping(data["thumbnails"], name="thumbnails")
    if data.get("search_queries") is not None:
        raw = data["search_queries"]
        if not isinstance(raw, dict):
            raise ConfigError("'search_queries' must be a mapping of category to query list")
        cfg.search_queries = {
            str(cat).strip(): _string_list(qs, name=f"search_queries.{cat}") for cat, qs in raw.items()
        }
    if data.get("excluded_domains") is not None:
        cfg.excluded_domains = _string_list(data["excluded_domains"], name="excluded_domains")

    return validate_pipeline_config(cfg)
