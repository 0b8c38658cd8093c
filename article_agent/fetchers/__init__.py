"""Search providers that supply candidate topics."""

from .exa import ExaSearchClient, fallback_results

__all__ = ["ExaSearchClient", "fallback_results"]
