from __future__ import annotations

import os
from typing import Optional

from .base import AIClient

SUPPORTED_BACKENDS = ("openrouter", "ollama", "gemini")


def create_ai_client(*, backend: Optional[str] = None) -> AIClient:
    """Create a generation client based on GENERATION_BACKEND env or explicit value.

    Supported values: "openrouter" (default), "ollama" or "gemini".
    """
    selected = (backend or os.environ.get("GENERATION_BACKEND", "openrouter")).lower()

    if selected == "openrouter":
        from .openrouter import OpenRouterClient  # lazy import

        return OpenRouterClient()
    if selected == "ollama":
        from .ollama import OllamaClient  # lazy import

        return OllamaClient()
    if selected == "gemini":
        from .gemini import GeminiClient  # lazy import

        return GeminiClient()

    raise ValueError(
        f"Unsupported GENERATION_BACKEND '{selected}'. Use one of: {', '.join(SUPPORTED_BACKENDS)}."
    )
