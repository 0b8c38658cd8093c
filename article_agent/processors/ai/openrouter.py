from __future__ import annotations

import asyncio
import os
from typing import Sequence

import requests

from .base import AIClient, ChatMessage, ChatResponse

OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"


class OpenRouterClient(AIClient):
    """HTTP client for OpenRouter's OpenAI-compatible chat completions API.

    Environment:
      - OPENROUTER_API_KEY (required)
      - OPENROUTER_MODEL (default: openai/gpt-4o-mini)
    """

    def __init__(self, *, api_key: str | None = None, timeout: int = 180) -> None:
        self.api_key = api_key or os.environ.get("OPENROUTER_API_KEY")
        if not self.api_key:
            raise RuntimeError("OPENROUTER_API_KEY is required for OpenRouter backend")
        self.model = os.environ.get("OPENROUTER_MODEL", "openai/gpt-4o-mini")
        self.timeout = timeout

    def _complete(self, messages: Sequence[ChatMessage], *, temperature: float, max_tokens: int) -> str:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.model,
            "messages": [m.to_dict() for m in messages],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        resp = requests.post(OPENROUTER_URL, json=payload, headers=headers, timeout=self.timeout)
        resp.raise_for_status()
        data = resp.json()
        choices = data.get("choices") or []
        if not choices:
            return ""
        return (choices[0].get("message") or {}).get("content", "").strip()

    async def chat(
        self,
        messages: Sequence[ChatMessage],
        *,
        temperature: float = 0.7,
        max_tokens: int = 2000,
    ) -> ChatResponse:
        content = await asyncio.to_thread(
            self._complete, messages, temperature=temperature, max_tokens=max_tokens
        )
        return ChatResponse(content=content, model=self.model)
