from __future__ import annotations

import asyncio
import os
from typing import Sequence

import requests

from .base import AIClient, ChatMessage, ChatResponse


class OllamaClient(AIClient):
    """HTTP client for Ollama's chat API.

    Environment:
      - OLLAMA_HOST (default: http://localhost:11434)
      - OLLAMA_MODEL (default: llama3.1:8b-instruct)
    """

    def __init__(self, *, timeout: int = 300) -> None:
        self.host = os.environ.get("OLLAMA_HOST", "http://localhost:11434").rstrip("/")
        self.model = os.environ.get("OLLAMA_MODEL", "llama3.1:8b-instruct")
        self.timeout = timeout

    def _chat(self, messages: Sequence[ChatMessage], *, temperature: float, max_tokens: int) -> str:
        url = f"{self.host}/api/chat"
        payload = {
            "model": self.model,
            "messages": [m.to_dict() for m in messages],
            "stream": False,
            "options": {"temperature": temperature, "num_predict": max_tokens},
        }
        resp = requests.post(url, json=payload, timeout=self.timeout)
        resp.raise_for_status()
        data = resp.json()
        # Ollama returns {'message': {'role': 'assistant', 'content': '...'}}
        return (data.get("message") or {}).get("content", "").strip()

    async def chat(
        self,
        messages: Sequence[ChatMessage],
        *,
        temperature: float = 0.7,
        max_tokens: int = 2000,
    ) -> ChatResponse:
        content = await asyncio.to_thread(
            self._chat, messages, temperature=temperature, max_tokens=max_tokens
        )
        return ChatResponse(content=content, model=self.model)
