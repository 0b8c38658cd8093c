from __future__ import annotations

import asyncio
import os
from typing import Sequence

import requests

from .base import AIClient, ChatMessage, ChatResponse


class GeminiClient(AIClient):
    """HTTP client for Gemini via Google AI Studio API.

    Environment:
      - GOOGLE_API_KEY (required)
      - GEMINI_MODEL (default: gemini-1.5-flash)
    """

    def __init__(self, *, timeout: int = 180) -> None:
        self.api_key = os.environ.get("GOOGLE_API_KEY")
        if not self.api_key:
            raise RuntimeError("GOOGLE_API_KEY is required for Gemini backend")
        self.model = os.environ.get("GEMINI_MODEL", "gemini-1.5-flash")
        self.timeout = timeout

    def _generate(self, messages: Sequence[ChatMessage], *, temperature: float, max_tokens: int) -> str:
        url = (
            "https://generativelanguage.googleapis.com/v1beta/models/"
            f"{self.model}:generateContent?key={self.api_key}"
        )
        system = "\n\n".join(m.content for m in messages if m.role == "system")
        contents = [
            {"role": "model" if m.role == "assistant" else "user", "parts": [{"text": m.content}]}
            for m in messages
            if m.role != "system"
        ]
        payload: dict = {
            "contents": contents,
            "generationConfig": {"temperature": temperature, "maxOutputTokens": max_tokens},
        }
        if system:
            payload["systemInstruction"] = {"parts": [{"text": system}]}
        resp = requests.post(url, json=payload, timeout=self.timeout)
        resp.raise_for_status()
        data = resp.json()
        candidates = data.get("candidates") or []
        if not candidates:
            return ""
        parts = candidates[0].get("content", {}).get("parts") or []
        return "".join(p.get("text", "") for p in parts).strip()

    async def chat(
        self,
        messages: Sequence[ChatMessage],
        *,
        temperature: float = 0.7,
        max_tokens: int = 2000,
    ) -> ChatResponse:
        content = await asyncio.to_thread(
            self._generate, messages, temperature=temperature, max_tokens=max_tokens
        )
        return ChatResponse(content=content, model=self.model)
