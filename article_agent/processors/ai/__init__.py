"""Generation backends (OpenRouter, Ollama, Gemini) and response handling."""

from .base import AIClient, ChatMessage, ChatResponse
from .factory import create_ai_client

__all__ = ["AIClient", "ChatMessage", "ChatResponse", "create_ai_client"]
