"""
Ollama API client wrapper.
"""
import httpx
from typing import Optional, List, Dict
from core.config import (
    OLLAMA_BASE_URL,
    OLLAMA_CHAT_MODEL,
    CHAT_TEMPERATURE,
    CHAT_MAX_TOKENS,
    CHAT_TIMEOUT_SEC,
)


class OllamaError(Exception):
    """Raised when the Ollama API call fails or returns an unusable envelope."""
    pass


class OllamaClient:
    """Client for interacting with Ollama chat models."""

    def __init__(self, base_url: str = OLLAMA_BASE_URL):
        self.base_url = base_url
        self.client = httpx.Client(timeout=CHAT_TIMEOUT_SEC)

    def chat(
        self,
        messages: List[Dict[str, str]],
        model: str = OLLAMA_CHAT_MODEL,
        temperature: float = CHAT_TEMPERATURE,
        max_tokens: int = CHAT_MAX_TOKENS,
        format: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> str:
        """
        Run a non-streaming chat completion and return the assistant text.

        Args:
            messages: [{"role": "system"|"user"|"assistant", "content": str}, ...]
            format: "json" to request a JSON-typed completion
            timeout: Per-call timeout in seconds (client default when None)
        """
        url = f"{self.base_url}/api/chat"
        payload = {
            "model": model,
            "messages": messages,
            "options": {
                "temperature": temperature,
                "num_predict": max_tokens,
            },
            "stream": False,
        }
        if format:
            payload["format"] = format

        request_timeout = timeout if timeout is not None else self.client.timeout
        try:
            response = self.client.post(url, json=payload, timeout=request_timeout)
            response.raise_for_status()
            result = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise OllamaError(f"Ollama API error: {str(e)}") from e

        message = result.get("message") if isinstance(result, dict) else None
        if not isinstance(message, dict) or not isinstance(message.get("content"), str):
            raise OllamaError("Ollama API error: response has no message content")
        return message["content"]


# Global Ollama client instance
ollama = OllamaClient()
