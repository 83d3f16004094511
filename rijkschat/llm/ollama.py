"""
Ollama Backend
==============

Talks to a local Ollama server's /api/chat endpoint with httpx.

Streaming responses are newline-delimited JSON objects:

    {"message": {"role": "assistant", "content": "The"}, "done": false}
    {"message": {"role": "assistant", "content": " Night"}, "done": false}
    {"done": true, ...}

Lines that are not valid JSON are logged and skipped.
"""

import json
from typing import AsyncIterator

import httpx

from rijkschat.llm.base import LLMService, StreamError
from rijkschat.utils.logger import Logger

logger = Logger("Ollama")

DEFAULT_BASE_URL = "http://localhost:11434"


class OllamaService(LLMService):
    """
    Ollama chat backend.

    Example:
        llm = OllamaService(model="mistral")
        reply = await llm.chat("Who painted The Night Watch?")
    """

    provider = "ollama"

    def __init__(
        self,
        model: str = "mistral",
        base_url: str | None = None,
        max_tokens: int = 1024,
        client: httpx.AsyncClient | None = None,
        timeout: float = 120.0
    ):
        """
        Args:
            model: Ollama model name
            base_url: Server URL, defaults to http://localhost:11434
            max_tokens: Passed as num_predict
            client: Preconfigured httpx client (mainly for tests)
            timeout: Request timeout in seconds
        """
        super().__init__(model=model or "mistral", max_tokens=max_tokens)
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self._client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    def _payload(self, messages: list[dict[str, str]], stream: bool) -> dict:
        return {
            "model": self.model,
            "messages": messages,
            "stream": stream,
            "options": {"num_predict": self.max_tokens},
        }

    async def _complete(self, messages: list[dict[str, str]]) -> str:
        response = await self._client.post("/api/chat", json=self._payload(messages, stream=False))
        if response.status_code >= 400:
            raise StreamError(f"Ollama API error: {response.status_code} {response.reason_phrase}")

        data = response.json()
        return (data.get("message") or {}).get("content", "")

    async def _stream(self, messages: list[dict[str, str]]) -> AsyncIterator[str]:
        async with self._client.stream("POST", "/api/chat", json=self._payload(messages, stream=True)) as response:
            if response.status_code >= 400:
                await response.aread()
                raise StreamError(f"Ollama API error: {response.status_code} {response.reason_phrase}")

            async for line in response.aiter_lines():
                if not line.strip():
                    continue
                try:
                    data = json.loads(line)
                except ValueError as e:
                    logger.warning("Failed to parse streaming response line", {"error": str(e)})
                    continue

                if data.get("error"):
                    raise StreamError(f"Ollama stream error: {data['error']}")

                content = (data.get("message") or {}).get("content")
                if content:
                    yield content
                if data.get("done"):
                    break

    async def aclose(self) -> None:
        await self._client.aclose()
