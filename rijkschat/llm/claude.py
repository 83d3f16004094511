"""
Claude Backend
==============

Anthropic Messages API through the official async SDK.
"""

from typing import AsyncIterator

from anthropic import AsyncAnthropic

from rijkschat.llm.base import LLMService, StreamError

DEFAULT_MODEL = "claude-3-opus-20240229"


class ClaudeService(LLMService):
    """Claude chat backend."""

    provider = "claude"

    def __init__(
        self,
        api_key: str | None,
        model: str | None = None,
        base_url: str | None = None,
        max_tokens: int = 1024,
        client: AsyncAnthropic | None = None
    ):
        """
        Raises:
            ValueError: If no API key is given
        """
        if not api_key and client is None:
            raise ValueError("CLAUDE_API_KEY is required for Claude service")

        super().__init__(model=model or DEFAULT_MODEL, max_tokens=max_tokens)
        self._client = client or AsyncAnthropic(api_key=api_key, base_url=base_url)

    async def _complete(self, messages: list[dict[str, str]]) -> str:
        response = await self._client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=messages,
        )

        if not response.content:
            raise StreamError("Empty response from Claude")

        block = response.content[0]
        return block.text if block.type == "text" else "Unable to process response"

    async def _stream(self, messages: list[dict[str, str]]) -> AsyncIterator[str]:
        async with self._client.messages.stream(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=messages,
        ) as stream:
            async for text in stream.text_stream:
                yield text

    async def aclose(self) -> None:
        await self._client.close()
