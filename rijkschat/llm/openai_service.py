"""
OpenAI Backend
==============

Chat Completions through the async OpenAI SDK. Works with any
OpenAI-compatible server when OPENAI_BASE_URL is set.
"""

from typing import AsyncIterator

from openai import AsyncOpenAI

from rijkschat.llm.base import LLMService

DEFAULT_MODEL = "gpt-4-turbo-preview"


class OpenAIService(LLMService):
    """OpenAI chat backend."""

    provider = "openai"

    def __init__(
        self,
        api_key: str | None,
        model: str | None = None,
        base_url: str | None = None,
        max_tokens: int = 1024,
        client: AsyncOpenAI | None = None
    ):
        if not api_key and client is None:
            raise ValueError("OPENAI_API_KEY is required for OpenAI service")

        super().__init__(model=model or DEFAULT_MODEL, max_tokens=max_tokens)
        self._client = client or AsyncOpenAI(api_key=api_key, base_url=base_url)

    async def _complete(self, messages: list[dict[str, str]]) -> str:
        response = await self._client.chat.completions.create(
            model=self.model,
            messages=messages,
            max_tokens=self.max_tokens,
        )
        return response.choices[0].message.content or ""

    async def _stream(self, messages: list[dict[str, str]]) -> AsyncIterator[str]:
        stream = await self._client.chat.completions.create(
            model=self.model,
            messages=messages,
            max_tokens=self.max_tokens,
            stream=True,
        )
        async for chunk in stream:
            if chunk.choices and chunk.choices[0].delta.content:
                yield chunk.choices[0].delta.content

    async def aclose(self) -> None:
        await self._client.close()
