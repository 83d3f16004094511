"""Shared test doubles for the transport and the model backend."""

from __future__ import annotations

import json
from typing import Any, AsyncIterator

from rijkschat.llm.base import LLMService
from rijkschat.tools.transport import ToolTransport


def text_envelope(payload: Any, is_error: bool = False) -> dict[str, Any]:
    """Wrap a payload the way the provider does: one text content block."""
    text = payload if isinstance(payload, str) else json.dumps(payload)
    return {"content": [{"type": "text", "text": text}], "isError": is_error}


def tool_listing(*names: str) -> list[dict[str, Any]]:
    return [{"name": name, "description": f"{name} tool", "inputSchema": {"type": "object"}} for name in names]


SEARCH_PAYLOAD = {
    "count": 2,
    "artObjects": [
        {
            "id": "en-SK-A-1718",
            "objectNumber": "SK-A-1718",
            "title": "Sunflowers in a Vase",
            "principalOrFirstMaker": "Vincent van Gogh",
            "webImage": {"url": "https://images.example/sunflowers.jpg"},
        },
        {
            "id": "en-SK-A-2344",
            "objectNumber": "SK-A-2344",
            "title": "The Milkmaid",
            "principalOrFirstMaker": "Johannes Vermeer",
            "webImage": {"url": "https://images.example/milkmaid.jpg"},
        },
    ],
}

DETAILS_PAYLOAD = {
    "artObject": {
        "id": "en-SK-A-2344",
        "objectNumber": "SK-A-2344",
        "title": "The Milkmaid",
        "principalOrFirstMaker": "Johannes Vermeer",
        "dating": {"presentingDate": "c. 1660"},
        "materials": ["canvas", "oil paint"],
        "subTitle": "h 45.5cm × w 41cm",
        "plaqueDescriptionEnglish": "A maidservant pours milk.",
        "webImage": {"url": "https://images.example/milkmaid-large.jpg"},
    }
}


class FakeTransport(ToolTransport):
    """
    In-memory transport.

    ``responses`` maps a tool name to an envelope, an exception, or a list
    of those consumed one per call.
    """

    def __init__(self, tools: Any = None, responses: dict[str, Any] | None = None):
        self.tools = tools if tools is not None else []
        self.responses = responses or {}
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.connected = False
        self.closed = False

    async def connect(self) -> None:
        self.connected = True

    async def list_tools(self) -> list[dict[str, Any]]:
        if isinstance(self.tools, Exception):
            raise self.tools
        return self.tools

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
        self.calls.append((name, dict(arguments)))
        outcome = self.responses[name]
        if isinstance(outcome, list):
            outcome = outcome.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def close(self) -> None:
        self.closed = True


class FakeLLM(LLMService):
    """Backend that streams canned tokens and records every request."""

    provider = "fake"

    def __init__(self, tokens: tuple[str, ...] = ("Hello", ", ", "world"), error: Exception | None = None):
        super().__init__(model="fake-model")
        self.tokens = list(tokens)
        self.error = error
        self.requests: list[list[dict[str, str]]] = []

    async def _complete(self, messages: list[dict[str, str]]) -> str:
        self.requests.append(messages)
        if self.error:
            raise self.error
        return "".join(self.tokens)

    async def _stream(self, messages: list[dict[str, str]]) -> AsyncIterator[str]:
        self.requests.append(messages)
        for token in self.tokens:
            yield token
        if self.error:
            raise self.error

    @property
    def last_prompt(self) -> str:
        return self.requests[-1][-1]["content"]


class Recorder:
    """Collects callback invocations in order."""

    def __init__(self):
        self.tokens: list[str] = []
        self.completed: list[str] = []
        self.errors: list[Exception] = []
        self.events: list[Any] = []

    def on_token(self, token: str) -> None:
        self.tokens.append(token)

    def on_complete(self, text: str) -> None:
        self.completed.append(text)

    def on_error(self, error: Exception) -> None:
        self.errors.append(error)

    def sink(self, event: Any) -> None:
        self.events.append(event)


async def no_sleep(_seconds: float) -> None:
    return None
