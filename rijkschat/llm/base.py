"""
Language-Model Port
===================

The interface every model backend implements, plus the streaming plumbing
they share.

Operations:
    chat(message, context=None)                    -> full reply text
    stream_chat(message, callbacks, context=None)  -> relays tokens, returns text
    clear_history()

When ``context`` is given, the final user message sent to the model is

    Context: <context>

    User: <message>

Backends keep their own turn history for callers that use them directly.
A caller that manages history itself (the Conversation Bridge does) passes
``history=`` and the backend's own history is neither read nor written.
"""

import inspect
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Sequence

from rijkschat.utils.logger import Logger

logger = Logger("LLM")


class StreamError(Exception):
    """A model call or token stream failed."""


@dataclass
class StreamCallbacks:
    """
    Receivers for a streamed reply.

    Each callback may be a plain function or a coroutine function.

    Attributes:
        on_token: Called with every text fragment, in order
        on_complete: Called once with the full reply
        on_error: Called once with the StreamError if the stream fails
    """
    on_token: Callable[[str], Any]
    on_complete: Callable[[str], Any] | None = None
    on_error: Callable[[Exception], Any] | None = None


async def emit(callback: Callable[..., Any] | None, *args: Any) -> None:
    """Call a callback and await it if it returned an awaitable."""
    if callback is None:
        return
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


class LLMService(ABC):
    """
    Base class for model backends.

    Subclasses implement ``_complete`` (one-shot) and ``_stream`` (async
    iterator of text fragments); history handling and callback relay live
    here.
    """

    provider: str = ""

    def __init__(self, model: str, max_tokens: int = 1024):
        self.model = model
        self.max_tokens = max_tokens
        self._history: list[dict[str, str]] = []

    @property
    def history(self) -> list[dict[str, str]]:
        return list(self._history)

    def build_messages(
        self,
        message: str,
        context: str | None = None,
        history: Sequence[dict[str, str]] | None = None
    ) -> list[dict[str, str]]:
        """
        Build the message list for one request.

        Args:
            message: The user message
            context: Optional context prepended to the message
            history: Prior turns; defaults to this backend's own history

        Returns:
            Prior turns followed by the new user message
        """
        prior = list(history) if history is not None else list(self._history)
        content = f"Context: {context}\n\nUser: {message}" if context else message
        return prior + [{"role": "user", "content": content}]

    async def chat(
        self,
        message: str,
        context: str | None = None,
        history: Sequence[dict[str, str]] | None = None
    ) -> str:
        """
        Get a complete reply without streaming.

        Raises:
            StreamError: If the backend call fails
        """
        messages = self.build_messages(message, context, history)
        if history is None:
            self._history.append({"role": "user", "content": message})

        try:
            reply = await self._complete(messages)
        except StreamError:
            raise
        except Exception as e:
            logger.error(f"{self.provider} chat failed", e)
            raise StreamError(f"{self.provider} request failed: {e}") from e

        if history is None:
            self._history.append({"role": "assistant", "content": reply})
        return reply

    async def stream_chat(
        self,
        message: str,
        callbacks: StreamCallbacks,
        context: str | None = None,
        history: Sequence[dict[str, str]] | None = None
    ) -> str:
        """
        Stream a reply, relaying each token before requesting the next.

        Returns:
            The full reply text

        Raises:
            StreamError: After on_error has been called
        """
        messages = self.build_messages(message, context, history)
        if history is None:
            self._history.append({"role": "user", "content": message})

        logger.debug(f"Streaming from {self.provider}", {"model": self.model, "messages": len(messages)})

        parts: list[str] = []
        try:
            async for token in self._stream(messages):
                if not token:
                    continue
                parts.append(token)
                await emit(callbacks.on_token, token)
        except Exception as e:
            error = e if isinstance(e, StreamError) else StreamError(f"{self.provider} stream failed: {e}")
            logger.error(f"Failed to stream response from {self.provider}", e)
            await emit(callbacks.on_error, error)
            if error is e:
                raise
            raise error from e

        full_response = "".join(parts)
        if history is None:
            self._history.append({"role": "assistant", "content": full_response})

        await emit(callbacks.on_complete, full_response)
        return full_response

    def clear_history(self) -> None:
        self._history = []

    @abstractmethod
    async def _complete(self, messages: list[dict[str, str]]) -> str:
        """Return the full reply for messages."""

    @abstractmethod
    def _stream(self, messages: list[dict[str, str]]) -> AsyncIterator[str]:
        """Yield reply fragments for messages."""

    async def aclose(self) -> None:
        """Release network clients held by the backend."""
