"""
Tool Invoker
============

Performs one remote tool call and turns the response envelope into data.

Response handling:
    The envelope holds zero or more content blocks. Text blocks are joined
    with newlines and parsed as JSON; if that fails the raw text is
    returned unchanged. An envelope without any text block is an error
    ("Invalid response format"), and so is an envelope the provider marked
    with isError.

Retry policy:
    Only a transport failure with status 500 is retried, up to
    ``max_retries`` more times with a fixed delay between attempts. Any
    other failure is raised on the first attempt. Attempts run one after
    another; the delay is an ``await``, not a worker thread.
"""

import asyncio
import json
from typing import Any, Awaitable, Callable

from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt, wait_fixed

from rijkschat.tools.transport import ToolTransport, TransportError
from rijkschat.utils.logger import Logger

logger = Logger("Invoker")

RETRYABLE_STATUS = 500


class ToolInvocationError(Exception):
    """
    A tool call that failed for good.

    Attributes:
        status: Remote status, if the failure carried one
        message: Human-readable description
    """

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.message = message
        self.status = status


def _is_retryable(error: BaseException) -> bool:
    return isinstance(error, TransportError) and error.status == RETRYABLE_STATUS


def parse_envelope(envelope: Any) -> Any:
    """
    Extract the payload from a call_tool envelope.

    Returns:
        Parsed JSON if the joined text is valid JSON, otherwise the text

    Raises:
        ToolInvocationError: If the envelope carries no text content or
            the provider flagged the call as failed
    """
    content = envelope.get("content") if isinstance(envelope, dict) else None
    if not isinstance(content, list):
        raise ToolInvocationError("Invalid response format")

    texts = [
        block["text"]
        for block in content
        if isinstance(block, dict) and block.get("type") == "text" and isinstance(block.get("text"), str)
    ]
    if not texts:
        raise ToolInvocationError("Invalid response format")

    text = "\n".join(texts)
    if envelope.get("isError"):
        raise ToolInvocationError(text)

    try:
        return json.loads(text)
    except ValueError:
        return text


class ToolInvoker:
    """
    Calls tools through a transport with the 500-only retry policy.

    Example:
        invoker = ToolInvoker(transport)
        result = await invoker.invoke("search_artwork", {"query": "sunflowers"})
    """

    def __init__(
        self,
        transport: ToolTransport,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        """
        Args:
            transport: Connected tool transport
            max_retries: Extra attempts after a 500 failure
            retry_delay: Seconds to wait between attempts
            sleep: Coroutine used for the delay (replaceable in tests)
        """
        self.transport = transport
        self.max_retries = max(0, max_retries)
        self.retry_delay = retry_delay
        self._sleep = sleep

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            reraise=True,
            sleep=self._sleep,
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_fixed(self.retry_delay),
            retry=retry_if_exception(_is_retryable),
            before_sleep=self._log_retry,
        )

    def _log_retry(self, retry_state: RetryCallState) -> None:
        logger.warning(
            f"Tool call returned {RETRYABLE_STATUS}, "
            f"retry {retry_state.attempt_number}/{self.max_retries} in {self.retry_delay}s"
        )

    async def invoke(self, tool_name: str, arguments: dict[str, Any]) -> Any:
        """
        Call a tool and return its parsed result.

        Args:
            tool_name: Registered tool name
            arguments: Call arguments

        Returns:
            Parsed JSON payload, or raw text when the result is not JSON

        Raises:
            ToolInvocationError: On any failure, after retries for 500s
        """
        logger.info(f"Calling tool {tool_name}")
        logger.debug("Tool arguments", arguments)

        attempts = 0
        try:
            async for attempt in self._retrying():
                with attempt:
                    attempts += 1
                    envelope = await self.transport.call_tool(tool_name, arguments)
        except TransportError as e:
            if e.status == RETRYABLE_STATUS:
                logger.error(f"Tool {tool_name} failed after {attempts} attempts", e)
                raise ToolInvocationError(
                    f"Tool {tool_name} failed after {attempts} attempts: "
                    f"server error (status {RETRYABLE_STATUS}), retries exhausted",
                    status=e.status,
                ) from e
            logger.error(f"Tool {tool_name} failed", e)
            raise ToolInvocationError(e.message, status=e.status) from e
        except Exception as e:
            logger.error(f"Tool {tool_name} failed", e)
            raise ToolInvocationError(str(e)) from e

        result = parse_envelope(envelope)
        logger.debug(f"Tool {tool_name} succeeded after {attempts} attempt(s)")
        return result
