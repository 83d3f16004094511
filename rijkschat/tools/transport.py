"""
Tool Transport
==============

The request/response channel to the Rijksmuseum tool provider.

The provider is a Model Context Protocol (MCP) server started as a child
process and spoken to over stdio. Only two calls matter to the client:

    list_tools()            -> [{"name", "description", "inputSchema"}, ...]
    call_tool(name, args)   -> {"content": [{"type": "text", "text": ...}],
                                "isError": bool}

Both return plain mappings so the registry and the invoker do not depend
on the MCP SDK's types, and tests can substitute a fake transport.

Connection happens once at startup. Failing to start the provider or to
complete the MCP handshake raises TransportError, which the entry point
treats as fatal.
"""

from abc import ABC, abstractmethod
from contextlib import AsyncExitStack
from typing import Any

from mcp import ClientSession, StdioServerParameters
from mcp.client.stdio import get_default_environment, stdio_client
from mcp.shared.exceptions import McpError

from rijkschat.utils.logger import Logger

logger = Logger("Transport")


class TransportError(Exception):
    """
    A failure reported by the transport.

    Attributes:
        status: Status or error code reported by the remote side, if any
        message: Human-readable description
    """

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.message = message
        self.status = status

    def __str__(self) -> str:
        if self.status is not None:
            return f"{self.message} (status {self.status})"
        return self.message


class ToolTransport(ABC):
    """Interface every tool transport implements."""

    @abstractmethod
    async def connect(self) -> None:
        """Open the channel. Raises TransportError on failure."""

    @abstractmethod
    async def list_tools(self) -> list[dict[str, Any]]:
        """Return the raw tool listing."""

    @abstractmethod
    async def call_tool(self, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
        """Call a tool and return its content-block envelope."""

    @abstractmethod
    async def close(self) -> None:
        """Release the channel."""


class McpStdioTransport(ToolTransport):
    """
    MCP client over the stdio of a child process.

    Example:
        transport = McpStdioTransport(
            command="node",
            args=["/opt/rijksmuseum-mcp/build/index.js"],
            env={"RIJKSMUSEUM_API_KEY": "..."},
        )
        await transport.connect()
        tools = await transport.list_tools()
        await transport.close()
    """

    CLIENT_NAME = "rijksmuseum-python-client"

    def __init__(
        self,
        command: str,
        args: list[str],
        env: dict[str, str] | None = None
    ):
        """
        Args:
            command: Executable that runs the provider (e.g. "node")
            args: Arguments, normally the provider script path
            env: Extra environment variables for the provider process
        """
        self.command = command
        self.args = list(args)
        self.env = dict(env or {})

        self._stack: AsyncExitStack | None = None
        self._session: ClientSession | None = None

    @property
    def is_connected(self) -> bool:
        return self._session is not None

    async def connect(self) -> None:
        if self._session is not None:
            return

        params = StdioServerParameters(
            command=self.command,
            args=self.args,
            env={**get_default_environment(), **self.env},
        )

        stack = AsyncExitStack()
        try:
            read, write = await stack.enter_async_context(stdio_client(params))
            session = await stack.enter_async_context(ClientSession(read, write))
            await session.initialize()
        except McpError as e:
            await stack.aclose()
            raise TransportError(f"MCP handshake failed: {e.error.message}", e.error.code) from e
        except Exception as e:
            await stack.aclose()
            raise TransportError(f"Failed to start tool provider: {e}") from e

        self._stack = stack
        self._session = session
        logger.info(f"Connected to tool provider: {self.command} {' '.join(self.args)}")

    def _require_session(self) -> ClientSession:
        if self._session is None:
            raise TransportError("Transport is not connected")
        return self._session

    async def list_tools(self) -> list[dict[str, Any]]:
        session = self._require_session()
        try:
            result = await session.list_tools()
        except McpError as e:
            raise TransportError(e.error.message, e.error.code) from e

        return [
            {
                "name": tool.name,
                "description": tool.description,
                "inputSchema": tool.inputSchema,
            }
            for tool in result.tools
        ]

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
        session = self._require_session()
        try:
            result = await session.call_tool(name, arguments)
        except McpError as e:
            raise TransportError(e.error.message, e.error.code) from e

        return {
            "content": [block.model_dump(exclude_none=True) for block in result.content],
            "isError": bool(result.isError),
        }

    async def close(self) -> None:
        if self._stack is None:
            return
        stack, self._stack, self._session = self._stack, None, None
        await stack.aclose()
        logger.info("Tool provider connection closed")
