"""
Tool Registry
=============

The tools the Rijksmuseum provider advertised when the session started.

Tools are remote operations (search_artwork, get_artwork_details, ...)
described by a name, an optional description and an optional input
schema. The registry asks the transport for the listing once at startup
and keeps the tools in the order the provider listed them; that order
decides which tool wins when two tools share a trigger phrase.

Discovery replaces the whole set at once. Consumers either see an empty
registry (not discovered yet) or the complete listing, never a partial one.
A failed listing raises DiscoveryError and there is no fallback list:
the session must not start without the provider.

Usage:
    from rijkschat.tools import ToolRegistry

    registry = ToolRegistry()
    await registry.discover(transport)

    tool = registry.lookup("search_artwork")
"""

from dataclasses import dataclass, field
from typing import Any, Iterator

from rijkschat.tools.transport import ToolTransport
from rijkschat.utils.logger import Logger

logger = Logger("Registry")


class DiscoveryError(Exception):
    """The provider's tool listing could not be fetched."""


@dataclass(frozen=True)
class ToolDescriptor:
    """
    A remote tool.

    Attributes:
        name: Tool name used in call requests
        description: What the provider says the tool does
        input_schema: JSON schema hint for the arguments
    """
    name: str
    description: str | None = None
    input_schema: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @classmethod
    def from_listing(cls, entry: dict[str, Any]) -> "ToolDescriptor":
        return cls(
            name=entry["name"],
            description=entry.get("description"),
            input_schema=dict(entry.get("inputSchema") or {}),
        )


class ToolRegistry:
    """
    Ordered, replace-on-discovery collection of tool descriptors.

    Example:
        registry = ToolRegistry()
        tools = await registry.discover(transport)
        print([t.name for t in tools])
    """

    def __init__(self, tools: list[ToolDescriptor] | None = None):
        self._tools: tuple[ToolDescriptor, ...] = tuple(tools or ())
        self._by_name: dict[str, ToolDescriptor] = {t.name: t for t in self._tools}

    async def discover(self, transport: ToolTransport) -> tuple[ToolDescriptor, ...]:
        """
        Fetch the tool listing and replace the registry contents.

        Returns:
            The discovered tools in provider order

        Raises:
            DiscoveryError: If the listing call fails or is malformed
        """
        try:
            listing = await transport.list_tools()
            tools = tuple(ToolDescriptor.from_listing(entry) for entry in listing)
        except Exception as e:
            logger.error("Tool discovery failed", e)
            raise DiscoveryError(f"Failed to list tools: {e}") from e

        self._replace(tools)
        logger.info(f"Discovered {len(tools)} tools", {"tools": self.list_names()})
        return tools

    def _replace(self, tools: tuple[ToolDescriptor, ...]) -> None:
        # Build the index first so both attributes swap together
        by_name = {tool.name: tool for tool in tools}
        self._tools, self._by_name = tools, by_name

    def lookup(self, name: str) -> ToolDescriptor | None:
        return self._by_name.get(name)

    def get_all(self) -> list[ToolDescriptor]:
        return list(self._tools)

    def list_names(self) -> list[str]:
        return [tool.name for tool in self._tools]

    @property
    def is_discovered(self) -> bool:
        return bool(self._tools)

    def __iter__(self) -> Iterator[ToolDescriptor]:
        return iter(self._tools)

    def __len__(self) -> int:
        return len(self._tools)


__all__ = [
    "DiscoveryError",
    "ToolDescriptor",
    "ToolRegistry",
]
