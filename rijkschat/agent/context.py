"""
Context Assembly
================

Builds the tool-derived context that is added to a chat prompt.

Pipeline for one message:

    message
       │
       ▼
    IntentMatcher.match ──── no tool ───► None (answer without context)
       │
       ▼
    ToolInvoker.invoke ───── failure ───► ContextResult.degraded(apology)
       │
       ▼
    remember artworks in the recent-results cache
       │
       ▼
    format_result ──────────────────────► ContextResult.ok(text)

``build_context`` never raises. The two non-success outcomes are kept
apart: ``None`` means no tool was relevant, a degraded result means a tool
was relevant but failed, and its apology should be shown to the user as
the reply instead of asking the model.
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterable

from rijkschat.agent.intent import IntentMatcher, TriggerPhraseMatcher
from rijkschat.artwork import Artwork, artwork_from_details, artworks_from_search
from rijkschat.memory import RecentResults
from rijkschat.tools import ToolDescriptor, ToolRegistry
from rijkschat.tools.formatters import format_result
from rijkschat.tools.invoker import ToolInvoker
from rijkschat.utils.logger import Logger

logger = Logger("Context")

APOLOGY_MESSAGE = (
    "I apologize, but I encountered an error while retrieving information "
    "from the Rijksmuseum collection. I can still answer your question from "
    "my general knowledge of art if you'd like."
)


@dataclass(frozen=True)
class ContextResult:
    """
    Outcome of context assembly for a message that matched a tool.

    Attributes:
        text: Formatted context, or the apology when degraded
        degraded: True when the tool call failed
        tool_name: The tool that was matched
    """
    text: str
    degraded: bool = False
    tool_name: str | None = None

    @classmethod
    def ok(cls, text: str, tool_name: str) -> "ContextResult":
        return cls(text=text, degraded=False, tool_name=tool_name)

    @classmethod
    def failed(cls, tool_name: str, text: str = APOLOGY_MESSAGE) -> "ContextResult":
        return cls(text=text, degraded=True, tool_name=tool_name)


def _search_records(payload: Any) -> list[Artwork]:
    return artworks_from_search(payload)


def _detail_records(payload: Any) -> list[Artwork]:
    artwork = artwork_from_details(payload)
    return [artwork] if artwork else []


# Tools whose results are artworks worth remembering
RECORD_EXTRACTORS: dict[str, Callable[[Any], list[Artwork]]] = {
    "search_artwork": _search_records,
    "get_artwork_details": _detail_records,
}


class ContextAssembler:
    """
    Matches a message to a tool, calls it and formats the result.

    The assembler owns the recent-results cache; other components read it
    through the ``recent`` property.

    Example:
        assembler = ContextAssembler(registry, invoker)

        result = await assembler.build_context("find sunflowers")
        if result is None:
            ...  # no tool involved
        elif result.degraded:
            ...  # show result.text to the user
        else:
            prompt_context = result.text
    """

    def __init__(
        self,
        registry: ToolRegistry,
        invoker: ToolInvoker,
        matcher: IntentMatcher | None = None,
        recent: RecentResults | None = None
    ):
        self.registry = registry
        self.invoker = invoker
        self.matcher = matcher or TriggerPhraseMatcher()
        self._recent = recent if recent is not None else RecentResults()

    @property
    def recent(self) -> RecentResults:
        """Recently seen artworks (read-only use outside the assembler)."""
        return self._recent

    async def build_context(
        self,
        message: str,
        tools: Iterable[ToolDescriptor] | None = None
    ) -> ContextResult | None:
        """
        Assemble tool context for a chat message.

        Args:
            message: The user's message
            tools: Tools to consider; defaults to the registry, in order

        Returns:
            None if no tool matched, otherwise an ok or degraded ContextResult
        """
        try:
            match = self.matcher.match(message, tools if tools is not None else self.registry)
        except Exception as e:
            logger.error("Intent matching failed", e)
            return None

        if match is None:
            logger.debug("No tool matched the message")
            return None

        tool_name = match.tool.name
        logger.info(f"Using tool {tool_name}", match.arguments)

        try:
            result = await self.run_tool(tool_name, match.arguments)
        except Exception as e:
            logger.error(f"Could not build context from {tool_name}", e)
            return ContextResult.failed(tool_name)

        return ContextResult.ok(format_result(tool_name, result), tool_name)

    async def run_tool(self, tool_name: str, arguments: dict[str, Any]) -> Any:
        """
        Invoke a tool and remember any artworks it returned.

        Raises:
            ToolInvocationError: If the call fails
        """
        result = await self.invoker.invoke(tool_name, arguments)
        self.remember(tool_name, result)
        return result

    def remember(self, tool_name: str, result: Any) -> list[Artwork]:
        """Upsert the artworks in a tool result into the recent-results cache."""
        extractor = RECORD_EXTRACTORS.get(tool_name)
        if extractor is None:
            return []

        try:
            artworks = extractor(result)
        except Exception as e:
            logger.warning(f"Could not read artworks from {tool_name} result", {"error": str(e)})
            return []

        if artworks:
            self._recent.upsert_many(artworks)
            logger.debug(f"Cached {len(artworks)} artworks", {"cache_size": len(self._recent)})
        return artworks
