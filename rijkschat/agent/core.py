"""
Agent Core
==========

The Conversation Bridge and the Agent facade that wires it up.

Chat flow for one message:

    User Message
         │
         ▼
    record user turn in history
         │
         ▼
    Direct action? ──── yes ───► action summary (+ fetched details)
         │ no
         ▼
    Context Assembler ── degraded ──► apology is the reply (model skipped)
         │
         ▼
    Combined prompt:
        System: <framing>
        Action: <summary>        (if any)
        Context: <context>       (if any)
        User: <message>
         │
         ▼
    Model backend stream ──► on_token ... on_complete / on_error
         │
         ▼
    record assistant turn (only when the stream completed)

One request at a time: nothing guards against two overlapping ``send``
calls on the same bridge, and their history updates would interleave.
Streams cannot be cancelled once started.
"""

import webbrowser
from typing import Any

from rijkschat.agent.actions import ActionResult, DirectActionExtractor
from rijkschat.agent.context import ContextAssembler, ContextResult
from rijkschat.agent.intent import IntentMatcher
from rijkschat.artwork import Artwork, artwork_from_details, artworks_from_search
from rijkschat.llm.base import LLMService, StreamCallbacks, StreamError, emit
from rijkschat.memory import ConversationHistory, RecentResults
from rijkschat.tools import ToolRegistry
from rijkschat.tools.invoker import ToolInvoker
from rijkschat.tools.transport import ToolTransport
from rijkschat.utils.logger import Logger

logger = Logger("Agent")

SYSTEM_FRAMING = (
    "You are a knowledgeable guide to the Rijksmuseum collection in Amsterdam; "
    "use any action or context below when answering the user."
)

SEARCH_PAGE_SIZE = 10


def build_prompt(
    message: str,
    action_summary: str | None = None,
    context: str | None = None
) -> str:
    """
    Combine framing, action summary, context and message into one prompt.

    Each part sits on its own labeled line; absent parts are left out.
    """
    lines = [f"System: {SYSTEM_FRAMING}"]
    if action_summary:
        lines.append(f"Action: {action_summary}")
    if context:
        lines.append(f"Context: {context}")
    lines.append(f"User: {message}")
    return "\n".join(lines)


class ConversationBridge:
    """
    Owns the session's turn history and drives streamed replies.

    Example:
        bridge = ConversationBridge(llm, assembler, actions)

        await bridge.send(
            "find sunflowers",
            StreamCallbacks(
                on_token=lambda t: print(t, end=""),
                on_complete=lambda full: print(),
                on_error=lambda e: print(f"Error: {e}"),
            ),
        )
    """

    def __init__(
        self,
        llm: LLMService,
        assembler: ContextAssembler,
        actions: DirectActionExtractor | None = None,
        history: ConversationHistory | None = None
    ):
        self.llm = llm
        self.assembler = assembler
        self.actions = actions
        self._history = history if history is not None else ConversationHistory()

    @property
    def history(self) -> ConversationHistory:
        return self._history

    async def send(self, message: str, callbacks: StreamCallbacks) -> str | None:
        """
        Process a user message and stream the reply.

        Args:
            message: The user's message
            callbacks: Token, completion and error receivers

        Returns:
            The full reply, or None if the model call failed
        """
        logger.info(f"Processing message: {message[:50]}")
        self._history.add_user(message)

        action = await self._direct_action(message)

        context: ContextResult | None = None
        if action is None:
            context = await self.assembler.build_context(message)

        if context is not None and context.degraded:
            logger.warning(f"Tool {context.tool_name} failed, replying with apology")
            self._history.add_assistant(context.text)
            await emit(callbacks.on_complete, context.text)
            return context.text

        prompt = build_prompt(
            message,
            action_summary=action.summary if action else None,
            context=(action.context if action else None) or (context.text if context else None),
        )
        logger.debug("Combined prompt", {"prompt": prompt})

        try:
            reply = await self.llm.stream_chat(
                prompt,
                StreamCallbacks(on_token=callbacks.on_token),
                history=self._history.to_messages(exclude_last=True),
            )
        except Exception as e:
            error = e if isinstance(e, StreamError) else StreamError(str(e))
            logger.error("Model stream failed", error)
            await emit(callbacks.on_error, error)
            return None

        self._history.add_assistant(reply)
        logger.info(f"Generated response ({len(reply)} chars)")
        await emit(callbacks.on_complete, reply)
        return reply

    async def _direct_action(self, message: str) -> ActionResult | None:
        if self.actions is None:
            return None
        try:
            return await self.actions.try_direct_action(message)
        except Exception as e:
            logger.error("Direct action failed", e)
            return None

    def reset(self) -> None:
        """Clear the turn history; recently seen artworks are kept."""
        self._history.clear()
        logger.info("Cleared conversation history")


class Agent:
    """
    Facade over the tool and chat components of one session.

    Example:
        agent = Agent(transport, registry, llm)

        artworks = await agent.search_artworks("rembrandt")
        details = await agent.get_artwork_details("SK-C-5")
        await agent.send("tell me about the night watch", callbacks)
        agent.clear_conversation()
    """

    def __init__(
        self,
        transport: ToolTransport,
        registry: ToolRegistry,
        llm: LLMService,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        matcher: IntentMatcher | None = None
    ):
        self.transport = transport
        self.registry = registry
        self.llm = llm

        self.invoker = ToolInvoker(transport, max_retries=max_retries, retry_delay=retry_delay)
        self.assembler = ContextAssembler(registry, self.invoker, matcher=matcher)
        self.actions = DirectActionExtractor(
            self.assembler.recent,
            open_image=self.open_image,
            fetch_details=self._fetch_details,
        )
        self.bridge = ConversationBridge(llm, self.assembler, self.actions)

        logger.info(f"Agent initialized with {len(registry)} tools and model {llm.model}")

    @property
    def recent(self) -> RecentResults:
        return self.assembler.recent

    @property
    def model(self) -> str:
        return self.llm.model

    async def search_artworks(self, query: str) -> list[Artwork]:
        """
        Search the collection directly (the search box, not the chat).

        Raises:
            ToolInvocationError: If the search fails
        """
        result = await self.assembler.run_tool(
            "search_artwork",
            {"query": query, "pageSize": SEARCH_PAGE_SIZE, "imgonly": True, "s": "relevance"},
        )
        return artworks_from_search(result)

    async def get_artwork_details(self, object_number: str) -> Artwork | None:
        """
        Fetch one artwork's details.

        Raises:
            ToolInvocationError: If the lookup fails
        """
        result = await self._fetch_details(object_number)
        return artwork_from_details(result)

    async def _fetch_details(self, object_number: str) -> Any:
        return await self.assembler.run_tool("get_artwork_details", {"objectNumber": object_number})

    async def open_image(self, image_url: str) -> Any:
        """
        Open an image URL in the user's browser.

        Uses the provider's open_image_in_browser tool when it is available,
        otherwise the local default browser.
        """
        if self.registry.lookup("open_image_in_browser") is not None:
            return await self.invoker.invoke("open_image_in_browser", {"imageUrl": image_url})

        opened = webbrowser.open(image_url)
        logger.info(f"Opened image locally: {image_url}")
        return {"success": opened}

    async def send(self, message: str, callbacks: StreamCallbacks) -> str | None:
        return await self.bridge.send(message, callbacks)

    def clear_conversation(self) -> None:
        """Reset the chat history in the bridge and the backend."""
        self.bridge.reset()
        self.llm.clear_history()
