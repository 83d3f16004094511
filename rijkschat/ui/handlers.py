"""
Command Handlers
================

Routes commands from the presentation layer to the agent and reports the
outcome back as events.

Commands:
- search-artworks: query string          -> artworks_list
- get-artwork-details: object number     -> artwork_details
- open-image-in-browser: image URL       -> (no event)
- chat-message: user message             -> chat_token* then chat_complete | chat_error
- clear-chat                             -> (no event)

Error Handling:
    Handlers never raise to the presentation layer. Failures are logged
    and, where the user is waiting on a reply, reported as a chat_error
    event with a plain-language message.
"""

from typing import TYPE_CHECKING, Any, Awaitable, Callable

from rijkschat.llm.base import StreamCallbacks, emit
from rijkschat.ui.events import (
    ArtworkDetailsEvent,
    ArtworksListEvent,
    ChatCompleteEvent,
    ChatErrorEvent,
    ChatTokenEvent,
    EventSink,
)
from rijkschat.utils.logger import Logger

if TYPE_CHECKING:
    from rijkschat.agent import Agent

logger = Logger("Handlers")

SEARCH_ARTWORKS = "search-artworks"
GET_ARTWORK_DETAILS = "get-artwork-details"
OPEN_IMAGE = "open-image-in-browser"
CHAT_MESSAGE = "chat-message"
CLEAR_CHAT = "clear-chat"

CommandHandler = Callable[[Any], Awaitable[None]]


class CommandDispatcher:
    """
    Maps command names to async handlers.

    Example:
        dispatcher = CommandDispatcher()

        @dispatcher.command("clear-chat")
        async def clear(_payload):
            ...

        await dispatcher.dispatch("clear-chat")
    """

    def __init__(self):
        self._handlers: dict[str, CommandHandler] = {}

    def command(self, name: str) -> Callable[[CommandHandler], CommandHandler]:
        def decorator(handler: CommandHandler) -> CommandHandler:
            self._handlers[name] = handler
            return handler
        return decorator

    async def dispatch(self, name: str, payload: Any = None) -> bool:
        """
        Run the handler for a command.

        Returns:
            False if no handler is registered for name
        """
        handler = self._handlers.get(name)
        if handler is None:
            logger.warning(f"Unknown command: {name}")
            return False
        await handler(payload)
        return True

    def commands(self) -> list[str]:
        return list(self._handlers)


def register_handlers(dispatcher: CommandDispatcher, agent: "Agent", sink: EventSink) -> None:
    """
    Register all command handlers.

    Args:
        dispatcher: Dispatcher receiving presentation commands
        agent: The session's agent
        sink: Receiver for events going back to the presentation layer
    """

    @dispatcher.command(SEARCH_ARTWORKS)
    async def _search(query: str) -> None:
        query = (query or "").strip()
        if not query:
            return
        try:
            artworks = await agent.search_artworks(query)
        except Exception as e:
            logger.error("Failed to search artworks", e)
            await emit(sink, ChatErrorEvent(error="Sorry, the artwork search failed. Please try again."))
            return
        await emit(sink, ArtworksListEvent(artworks=[a.to_dict() for a in artworks]))

    @dispatcher.command(GET_ARTWORK_DETAILS)
    async def _details(object_number: str) -> None:
        try:
            artwork = await agent.get_artwork_details(object_number)
        except Exception as e:
            logger.error("Failed to get artwork details", e)
            await emit(sink, ChatErrorEvent(error="Sorry, I couldn't load the details of that artwork."))
            return
        if artwork is None:
            await emit(sink, ChatErrorEvent(error=f"No artwork found with object number {object_number}."))
            return
        await emit(sink, ArtworkDetailsEvent(artwork=artwork.to_dict()))

    @dispatcher.command(OPEN_IMAGE)
    async def _open_image(image_url: str) -> None:
        try:
            await agent.open_image(image_url)
        except Exception as e:
            logger.error("Failed to open image in browser", e)

    @dispatcher.command(CHAT_MESSAGE)
    async def _chat(message: str) -> None:
        logger.info(f"Received chat message: {(message or '')[:50]}")
        callbacks = StreamCallbacks(
            on_token=lambda token: emit(sink, ChatTokenEvent(content=token)),
            on_complete=lambda full: emit(sink, ChatCompleteEvent(content=full)),
            on_error=lambda error: emit(sink, ChatErrorEvent(error=str(error))),
        )
        try:
            await agent.send(message, callbacks)
        except Exception as e:
            logger.error("Error processing message", e)
            await emit(sink, ChatErrorEvent(error="Sorry, I encountered an error processing your message."))

    @dispatcher.command(CLEAR_CHAT)
    async def _clear(_payload: Any = None) -> None:
        agent.clear_conversation()

    logger.info(f"Registered {len(dispatcher.commands())} command handlers")
