"""
Presentation Events
===================

Typed events sent from the client core to whatever renders the session
(the desktop window, or the console front-end in ``rijkschat.ui.console``).

    artworks_list    - results of a search
    artwork_details  - one artwork with full details
    chat_token       - a fragment of the assistant's reply
    chat_complete    - the full reply
    chat_error       - a natural-language error message
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Union


@dataclass(frozen=True)
class ArtworksListEvent:
    artworks: list[dict[str, Any]] = field(default_factory=list)
    type: str = "artworks_list"


@dataclass(frozen=True)
class ArtworkDetailsEvent:
    artwork: dict[str, Any]
    type: str = "artwork_details"


@dataclass(frozen=True)
class ChatTokenEvent:
    content: str
    type: str = "chat_token"


@dataclass(frozen=True)
class ChatCompleteEvent:
    content: str
    type: str = "chat_complete"


@dataclass(frozen=True)
class ChatErrorEvent:
    error: str
    type: str = "chat_error"


Event = Union[ArtworksListEvent, ArtworkDetailsEvent, ChatTokenEvent, ChatCompleteEvent, ChatErrorEvent]

# Receives events; may be a plain function or a coroutine function
EventSink = Callable[[Event], Any]
