"""
Console Front-End
=================

A terminal stand-in for the desktop window: renders events and turns
typed lines into commands.

    /search <query>     search the collection
    /details <number>   show one artwork, e.g. /details SK-C-5
    /open <url>         open an image in the browser
    /clear              forget the conversation
    /help               list commands
    /quit               exit

Anything else is sent to the chat.
"""

import asyncio
import sys
from typing import TextIO

from rijkschat.ui.events import (
    ArtworkDetailsEvent,
    ArtworksListEvent,
    ChatCompleteEvent,
    ChatErrorEvent,
    ChatTokenEvent,
    Event,
)
from rijkschat.ui.handlers import (
    CHAT_MESSAGE,
    CLEAR_CHAT,
    GET_ARTWORK_DETAILS,
    OPEN_IMAGE,
    SEARCH_ARTWORKS,
    CommandDispatcher,
)

HELP_TEXT = """Commands:
  /search <query>     Search the Rijksmuseum collection
  /details <number>   Show an artwork's details (e.g. /details SK-C-5)
  /open <url>         Open an image in your browser
  /clear              Clear the conversation
  /quit               Exit
Anything else is sent to the assistant."""

SLASH_COMMANDS = {
    "/search": SEARCH_ARTWORKS,
    "/details": GET_ARTWORK_DETAILS,
    "/open": OPEN_IMAGE,
    "/clear": CLEAR_CHAT,
}


class ConsolePresenter:
    """Writes events to a text stream."""

    def __init__(self, out: TextIO | None = None):
        self.out = out or sys.stdout
        self._streaming = False

    def __call__(self, event: Event) -> None:
        if isinstance(event, ChatTokenEvent):
            if not self._streaming:
                self.out.write("assistant> ")
                self._streaming = True
            self.out.write(event.content)
        elif isinstance(event, ChatCompleteEvent):
            if not self._streaming:
                # Replies that were not streamed (e.g. an apology)
                self.out.write(f"assistant> {event.content}")
            self.out.write("\n")
            self._streaming = False
        elif isinstance(event, ChatErrorEvent):
            if self._streaming:
                self.out.write("\n")
                self._streaming = False
            self.out.write(f"error> {event.error}\n")
        elif isinstance(event, ArtworksListEvent):
            self._render_list(event)
        elif isinstance(event, ArtworkDetailsEvent):
            self._render_details(event)
        self.out.flush()

    def _render_list(self, event: ArtworksListEvent) -> None:
        if not event.artworks:
            self.out.write("No artworks found\n")
            return
        for artwork in event.artworks:
            self.out.write(f"  {artwork['objectNumber']:<16} {artwork['title']} - {artwork['artist']}\n")

    def _render_details(self, event: ArtworkDetailsEvent) -> None:
        artwork = event.artwork
        self.out.write(f"{artwork['title']}\n  by {artwork['artist']}\n")
        for label, key in (("Date", "date"), ("Description", "description"), ("Image", "imageUrl")):
            if artwork.get(key):
                self.out.write(f"  {label}: {artwork[key]}\n")
        for label, key in (("Materials", "materials"), ("Dimensions", "dimensions")):
            if artwork.get(key):
                self.out.write(f"  {label}: {', '.join(artwork[key])}\n")


def parse_line(line: str) -> tuple[str, str] | None:
    """
    Turn an input line into (command, payload).

    Returns:
        None for blank lines; ("quit", "") or ("help", "") for those commands
    """
    text = line.strip()
    if not text:
        return None

    if text.startswith("/"):
        head, _, rest = text.partition(" ")
        head = head.lower()
        if head in ("/quit", "/exit"):
            return ("quit", "")
        if head == "/help":
            return ("help", "")
        if head in SLASH_COMMANDS:
            return (SLASH_COMMANDS[head], rest.strip())

    return (CHAT_MESSAGE, text)


async def run_console(dispatcher: CommandDispatcher, presenter: ConsolePresenter) -> None:
    """Read lines from stdin until /quit or end of input."""
    presenter.out.write("Rijksmuseum chat. Type /help for commands.\n")

    while True:
        try:
            line = await asyncio.to_thread(input, "you> ")
        except EOFError:
            break

        parsed = parse_line(line)
        if parsed is None:
            continue

        command, payload = parsed
        if command == "quit":
            break
        if command == "help":
            presenter.out.write(HELP_TEXT + "\n")
            continue

        await dispatcher.dispatch(command, payload)
