"""Tests for command handlers and the console front-end."""

import io

import pytest

from rijkschat.agent import Agent
from rijkschat.tools import ToolRegistry
from rijkschat.tools.transport import TransportError
from rijkschat.ui.console import ConsolePresenter, parse_line
from rijkschat.ui.events import (
    ArtworkDetailsEvent,
    ArtworksListEvent,
    ChatCompleteEvent,
    ChatErrorEvent,
    ChatTokenEvent,
)
from rijkschat.ui.handlers import (
    CHAT_MESSAGE,
    CLEAR_CHAT,
    GET_ARTWORK_DETAILS,
    OPEN_IMAGE,
    SEARCH_ARTWORKS,
    CommandDispatcher,
    register_handlers,
)
from tests.helpers import DETAILS_PAYLOAD, SEARCH_PAYLOAD, FakeLLM, FakeTransport, Recorder, text_envelope


def wire(registry: ToolRegistry, responses: dict, llm: FakeLLM | None = None) -> tuple[CommandDispatcher, Recorder, Agent]:
    agent = Agent(FakeTransport(responses=responses), registry, llm or FakeLLM())
    dispatcher = CommandDispatcher()
    recorder = Recorder()
    register_handlers(dispatcher, agent, recorder.sink)
    return dispatcher, recorder, agent


def test_all_commands_are_registered(registry: ToolRegistry) -> None:
    dispatcher, _, _ = wire(registry, {})

    assert set(dispatcher.commands()) == {SEARCH_ARTWORKS, GET_ARTWORK_DETAILS, OPEN_IMAGE, CHAT_MESSAGE, CLEAR_CHAT}


@pytest.mark.asyncio
async def test_unknown_command_is_reported(registry: ToolRegistry) -> None:
    dispatcher, recorder, _ = wire(registry, {})

    assert await dispatcher.dispatch("rename-artwork", "x") is False
    assert recorder.events == []


@pytest.mark.asyncio
async def test_search_emits_artwork_list(registry: ToolRegistry) -> None:
    dispatcher, recorder, _ = wire(registry, {"search_artwork": text_envelope(SEARCH_PAYLOAD)})

    await dispatcher.dispatch(SEARCH_ARTWORKS, "sunflowers")

    (event,) = recorder.events
    assert isinstance(event, ArtworksListEvent)
    assert event.type == "artworks_list"
    assert event.artworks[0]["objectNumber"] == "SK-A-1718"
    assert event.artworks[0]["imageUrl"] == "https://images.example/sunflowers.jpg"


@pytest.mark.asyncio
async def test_failed_search_emits_natural_language_error(registry: ToolRegistry) -> None:
    dispatcher, recorder, _ = wire(registry, {"search_artwork": TransportError("Unauthorized", status=401)})

    await dispatcher.dispatch(SEARCH_ARTWORKS, "sunflowers")

    (event,) = recorder.events
    assert isinstance(event, ChatErrorEvent)
    assert event.error.startswith("Sorry")


@pytest.mark.asyncio
async def test_details_emits_artwork(registry: ToolRegistry) -> None:
    dispatcher, recorder, _ = wire(registry, {"get_artwork_details": text_envelope(DETAILS_PAYLOAD)})

    await dispatcher.dispatch(GET_ARTWORK_DETAILS, "SK-A-2344")

    (event,) = recorder.events
    assert isinstance(event, ArtworkDetailsEvent)
    assert event.artwork["title"] == "The Milkmaid"


@pytest.mark.asyncio
async def test_chat_streams_tokens_then_completes(registry: ToolRegistry) -> None:
    dispatcher, recorder, _ = wire(registry, {})

    await dispatcher.dispatch(CHAT_MESSAGE, "hello")

    assert recorder.events == [
        ChatTokenEvent(content="Hello"),
        ChatTokenEvent(content=", "),
        ChatTokenEvent(content="world"),
        ChatCompleteEvent(content="Hello, world"),
    ]


@pytest.mark.asyncio
async def test_chat_failure_emits_error(registry: ToolRegistry) -> None:
    dispatcher, recorder, _ = wire(registry, {}, FakeLLM(tokens=(), error=RuntimeError("offline")))

    await dispatcher.dispatch(CHAT_MESSAGE, "hello")

    (event,) = recorder.events
    assert isinstance(event, ChatErrorEvent)


@pytest.mark.asyncio
async def test_clear_chat_resets_history(registry: ToolRegistry) -> None:
    dispatcher, _, agent = wire(registry, {})
    await dispatcher.dispatch(CHAT_MESSAGE, "hello")

    await dispatcher.dispatch(CLEAR_CHAT)

    assert len(agent.bridge.history) == 0


@pytest.mark.parametrize(
    "line, expected",
    [
        ("", None),
        ("   ", None),
        ("/search rembrandt", (SEARCH_ARTWORKS, "rembrandt")),
        ("/DETAILS SK-C-5", (GET_ARTWORK_DETAILS, "SK-C-5")),
        ("/open https://images.example/a.jpg", (OPEN_IMAGE, "https://images.example/a.jpg")),
        ("/clear", (CLEAR_CHAT, "")),
        ("/quit", ("quit", "")),
        ("/exit", ("quit", "")),
        ("/help", ("help", "")),
        ("find sunflowers", (CHAT_MESSAGE, "find sunflowers")),
        ("/unknown thing", (CHAT_MESSAGE, "/unknown thing")),
    ],
)
def test_parse_line(line: str, expected) -> None:
    assert parse_line(line) == expected


def test_presenter_renders_streamed_reply() -> None:
    out = io.StringIO()
    presenter = ConsolePresenter(out)

    presenter(ChatTokenEvent(content="Hi"))
    presenter(ChatTokenEvent(content=" there"))
    presenter(ChatCompleteEvent(content="Hi there"))
    presenter(ChatCompleteEvent(content="Sorry."))

    assert out.getvalue() == "assistant> Hi there\nassistant> Sorry.\n"


def test_presenter_renders_artworks() -> None:
    out = io.StringIO()
    presenter = ConsolePresenter(out)

    presenter(ArtworksListEvent(artworks=[{"objectNumber": "SK-C-5", "title": "The Night Watch", "artist": "Rembrandt"}]))
    presenter(ArtworksListEvent(artworks=[]))

    assert "SK-C-5" in out.getvalue()
    assert "The Night Watch - Rembrandt" in out.getvalue()
    assert "No artworks found" in out.getvalue()
