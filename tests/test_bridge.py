"""Tests for the Conversation Bridge and the Agent facade."""

import webbrowser

import pytest

from rijkschat.agent import Agent, ContextAssembler, ConversationBridge, DirectActionExtractor
from rijkschat.agent.context import APOLOGY_MESSAGE
from rijkschat.agent.core import SYSTEM_FRAMING, build_prompt
from rijkschat.llm.base import StreamCallbacks, StreamError
from rijkschat.tools import ToolRegistry
from rijkschat.tools.invoker import ToolInvocationError, ToolInvoker
from rijkschat.tools.transport import TransportError
from tests.helpers import (
    DETAILS_PAYLOAD,
    SEARCH_PAYLOAD,
    FakeLLM,
    FakeTransport,
    Recorder,
    no_sleep,
    text_envelope,
)


def callbacks_for(recorder: Recorder) -> StreamCallbacks:
    return StreamCallbacks(on_token=recorder.on_token, on_complete=recorder.on_complete, on_error=recorder.on_error)


def make_bridge(registry: ToolRegistry, llm: FakeLLM, responses: dict | None = None) -> ConversationBridge:
    transport = FakeTransport(responses=responses or {})
    assembler = ContextAssembler(registry, ToolInvoker(transport, sleep=no_sleep))
    return ConversationBridge(llm, assembler)


def test_prompt_without_action_or_context_has_two_lines() -> None:
    assert build_prompt("hello") == f"System: {SYSTEM_FRAMING}\nUser: hello"


def test_prompt_lists_parts_in_order() -> None:
    prompt = build_prompt("what next?", action_summary="Opened it.", context="Title: X")

    assert prompt.splitlines()[1:] == ["Action: Opened it.", "Context: Title: X", "User: what next?"]


@pytest.mark.asyncio
async def test_successful_reply_streams_and_records_history(registry: ToolRegistry) -> None:
    llm = FakeLLM()
    bridge = make_bridge(registry, llm)
    recorder = Recorder()

    reply = await bridge.send("hello", callbacks_for(recorder))

    assert reply == "Hello, world"
    assert recorder.tokens == ["Hello", ", ", "world"]
    assert recorder.completed == ["Hello, world"]
    assert recorder.errors == []
    assert [(t.role, t.content) for t in bridge.history.turns] == [
        ("user", "hello"),
        ("assistant", "Hello, world"),
    ]
    assert llm.last_prompt == build_prompt("hello")


@pytest.mark.asyncio
async def test_tool_context_is_included_in_prompt(registry: ToolRegistry) -> None:
    llm = FakeLLM()
    bridge = make_bridge(registry, llm, {"search_artwork": text_envelope(SEARCH_PAYLOAD)})

    await bridge.send("find sunflowers", callbacks_for(Recorder()))

    assert "\nContext: Found 2 artworks" in llm.last_prompt
    assert llm.last_prompt.endswith("User: find sunflowers")


@pytest.mark.asyncio
async def test_prior_turns_are_sent_as_history(registry: ToolRegistry) -> None:
    llm = FakeLLM(tokens=("ok",))
    bridge = make_bridge(registry, llm)

    await bridge.send("first", callbacks_for(Recorder()))
    await bridge.send("second", callbacks_for(Recorder()))

    assert llm.requests[-1][:-1] == [
        {"role": "user", "content": "first"},
        {"role": "assistant", "content": "ok"},
    ]
    assert llm.history == []


@pytest.mark.asyncio
async def test_stream_failure_keeps_only_user_turn(registry: ToolRegistry) -> None:
    llm = FakeLLM(tokens=("partial",), error=RuntimeError("connection reset"))
    bridge = make_bridge(registry, llm)
    recorder = Recorder()

    reply = await bridge.send("hello", callbacks_for(recorder))

    assert reply is None
    assert recorder.completed == []
    assert len(recorder.errors) == 1
    assert isinstance(recorder.errors[0], StreamError)
    assert [t.role for t in bridge.history.turns] == ["user"]


@pytest.mark.asyncio
async def test_degraded_context_replies_with_apology_without_model(registry: ToolRegistry) -> None:
    llm = FakeLLM()
    bridge = make_bridge(registry, llm, {"search_artwork": TransportError("Bad request", status=400)})
    recorder = Recorder()

    reply = await bridge.send("find sunflowers", callbacks_for(recorder))

    assert reply == APOLOGY_MESSAGE
    assert llm.requests == []
    assert recorder.tokens == []
    assert recorder.completed == [APOLOGY_MESSAGE]
    assert [(t.role, t.content) for t in bridge.history.turns] == [
        ("user", "find sunflowers"),
        ("assistant", APOLOGY_MESSAGE),
    ]


@pytest.mark.asyncio
async def test_direct_action_skips_intent_matching(registry: ToolRegistry) -> None:
    llm = FakeLLM()
    transport = FakeTransport(responses={"get_artwork_details": text_envelope(DETAILS_PAYLOAD)})
    assembler = ContextAssembler(registry, ToolInvoker(transport, sleep=no_sleep))
    opened: list[str] = []

    async def open_image(url: str) -> None:
        opened.append(url)

    async def fetch_details(object_number: str):
        return await assembler.run_tool("get_artwork_details", {"objectNumber": object_number})

    assembler.remember("search_artwork", SEARCH_PAYLOAD)
    bridge = ConversationBridge(llm, assembler, DirectActionExtractor(assembler.recent, open_image, fetch_details))

    await bridge.send("show me the image of sunflowers", callbacks_for(Recorder()))

    assert opened == ["https://images.example/sunflowers.jpg"]
    assert transport.calls == []
    assert "\nAction: Opened the image of \"Sunflowers in a Vase\"" in llm.last_prompt
    assert "Context:" not in llm.last_prompt


@pytest.mark.asyncio
async def test_reset_clears_history_but_not_recent_results(registry: ToolRegistry) -> None:
    llm = FakeLLM()
    bridge = make_bridge(registry, llm, {"search_artwork": text_envelope(SEARCH_PAYLOAD)})

    await bridge.send("find sunflowers", callbacks_for(Recorder()))
    bridge.reset()

    assert len(bridge.history) == 0
    assert len(bridge.assembler.recent) == 2


@pytest.mark.asyncio
async def test_agent_search_and_details(registry: ToolRegistry) -> None:
    transport = FakeTransport(responses={
        "search_artwork": text_envelope(SEARCH_PAYLOAD),
        "get_artwork_details": text_envelope(DETAILS_PAYLOAD),
    })
    agent = Agent(transport, registry, FakeLLM())

    artworks = await agent.search_artworks("vermeer")
    details = await agent.get_artwork_details("SK-A-2344")

    assert [a.title for a in artworks] == ["Sunflowers in a Vase", "The Milkmaid"]
    assert transport.calls[0] == ("search_artwork", {"query": "vermeer", "pageSize": 10, "imgonly": True, "s": "relevance"})
    assert details.description == "A maidservant pours milk."
    assert agent.recent.items()[0].object_number == "SK-A-2344"


@pytest.mark.asyncio
async def test_agent_search_failure_raises(registry: ToolRegistry) -> None:
    transport = FakeTransport(responses={"search_artwork": TransportError("Forbidden", status=403)})
    agent = Agent(transport, registry, FakeLLM())

    with pytest.raises(ToolInvocationError):
        await agent.search_artworks("vermeer")


@pytest.mark.asyncio
async def test_agent_opens_images_through_provider_tool(registry: ToolRegistry) -> None:
    transport = FakeTransport(responses={"open_image_in_browser": text_envelope({"success": True})})
    agent = Agent(transport, registry, FakeLLM())

    await agent.open_image("https://images.example/a.jpg")

    assert transport.calls == [("open_image_in_browser", {"imageUrl": "https://images.example/a.jpg"})]


@pytest.mark.asyncio
async def test_agent_opens_images_locally_without_provider_tool(monkeypatch: pytest.MonkeyPatch) -> None:
    opened: list[str] = []
    monkeypatch.setattr(webbrowser, "open", lambda url: opened.append(url) or True)
    transport = FakeTransport()
    agent = Agent(transport, ToolRegistry(), FakeLLM())

    result = await agent.open_image("https://images.example/a.jpg")

    assert opened == ["https://images.example/a.jpg"]
    assert result == {"success": True}
    assert transport.calls == []


@pytest.mark.asyncio
async def test_clear_conversation_resets_bridge_and_backend(registry: ToolRegistry) -> None:
    llm = FakeLLM()
    agent = Agent(FakeTransport(), registry, llm)
    await agent.send("hello", callbacks_for(Recorder()))
    await llm.chat("direct use")

    agent.clear_conversation()

    assert len(agent.bridge.history) == 0
    assert llm.history == []
