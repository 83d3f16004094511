"""Tests for the model port and the Ollama backend."""

import json

import httpx
import pytest

from rijkschat.llm import StreamCallbacks, StreamError, create_llm_service
from rijkschat.llm.ollama import OllamaService
from rijkschat.utils.config import LLMConfig
from tests.helpers import FakeLLM, Recorder


def ollama_with(handler) -> OllamaService:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://ollama.test")
    return OllamaService(model="mistral", client=client, max_tokens=256)


def ndjson(*objects) -> bytes:
    return "\n".join(obj if isinstance(obj, str) else json.dumps(obj) for obj in objects).encode()


@pytest.mark.asyncio
async def test_ollama_streams_tokens_and_skips_bad_lines() -> None:
    requests: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(json.loads(request.content))
        return httpx.Response(200, content=ndjson(
            {"message": {"role": "assistant", "content": "The"}, "done": False},
            "not json at all",
            {"message": {"role": "assistant", "content": " Night Watch"}, "done": False},
            {"done": True},
        ))

    llm = ollama_with(handler)
    recorder = Recorder()

    reply = await llm.stream_chat("Who painted it?", StreamCallbacks(on_token=recorder.on_token, on_complete=recorder.on_complete))

    assert reply == "The Night Watch"
    assert recorder.tokens == ["The", " Night Watch"]
    assert recorder.completed == ["The Night Watch"]
    assert requests[0]["model"] == "mistral"
    assert requests[0]["stream"] is True
    assert requests[0]["options"] == {"num_predict": 256}
    assert llm.history == [
        {"role": "user", "content": "Who painted it?"},
        {"role": "assistant", "content": "The Night Watch"},
    ]


@pytest.mark.asyncio
async def test_ollama_http_error_reports_and_raises() -> None:
    llm = ollama_with(lambda request: httpx.Response(500, content=b"boom"))
    recorder = Recorder()
    callbacks = StreamCallbacks(on_token=recorder.on_token, on_complete=recorder.on_complete, on_error=recorder.on_error)

    with pytest.raises(StreamError, match="500"):
        await llm.stream_chat("hello", callbacks)

    assert recorder.tokens == []
    assert recorder.completed == []
    assert len(recorder.errors) == 1


@pytest.mark.asyncio
async def test_ollama_in_stream_error_raises() -> None:
    llm = ollama_with(lambda request: httpx.Response(200, content=ndjson({"error": "model not found"})))

    with pytest.raises(StreamError, match="model not found"):
        await llm.stream_chat("hello", StreamCallbacks(on_token=lambda token: None))


@pytest.mark.asyncio
async def test_ollama_chat_returns_full_reply() -> None:
    llm = ollama_with(lambda request: httpx.Response(200, json={"message": {"role": "assistant", "content": "Rembrandt"}}))

    assert await llm.chat("Who painted The Night Watch?") == "Rembrandt"


@pytest.mark.asyncio
async def test_context_is_prepended_to_the_user_message() -> None:
    llm = FakeLLM()

    await llm.chat("Who painted it?", context="Title: The Night Watch")

    assert llm.last_prompt == "Context: Title: The Night Watch\n\nUser: Who painted it?"
    assert llm.history[0] == {"role": "user", "content": "Who painted it?"}


@pytest.mark.asyncio
async def test_explicit_history_bypasses_backend_history() -> None:
    llm = FakeLLM(tokens=("ok",))
    prior = [{"role": "user", "content": "earlier"}, {"role": "assistant", "content": "sure"}]

    await llm.stream_chat("now", StreamCallbacks(on_token=lambda token: None), history=prior)

    assert llm.requests[-1] == prior + [{"role": "user", "content": "now"}]
    assert llm.history == []


@pytest.mark.asyncio
async def test_async_callbacks_are_awaited() -> None:
    llm = FakeLLM(tokens=("a", "b"))
    seen: list[str] = []

    async def on_token(token: str) -> None:
        seen.append(token)

    await llm.stream_chat("hi", StreamCallbacks(on_token=on_token))

    assert seen == ["a", "b"]


@pytest.mark.asyncio
async def test_clear_history() -> None:
    llm = FakeLLM()
    await llm.chat("hi")

    llm.clear_history()

    assert llm.history == []


def test_factory_builds_ollama() -> None:
    service = create_llm_service(LLMConfig(
        provider="ollama", model="llama3", api_key=None, base_url="http://localhost:11434/", max_tokens=512,
    ))

    assert isinstance(service, OllamaService)
    assert service.model == "llama3"
    assert service.base_url == "http://localhost:11434"


@pytest.mark.parametrize("provider", ["claude", "openai"])
def test_factory_requires_hosted_credentials(provider: str) -> None:
    with pytest.raises(ValueError, match="API_KEY"):
        create_llm_service(LLMConfig(provider=provider, model="m", api_key=None, base_url=None, max_tokens=512))


def test_factory_rejects_unknown_provider() -> None:
    with pytest.raises(ValueError, match="Unknown LLM provider"):
        create_llm_service(LLMConfig(provider="llamafile", model="m", api_key=None, base_url=None, max_tokens=512))
