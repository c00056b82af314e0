"""Tests for the Ollama client: payloads, retry policy and error classification."""
import httpx
import pytest

from docqa.llm_client import OllamaClient, is_transient


def _status_error(status: int) -> httpx.HTTPStatusError:
    request = httpx.Request("POST", "http://ollama.test/api/chat")
    response = httpx.Response(status, request=request)
    return httpx.HTTPStatusError("failed", request=request, response=response)


@pytest.mark.parametrize(
    "error, expected",
    [
        (httpx.ConnectError("refused"), True),
        (httpx.ReadTimeout("slow"), True),
        (_status_error(500), True),
        (_status_error(503), True),
        (_status_error(429), True),
        (_status_error(400), False),
        (_status_error(404), False),
    ],
)
def test_is_transient(error, expected):
    assert is_transient(error) is expected


async def test_chat_sends_non_streaming_payload(ollama_client, fake_ollama):
    data = await ollama_client.chat(
        [{"role": "user", "content": "hi"}], model="m", temperature=0.0
    )

    assert data["message"]["content"].strip() == "The answer is 42."
    (payload,) = fake_ollama.calls("/api/chat")
    assert payload == {
        "model": "m",
        "messages": [{"role": "user", "content": "hi"}],
        "stream": False,
        "options": {"temperature": 0.0},
    }


async def test_embed_posts_batch(ollama_client, fake_ollama):
    data = await ollama_client.embed(["a", "b"], model="e")

    assert len(data["embeddings"]) == 2
    assert fake_ollama.calls("/api/embed") == [{"model": "e", "input": ["a", "b"]}]


async def test_retries_once_on_transient_failure(ollama_client, fake_ollama):
    fake_ollama.failures = [503]

    data = await ollama_client.embed(["a"])

    assert len(data["embeddings"]) == 1
    assert len(fake_ollama.calls("/api/embed")) == 2


async def test_gives_up_after_one_retry(ollama_client, fake_ollama):
    fake_ollama.failures = [httpx.ConnectError("down"), httpx.ConnectError("down")]

    with pytest.raises(httpx.ConnectError):
        await ollama_client.embed(["a"])

    assert len(fake_ollama.calls("/api/embed")) == 2


async def test_does_not_retry_client_errors(ollama_client, fake_ollama):
    fake_ollama.failures = [400]

    with pytest.raises(httpx.HTTPStatusError):
        await ollama_client.chat([{"role": "user", "content": "hi"}])

    assert len(fake_ollama.calls("/api/chat")) == 1


async def test_list_models(ollama_client):
    assert await ollama_client.list_models() == [
        "nomic-embed-text:latest",
        "deepseek-coder:6.7b",
    ]


def test_strips_trailing_slash_from_base_url():
    assert OllamaClient(base_url="http://host:11434/").base_url == "http://host:11434"
