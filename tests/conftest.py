"""Pytest configuration and fixtures.

Provides: a stubbed Ollama server (httpx.MockTransport), PDF builders,
and pre-wired clients, gateways and services.
"""
import hashlib
import json
import re
from typing import Any, Callable, List, Optional

import fitz
import httpx
import pytest

from docqa.llm_client import OllamaClient
from docqa.rag.embeddings import EmbeddingGateway
from docqa.rag.generator import AnswerGenerator
from docqa.service import DocumentQA

BASE_URL = "http://ollama.test"
EMBEDDING_DIM = 256

TOKEN_PATTERN = re.compile(r"[a-z0-9]+")


def fake_embedding(text: str) -> List[float]:
    """Deterministic hashed bag-of-words vector."""
    vector = [0.0] * EMBEDDING_DIM
    for token in TOKEN_PATTERN.findall(text.lower()):
        slot = int(hashlib.md5(token.encode()).hexdigest(), 16) % EMBEDDING_DIM
        vector[slot] += 1.0
    return vector


class FakeOllama:
    """In-process stand-in for the Ollama HTTP API.

    ``failures`` is consumed one item per request before normal handling:
    an int becomes an error response with that status, an exception is raised.
    """

    def __init__(self):
        self.requests: List[tuple] = []
        self.failures: List[Any] = []
        self.chat_reply: Any = {"role": "assistant", "content": "  The answer is 42.  "}
        self.chat_extra: dict = {}
        self.embed_override: Optional[Callable[[List[str]], list]] = None
        self.models = ["nomic-embed-text:latest", "deepseek-coder:6.7b"]

    def calls(self, path: str) -> List[Any]:
        return [payload for p, payload in self.requests if p == path]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        payload = json.loads(request.content) if request.content else None
        self.requests.append((path, payload))

        if self.failures:
            failure = self.failures.pop(0)
            if isinstance(failure, Exception):
                raise failure
            return httpx.Response(failure, json={"error": f"status {failure}"})

        if path == "/api/embed":
            inputs = payload["input"]
            if self.embed_override is not None:
                embeddings = self.embed_override(inputs)
            else:
                embeddings = [fake_embedding(text) for text in inputs]
            return httpx.Response(200, json={"model": payload["model"], "embeddings": embeddings})

        if path == "/api/chat":
            body = {"model": payload["model"], "message": self.chat_reply, "done": True}
            body.update(self.chat_extra)
            return httpx.Response(200, json=body)

        if path == "/api/tags":
            return httpx.Response(200, json={"models": [{"name": m} for m in self.models]})

        return httpx.Response(404, json={"error": "not found"})


@pytest.fixture
def fake_ollama() -> FakeOllama:
    return FakeOllama()


@pytest.fixture
def ollama_client(fake_ollama: FakeOllama) -> OllamaClient:
    """Ollama client wired to the fake server, without retry backoff."""
    return OllamaClient(
        base_url=BASE_URL,
        timeout=5.0,
        retry_backoff=0.0,
        transport=httpx.MockTransport(fake_ollama),
    )


@pytest.fixture
def gateway(ollama_client: OllamaClient) -> EmbeddingGateway:
    return EmbeddingGateway(client=ollama_client, model="nomic-embed-text", batch_size=8)


@pytest.fixture
def generator(ollama_client: OllamaClient) -> AnswerGenerator:
    return AnswerGenerator(client=ollama_client, model="deepseek-coder:6.7b", temperature=0.0)


@pytest.fixture
def make_pdf() -> Callable[..., bytes]:
    """Build a PDF with one page per string (each line drawn separately)."""

    def _make_pdf(*pages: str) -> bytes:
        doc = fitz.open()
        for text in pages:
            page = doc.new_page()
            if text:
                page.insert_text((72, 72), text, fontsize=11)
        data = doc.tobytes()
        doc.close()
        return data

    return _make_pdf


@pytest.fixture
async def qa(ollama_client: OllamaClient, gateway, generator):
    """Open service over the fake server, torn down after the test."""
    service = DocumentQA(
        client=ollama_client,
        gateway=gateway,
        generator=generator,
        dimension=EMBEDDING_DIM,
        max_chunk_chars=60,
        top_k=3,
    )
    await service.open()
    yield service
    await service.close()
