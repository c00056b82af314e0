"""Ollama HTTP client with bounded timeouts and a single retry."""
import asyncio
from typing import Any, Dict, List, Optional

import httpx
import structlog

from docqa import config

logger = structlog.get_logger()

# One retry on top of the first attempt
MAX_ATTEMPTS = 2


def is_transient(error: Exception) -> bool:
    """Tell whether an httpx failure is worth retrying.

    Timeouts, connection problems and overloaded/failing servers (429, 5xx)
    are transient. Other HTTP status errors mean the request itself is bad.
    """
    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        return status == 429 or status >= 500
    return isinstance(error, httpx.TransportError)


class OllamaClient:
    """Async client for interacting with Ollama API."""

    def __init__(
        self,
        base_url: str = None,
        timeout: float = None,
        retry_backoff: float = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize Ollama client.

        Args:
            base_url: Ollama API base URL (defaults to config.OLLAMA_BASE_URL)
            timeout: Per-request timeout in seconds (defaults to config.REQUEST_TIMEOUT)
            retry_backoff: Seconds to wait before the retry (defaults to config.RETRY_BACKOFF)
            transport: Optional httpx transport, used to stub the server in tests
        """
        self.base_url = (base_url or config.OLLAMA_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else config.REQUEST_TIMEOUT
        self.retry_backoff = (
            retry_backoff if retry_backoff is not None else config.RETRY_BACKOFF
        )
        self.transport = transport

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST a JSON payload, retrying once on transient failures.

        Raises:
            httpx.HTTPError: When the request fails for good
        """
        url = f"{self.base_url}{path}"
        attempt = 1

        while True:
            try:
                async with httpx.AsyncClient(
                    timeout=self.timeout, transport=self.transport
                ) as client:
                    response = await client.post(url, json=payload)
                    response.raise_for_status()
                    return response.json()

            except httpx.HTTPError as e:
                transient = is_transient(e)
                logger.warning(
                    "ollama_request_failed",
                    path=path,
                    attempt=attempt,
                    transient=transient,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                if not transient or attempt >= MAX_ATTEMPTS:
                    raise

            attempt += 1
            await asyncio.sleep(self.retry_backoff)

    async def chat(
        self,
        messages: List[Dict[str, str]],
        model: str = None,
        temperature: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Send a non-streaming chat completion request to Ollama.

        Args:
            messages: List of message dicts with 'role' and 'content'
            model: Model to use (defaults to config.CHAT_MODEL)
            temperature: Sampling temperature (0.0-2.0)

        Returns:
            Response dict with 'message' containing 'content'

        Raises:
            httpx.HTTPError: On API errors after the retry budget is spent
        """
        model = model or config.CHAT_MODEL

        payload: Dict[str, Any] = {
            "model": model,
            "messages": messages,
            "stream": False,
        }

        if temperature is not None:
            payload["options"] = {"temperature": temperature}

        logger.info(
            "ollama_chat_request",
            model=model,
            message_count=len(messages),
        )

        data = await self._post("/api/chat", payload)

        message = data.get("message") if isinstance(data, dict) else None
        content = message.get("content") if isinstance(message, dict) else None

        logger.info(
            "ollama_chat_response",
            model=model,
            response_length=len(content) if isinstance(content, str) else 0,
        )

        return data

    async def embed(self, inputs: List[str], model: str = None) -> Dict[str, Any]:
        """Generate embeddings for a batch of texts.

        Args:
            inputs: Texts to embed
            model: Model to use (defaults to config.EMBEDDING_MODEL)

        Returns:
            Response dict with 'embeddings', one vector per input in order

        Raises:
            httpx.HTTPError: On API errors after the retry budget is spent
        """
        model = model or config.EMBEDDING_MODEL

        logger.debug("ollama_embedding_request", model=model, input_count=len(inputs))

        data = await self._post("/api/embed", {"model": model, "input": inputs})

        vectors = data.get("embeddings") if isinstance(data, dict) else None

        logger.debug(
            "ollama_embedding_response",
            model=model,
            vector_count=len(vectors) if isinstance(vectors, list) else 0,
        )

        return data

    async def list_models(self) -> List[str]:
        """List all available Ollama models.

        Raises:
            httpx.HTTPError: On API errors
        """
        try:
            async with httpx.AsyncClient(timeout=5.0, transport=self.transport) as client:
                response = await client.get(f"{self.base_url}/api/tags")
                response.raise_for_status()
                data = response.json()
                return [m["name"] for m in data.get("models", [])]
        except httpx.HTTPError as e:
            logger.error("ollama_list_models_error", error=str(e))
            raise
