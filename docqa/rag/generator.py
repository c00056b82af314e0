"""Answer generation through the Ollama chat model."""
from typing import Optional

import httpx
import structlog

from docqa import config
from docqa.errors import GenerationError
from docqa.llm_client import OllamaClient, is_transient
from docqa.rag.prompt import Prompt

logger = structlog.get_logger()


class AnswerGenerator:
    """Invokes the generative model with a composed prompt."""

    def __init__(
        self,
        client: Optional[OllamaClient] = None,
        model: str = None,
        temperature: Optional[float] = None,
    ):
        self.client = client or OllamaClient()
        self.model = model or config.CHAT_MODEL
        self.temperature = (
            temperature if temperature is not None else config.GENERATION_TEMPERATURE
        )

    async def generate(self, prompt: Prompt) -> str:
        """Generate an answer for the prompt.

        Transient transport failures are retried once by the client.

        Raises:
            GenerationError: On transport failure, an error reported by the
                model server, or an empty (refused) response
        """
        try:
            data = await self.client.chat(
                prompt.to_messages(),
                model=self.model,
                temperature=self.temperature,
            )
        except httpx.HTTPError as e:
            transient = is_transient(e)
            logger.error(
                "generation_request_failed",
                model=self.model,
                transient=transient,
                error=str(e),
            )
            raise GenerationError(f"Generation request failed: {e}", transient=transient) from e
        except ValueError as e:
            raise GenerationError(f"Malformed generation response: {e}") from e

        if not isinstance(data, dict):
            raise GenerationError("Malformed generation response: expected a JSON object")

        if data.get("error"):
            logger.error("generation_error_reported", model=self.model, error=data["error"])
            raise GenerationError(f"Model reported an error: {data['error']}")

        message = data.get("message") or {}
        content = message.get("content") if isinstance(message, dict) else None

        if content is not None and not isinstance(content, str):
            logger.error(
                "malformed_generation_response",
                model=self.model,
                content_type=type(content).__name__,
            )
            raise GenerationError("Malformed generation response: content is not text")

        answer = (content or "").strip()

        if not answer:
            logger.error("empty_generation_response", model=self.model)
            raise GenerationError("Model returned an empty response")

        return answer
