"""Prompt assembly for grounded question answering."""
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple, Union

import structlog

from docqa import config
from docqa.rag.chunker import Passage
from docqa.rag.store_faiss import RetrievalResult

logger = structlog.get_logger()

PASSAGE_DELIMITER = "\n---\n"

SYSTEM_TEMPLATE = """You are a helpful assistant that answers questions about a document.
Answer ONLY from the passages given in the CONTEXT message.
Do not use outside knowledge and do not make up facts.
If the context does not contain the answer, reply exactly: "{no_answer}".
Answer in a comprehensive but concise way."""


@dataclass(frozen=True)
class Prompt:
    """A composed prompt: instruction, context block and the question."""

    system: str
    context: str
    question: str
    passages: Tuple[Passage, ...]

    def to_messages(self) -> List[Dict[str, str]]:
        """Render the prompt as Ollama chat messages, in role order."""
        return [
            {"role": "system", "content": self.system},
            {"role": "system", "content": f"CONTEXT:\n{self.context}"},
            {"role": "user", "content": self.question},
        ]


def passage_header(position: int) -> str:
    return f"[Passage {position}]\n"


# Context characters a lone top-ranked passage costs beyond its own text
PASSAGE_HEADER_CHARS = len(passage_header(1))


def format_context(passages: Sequence[Passage]) -> str:
    """Join passage texts in ranking order with explicit delimiters."""
    return PASSAGE_DELIMITER.join(
        f"{passage_header(i)}{passage.text}" for i, passage in enumerate(passages, 1)
    )


class PromptComposer:
    """Builds prompts whose context block stays within a character budget."""

    def __init__(self, max_context_chars: int = None, no_answer_text: str = None):
        """Initialize the composer.

        Args:
            max_context_chars: Budget for the rendered context block (default from config)
            no_answer_text: Phrase the model must use when the context is insufficient
        """
        self.max_context_chars = max_context_chars or config.MAX_CONTEXT_CHARS
        self.no_answer_text = no_answer_text or config.NO_ANSWER_TEXT
        self.system = SYSTEM_TEMPLATE.format(no_answer=self.no_answer_text)

    def compose(
        self,
        question: str,
        ranked: Sequence[Union[RetrievalResult, Passage]],
    ) -> Prompt:
        """Compose a prompt from ranked passages and the question.

        Passages are dropped from the lowest-ranked end until the context
        fits the budget; a passage is never cut short.

        Args:
            question: User question, used verbatim
            ranked: Retrieval results or passages, best first

        Returns:
            Prompt holding the passages that made it into the context
        """
        passages = [
            item.passage if isinstance(item, RetrievalResult) else item for item in ranked
        ]

        kept = list(passages)
        context = format_context(kept)
        while kept and len(context) > self.max_context_chars:
            kept.pop()
            context = format_context(kept)

        if len(kept) < len(passages):
            logger.info(
                "context_trimmed_to_budget",
                passages_offered=len(passages),
                passages_kept=len(kept),
                max_context_chars=self.max_context_chars,
            )

        logger.debug(
            "prompt_composed",
            num_passages=len(kept),
            context_length=len(context),
        )

        return Prompt(
            system=self.system,
            context=context,
            question=question,
            passages=tuple(kept),
        )
