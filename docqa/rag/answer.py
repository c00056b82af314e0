"""Question answering pipeline.

Orchestrates:
- Passage retrieval
- Prompt composition within the context budget
- Answer generation
- Confidence scoring
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import structlog

from docqa import config
from docqa.rag.chunker import Passage
from docqa.rag.confidence import ConfidenceEstimator, MeanSimilarityConfidence
from docqa.rag.generator import AnswerGenerator
from docqa.rag.prompt import PromptComposer
from docqa.rag.retriever import Retriever

logger = structlog.get_logger()


@dataclass(frozen=True)
class Answer:
    """Generated answer with its confidence and supporting passages."""

    text: str
    confidence: float
    evidence: Tuple[Passage, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "answer": self.text,
            "confidence": self.confidence,
            "evidence": [p.text for p in self.evidence],
        }


class AnswerPipeline:
    """Pipeline turning a question into a grounded answer."""

    def __init__(
        self,
        retriever: Retriever,
        generator: AnswerGenerator,
        composer: Optional[PromptComposer] = None,
        estimator: Optional[ConfidenceEstimator] = None,
        no_answer_text: str = None,
    ):
        """Initialize the answer pipeline.

        Args:
            retriever: Retriever over the shared vector index
            generator: Answer generator
            composer: Prompt composer (default from config)
            estimator: Confidence strategy (default mean similarity)
            no_answer_text: Answer used when there is no evidence
        """
        self.retriever = retriever
        self.generator = generator
        self.composer = composer or PromptComposer()
        self.estimator = estimator or MeanSimilarityConfidence()
        self.no_answer_text = no_answer_text or config.NO_ANSWER_TEXT

    def _no_answer(self) -> Answer:
        return Answer(text=self.no_answer_text, confidence=0.0, evidence=())

    async def answer(self, question: str, top_k: Optional[int] = None) -> Answer:
        """Answer a question from the indexed document.

        With no retrieved evidence the model is not called and the answer is
        the insufficient-information text with confidence 0.

        Args:
            question: User question
            top_k: Number of passages to retrieve (default from retriever)

        Returns:
            Answer with text, confidence and evidence in ranking order

        Raises:
            EmbeddingError: If the question cannot be embedded
            VectorIndexError: If the question embedding does not fit the index
            GenerationError: If the model fails or refuses
        """
        results = await self.retriever.retrieve(question, top_k=top_k)

        if not results:
            logger.warning("no_evidence_for_question", question_length=len(question or ""))
            return self._no_answer()

        prompt = self.composer.compose(question, results)

        if not prompt.passages:
            logger.warning(
                "no_passage_fits_context_budget",
                max_context_chars=self.composer.max_context_chars,
            )
            return self._no_answer()

        text = await self.generator.generate(prompt)
        confidence = round(self.estimator.estimate(results), 4)

        logger.info(
            "question_answered",
            answer_length=len(text),
            evidence_count=len(prompt.passages),
            confidence=confidence,
        )

        return Answer(text=text, confidence=confidence, evidence=prompt.passages)
