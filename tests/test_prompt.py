"""Tests for prompt composition."""
from docqa.rag.chunker import Passage
from docqa.rag.prompt import PASSAGE_DELIMITER, PromptComposer, format_context
from docqa.rag.store_faiss import RetrievalResult


def _passages(*texts):
    return [Passage(text=t, source_order=i) for i, t in enumerate(texts)]


def test_messages_follow_instruction_context_question_order():
    composer = PromptComposer(max_context_chars=1000, no_answer_text="insufficient information")

    prompt = composer.compose("What is alpha?", _passages("alpha is first", "beta is second"))
    messages = prompt.to_messages()

    assert [m["role"] for m in messages] == ["system", "system", "user"]
    assert "insufficient information" in messages[0]["content"]
    assert "ONLY" in messages[0]["content"]
    assert messages[1]["content"].startswith("CONTEXT:\n[Passage 1]\nalpha is first")
    assert messages[2]["content"] == "What is alpha?"


def test_context_keeps_ranking_order_with_delimiters():
    context = format_context(_passages("first", "second", "third"))

    assert context == PASSAGE_DELIMITER.join(
        ["[Passage 1]\nfirst", "[Passage 2]\nsecond", "[Passage 3]\nthird"]
    )


def test_lowest_ranked_passages_are_dropped_to_fit_budget():
    passages = _passages("a" * 100, "b" * 100, "c" * 100)
    two_passages = len(format_context(passages[:2]))

    prompt = PromptComposer(max_context_chars=two_passages).compose("q", passages)

    assert prompt.passages == tuple(passages[:2])
    assert len(prompt.context) <= two_passages
    assert "a" * 100 in prompt.context and "b" * 100 in prompt.context
    assert "c" not in prompt.context


def test_passages_are_never_truncated():
    passages = _passages("x" * 500)

    prompt = PromptComposer(max_context_chars=100).compose("q", passages)

    assert prompt.passages == ()
    assert prompt.context == ""


def test_accepts_retrieval_results():
    results = [
        RetrievalResult(passage=p, score=s)
        for p, s in zip(_passages("top", "second"), (0.9, 0.4))
    ]

    prompt = PromptComposer(max_context_chars=1000).compose("q", results)

    assert [p.text for p in prompt.passages] == ["top", "second"]


def test_question_is_kept_verbatim():
    question = "  What about   spacing?\n"

    prompt = PromptComposer(max_context_chars=1000).compose(question, _passages("x"))

    assert prompt.question == question
    assert prompt.to_messages()[-1]["content"] == question
