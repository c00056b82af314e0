"""Tests for the size-bounded text chunker."""
import random

import pytest

from docqa.rag.chunker import Passage, TextChunker, chunk_text


def test_splits_on_the_character_bound():
    passages = chunk_text("Alpha beta gamma. Delta epsilon.", max_chunk_chars=15)

    assert [p.text for p in passages] == ["Alpha beta", "gamma. Delta", "epsilon."]
    assert [p.source_order for p in passages] == [0, 1, 2]


def test_empty_and_blank_text_yield_no_passages():
    chunker = TextChunker(max_chunk_chars=10)

    assert chunker.chunk("") == []
    assert chunker.chunk("   \n\t  ") == []


def test_oversized_token_is_emitted_whole():
    long_token = "x" * 40
    passages = chunk_text(f"short {long_token} tail", max_chunk_chars=10)

    assert [p.text for p in passages] == ["short", long_token, "tail"]


def test_buffer_filled_exactly_to_the_bound():
    # "abcd efgh" is 9 chars; adding " ij" would make 12
    passages = chunk_text("abcd efgh ij", max_chunk_chars=9)

    assert [p.text for p in passages] == ["abcd efgh", "ij"]


def test_whitespace_runs_collapse_to_single_separator():
    passages = chunk_text("one\n\ntwo\t three", max_chunk_chars=100)

    assert [p.text for p in passages] == ["one two three"]


@pytest.mark.parametrize("seed", range(5))
def test_bound_and_token_sequence_hold_for_random_text(seed):
    rng = random.Random(seed)
    words = [
        "".join(rng.choice("abcdefghij") for _ in range(rng.randint(1, 25)))
        for _ in range(300)
    ]
    text = " ".join(words)
    bound = rng.randint(5, 60)

    passages = chunk_text(text, max_chunk_chars=bound)

    for passage in passages:
        assert len(passage.text) <= bound or " " not in passage.text
    rebuilt = " ".join(p.text for p in passages).split()
    assert rebuilt == words


def test_passages_have_unique_ids_but_compare_by_content():
    first = chunk_text("a b c d e f", max_chunk_chars=3)
    second = chunk_text("a b c d e f", max_chunk_chars=3)

    assert len({p.id for p in first}) == len(first)
    assert first == second
    assert {p.id for p in first}.isdisjoint(p.id for p in second)


def test_passage_is_immutable():
    passage = Passage(text="hello", source_order=0)

    with pytest.raises(AttributeError):
        passage.text = "changed"


def test_rejects_non_positive_bound():
    with pytest.raises(ValueError):
        TextChunker(max_chunk_chars=0)


def test_chunk_stats():
    chunker = TextChunker(max_chunk_chars=15)
    passages = chunker.chunk("Alpha beta gamma. Delta epsilon.")

    stats = chunker.get_chunk_stats(passages)

    assert stats["chunk_count"] == 3
    assert stats["min_chunk_size"] == len("epsilon.")
    assert stats["max_chunk_size"] == len("gamma. Delta")
    assert chunker.get_chunk_stats([])["chunk_count"] == 0
