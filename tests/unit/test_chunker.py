"""Tests for paragraph chunking with overlap."""
import pytest

from bookrag.rag.chunker import (
    ParagraphChunker,
    chunk_by_paragraph,
    estimate_tokens,
    split_paragraphs,
)


def para(prefix: str, n: int) -> str:
    """A paragraph of ``n`` distinct words."""
    return " ".join(f"{prefix}{i}" for i in range(n))


class TestEstimateTokens:
    """Tests for the word-count token estimate."""

    def test_empty_text(self) -> None:
        assert estimate_tokens("") == 0
        assert estimate_tokens("   \n ") == 0

    def test_rounds_up(self) -> None:
        # 3 / 0.75 = 4, 4 / 0.75 = 5.33
        assert estimate_tokens("one two three") == 4
        assert estimate_tokens("one two three four") == 6

    def test_whitespace_separated_words(self) -> None:
        assert estimate_tokens("one\ttwo\n\nthree") == 4
        assert estimate_tokens(para("w", 75)) == 100


class TestParagraphAccumulation:
    """Tests for grouping paragraphs into chunks."""

    def test_short_text_single_chunk(self) -> None:
        text = "a b c\n\nd e f"
        assert chunk_by_paragraph(text, 100, 10) == ["a b c\n\nd e f"]

    def test_empty_text(self) -> None:
        assert chunk_by_paragraph("", 10, 2) == []

    def test_blank_paragraphs_dropped(self) -> None:
        text = "\n\n   \n\n  hello world  \n\n"
        assert split_paragraphs(text) == ["hello world"]
        assert chunk_by_paragraph(text, 10, 2) == ["hello world"]

    def test_overlap_repeats_trailing_paragraph(self) -> None:
        p1, p2, p3 = para("a", 3), para("b", 3), para("c", 3)  # 4 tokens each

        chunks = chunk_by_paragraph(f"{p1}\n\n{p2}\n\n{p3}", 8, 4)

        assert chunks == [f"{p1}\n\n{p2}", f"{p2}\n\n{p3}"]

    def test_overlap_takes_several_paragraphs(self) -> None:
        p1, p2, p3, p4 = (para(x, 3) for x in "abcd")

        chunks = chunk_by_paragraph("\n\n".join([p1, p2, p3, p4]), 12, 8)

        assert chunks == [
            "\n\n".join([p1, p2, p3]),
            "\n\n".join([p2, p3, p4]),
        ]

    def test_zero_overlap(self) -> None:
        p1, p2, p3 = para("a", 3), para("b", 3), para("c", 3)

        chunks = chunk_by_paragraph(f"{p1}\n\n{p2}\n\n{p3}", 8, 0)

        assert chunks == [f"{p1}\n\n{p2}", p3]

    def test_overlap_kept_when_next_paragraph_fills_budget(self) -> None:
        p1, p2 = para("a", 3), para("b", 3)  # 4 tokens each
        p3 = para("c", 9)  # 12 tokens, fills a chunk by itself

        chunks = chunk_by_paragraph(f"{p1}\n\n{p2}\n\n{p3}", 12, 4)

        # Overlap is sized by overlap_tokens alone, so this chunk runs to 16 tokens
        assert chunks == [f"{p1}\n\n{p2}", f"{p2}\n\n{p3}"]
        assert estimate_tokens(chunks[1]) == 16

    def test_overlap_carries_every_paragraph_that_fits(self) -> None:
        p1, p2 = para("a", 3), para("b", 3)
        p3 = para("c", 9)

        chunks = chunk_by_paragraph(f"{p1}\n\n{p2}\n\n{p3}", 12, 8)

        assert chunks == [f"{p1}\n\n{p2}", f"{p1}\n\n{p2}\n\n{p3}"]
        assert p2 in chunks[0] and p2 in chunks[1]

    def test_trailing_chunk_emitted_when_small(self) -> None:
        p1, p2 = para("a", 6), para("b", 1)

        chunks = chunk_by_paragraph(f"{p1}\n\n{p2}", 8, 0)

        assert chunks == [p1, p2]

    def test_chunks_stay_within_token_budget(self) -> None:
        # Every paragraph is at most 12 tokens, so 8 overlap tokens plus it fit in 20
        sizes = [1, 5, 9, 3, 7, 9, 2, 8, 4, 6, 8, 9, 9, 1]
        text = "\n\n".join(para(f"p{i}_", n) for i, n in enumerate(sizes))

        chunks = chunk_by_paragraph(text, 20, 8)

        assert len(chunks) > 1
        for chunk in chunks:
            assert estimate_tokens(chunk) <= 20

    def test_consecutive_chunks_share_a_paragraph(self) -> None:
        sizes = [3, 4, 3, 5, 3, 4, 3]
        text = "\n\n".join(para(f"p{i}_", n) for i, n in enumerate(sizes))

        chunks = chunk_by_paragraph(text, 16, 6)

        assert len(chunks) >= 2
        for first, second in zip(chunks, chunks[1:]):
            first_paras = set(first.split("\n\n"))
            second_paras = second.split("\n\n")
            assert second_paras[0] in first_paras


class TestHardSplit:
    """Tests for paragraphs larger than the chunk budget."""

    def test_word_windows_with_overlap(self) -> None:
        big = para("w", 10)

        chunks = chunk_by_paragraph(big, 4, 1)

        assert chunks == [
            "w0 w1 w2 w3",
            "w3 w4 w5 w6",
            "w6 w7 w8 w9",
        ]

    def test_full_window_step_when_overlap_too_large(self) -> None:
        big = para("w", 10)

        chunks = chunk_by_paragraph(big, 4, 4)

        assert chunks == ["w0 w1 w2 w3", "w4 w5 w6 w7", "w8 w9"]

    def test_windows_hold_max_tokens_words(self) -> None:
        big = para("w", 50)

        chunks = chunk_by_paragraph(big, 12, 3)

        for chunk in chunks[:-1]:
            assert len(chunk.split()) == 12
        assert 0 < len(chunks[-1].split()) <= 12
        assert chunks[-1].split()[-1] == "w49"

    def test_bypasses_accumulated_chunk(self) -> None:
        before, after = "a b c", "d e f"  # 4 tokens each
        big = para("w", 10)

        chunks = chunk_by_paragraph(f"{before}\n\n{big}\n\n{after}", 4, 1)

        assert chunks == [
            "w0 w1 w2 w3",
            "w3 w4 w5 w6",
            "w6 w7 w8 w9",
            before,
            after,
        ]


class TestParagraphChunker:
    """Tests for chunker construction and stats."""

    def test_defaults_from_config(self) -> None:
        from bookrag import config

        chunker = ParagraphChunker()

        assert chunker.max_tokens == config.CHUNK_MAX_TOKENS
        assert chunker.overlap_tokens == config.CHUNK_OVERLAP_TOKENS

    def test_explicit_zero_overlap_kept(self) -> None:
        assert ParagraphChunker(max_tokens=10, overlap_tokens=0).overlap_tokens == 0

    def test_rejects_non_positive_budget(self) -> None:
        with pytest.raises(ValueError):
            ParagraphChunker(max_tokens=0, overlap_tokens=0)

    def test_rejects_negative_overlap(self) -> None:
        with pytest.raises(ValueError):
            ParagraphChunker(max_tokens=10, overlap_tokens=-1)

    def test_chunk_stats(self) -> None:
        chunker = ParagraphChunker(max_tokens=8, overlap_tokens=0)

        stats = chunker.get_chunk_stats(["a b c", "d e f g h i"])

        assert stats["chunk_count"] == 2
        assert stats["total_chars"] == 16
        assert stats["max_chunk_tokens"] == 8
        assert chunker.get_chunk_stats([])["chunk_count"] == 0
