"""Paragraph-based text chunking with overlap for RAG pipeline.

Token counts are estimated from word counts instead of running a tokenizer,
so chunk boundaries are deterministic and independent of the embedding model.
"""
import math
from typing import List
import structlog

from bookrag import config

logger = structlog.get_logger()

WORDS_PER_TOKEN = 0.75
PARAGRAPH_SEPARATOR = "\n\n"


def estimate_tokens(text: str) -> int:
    """Estimate the token count of a text as ceil(words / 0.75)."""
    words = len(text.split())
    return math.ceil(words / WORDS_PER_TOKEN)


def split_paragraphs(text: str) -> List[str]:
    """Split text on blank lines, dropping empty paragraphs."""
    paragraphs = (p.strip() for p in text.split(PARAGRAPH_SEPARATOR))
    return [p for p in paragraphs if p]


class ParagraphChunker:
    """Groups paragraphs into token-bounded chunks with paragraph overlap."""

    def __init__(
        self,
        max_tokens: int = None,
        overlap_tokens: int = None,
    ):
        """Initialize the chunker.

        Args:
            max_tokens: Token budget per chunk (default from config)
            overlap_tokens: Token budget carried into the next chunk (default from config)
        """
        self.max_tokens = config.CHUNK_MAX_TOKENS if max_tokens is None else max_tokens
        self.overlap_tokens = (
            config.CHUNK_OVERLAP_TOKENS if overlap_tokens is None else overlap_tokens
        )

        if self.max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive, got {self.max_tokens}")
        if self.overlap_tokens < 0:
            raise ValueError(
                f"overlap_tokens must not be negative, got {self.overlap_tokens}"
            )

        logger.debug(
            "chunker_initialized",
            max_tokens=self.max_tokens,
            overlap_tokens=self.overlap_tokens,
        )

    def chunk_text(self, text: str) -> List[str]:
        """Split text into overlapping chunks.

        Paragraphs are accumulated until the next one would push the chunk over
        ``max_tokens``. The finished chunk is emitted and the next one starts
        with the trailing paragraphs that fit in the overlap budget. A paragraph
        that is too large on its own is split into word windows and emitted
        directly, without touching the chunk being accumulated.

        Args:
            text: Text to chunk

        Returns:
            List of chunk strings in document order
        """
        chunks: List[str] = []
        current: List[str] = []
        current_tokens = 0

        for para in split_paragraphs(text):
            para_tokens = estimate_tokens(para)

            if para_tokens > self.max_tokens:
                chunks.extend(self._split_words(para))
                continue

            if current_tokens + para_tokens > self.max_tokens:
                chunks.append(PARAGRAPH_SEPARATOR.join(current))

                # Overlap plus this paragraph may exceed max_tokens
                current = self._build_overlap(current, self.overlap_tokens)
                current_tokens = estimate_tokens(" ".join(current))

            current.append(para)
            current_tokens += para_tokens

        if current:
            chunks.append(PARAGRAPH_SEPARATOR.join(current))

        logger.debug(
            "text_chunked",
            text_length=len(text),
            chunk_count=len(chunks),
        )

        return chunks

    def _split_words(self, paragraph: str) -> List[str]:
        """Hard-split an oversized paragraph into overlapping word windows."""
        words = paragraph.split()
        step = self.max_tokens - self.overlap_tokens
        if step <= 0:
            step = self.max_tokens

        windows = []
        start = 0
        while start < len(words):
            end = min(start + self.max_tokens, len(words))
            windows.append(" ".join(words[start:end]))
            if end == len(words):
                break
            start += step

        logger.debug(
            "paragraph_hard_split",
            word_count=len(words),
            window_count=len(windows),
        )

        return windows

    @staticmethod
    def _build_overlap(previous: List[str], budget: int) -> List[str]:
        """Take trailing paragraphs of ``previous`` that fit in ``budget`` tokens."""
        overlap = []
        tokens = 0

        for para in reversed(previous):
            para_tokens = estimate_tokens(para)
            if tokens + para_tokens > budget:
                break
            overlap.append(para)
            tokens += para_tokens

        overlap.reverse()
        return overlap

    def get_chunk_stats(self, chunks: List[str]) -> dict:
        """Get statistics about a set of chunks.

        Args:
            chunks: List of chunk strings

        Returns:
            Dictionary with chunk statistics
        """
        if not chunks:
            return {
                "chunk_count": 0,
                "total_chars": 0,
                "avg_chunk_size": 0,
                "max_chunk_tokens": 0,
            }

        chunk_sizes = [len(c) for c in chunks]

        return {
            "chunk_count": len(chunks),
            "total_chars": sum(chunk_sizes),
            "avg_chunk_size": sum(chunk_sizes) // len(chunks),
            "max_chunk_tokens": max(estimate_tokens(c) for c in chunks),
            "max_tokens": self.max_tokens,
            "overlap_tokens": self.overlap_tokens,
        }


def chunk_by_paragraph(text: str, max_tokens: int, overlap_tokens: int) -> List[str]:
    """Chunk text with explicit token budgets (convenience function).

    Args:
        text: Text to chunk
        max_tokens: Token budget per chunk
        overlap_tokens: Token budget carried between consecutive chunks

    Returns:
        List of chunk strings
    """
    return ParagraphChunker(max_tokens, overlap_tokens).chunk_text(text)
