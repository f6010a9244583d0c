"""Ingest pipeline for indexing book chapters.

Orchestrates:
- Chapter chunking
- Safety cap and minimum-length filtering
- Concurrent embedding generation
- Vector storage
"""
from typing import List, Dict, Any, Optional, Callable
import asyncio
import structlog

from bookrag import config
from bookrag.errors import DimensionMismatchError, EmbeddingBackendError
from bookrag.llm_client import OllamaClient, ollama_client
from bookrag.rag.book_parser import Chapter
from bookrag.rag.chunker import ParagraphChunker
from bookrag.rag.vector_store import VectorStore, get_global_store

logger = structlog.get_logger()


def _empty_stats() -> Dict[str, int]:
    return {
        "chapters_processed": 0,
        "chunks_prepared": 0,
        "chunks_filtered": 0,
        "chunks_truncated": 0,
        "chunks_skipped": 0,
        "chunks_stored": 0,
    }


class IngestPipeline:
    """Pipeline for ingesting book chapters into the vector store."""

    def __init__(
        self,
        vector_store: Optional[VectorStore] = None,
        client: Optional[OllamaClient] = None,
        max_tokens: int = None,
        overlap_tokens: int = None,
        max_chars: int = None,
        min_chars: int = None,
        concurrency: int = None,
    ):
        """Initialize the ingest pipeline.

        Args:
            vector_store: Store to fill (default: the process-wide store)
            client: Embedding client (default: the global Ollama client)
            max_tokens: Chunk token budget (default from config)
            overlap_tokens: Chunk overlap budget (default from config)
            max_chars: Chunks are truncated to this many characters before embedding
            min_chars: Chunks shorter than this are not indexed
            concurrency: Maximum number of embedding requests in flight
        """
        # An empty store is falsy (__len__), so test against None
        self.vector_store = get_global_store() if vector_store is None else vector_store
        self.client = client or ollama_client
        self.chunker = ParagraphChunker(max_tokens=max_tokens, overlap_tokens=overlap_tokens)
        self.max_chars = max_chars or config.MAX_CHUNK_CHARS
        self.min_chars = config.MIN_CHUNK_CHARS if min_chars is None else min_chars
        self.concurrency = concurrency or config.EMBED_CONCURRENCY

        self.stats = _empty_stats()

        logger.info(
            "ingest_pipeline_initialized",
            max_tokens=self.chunker.max_tokens,
            overlap_tokens=self.chunker.overlap_tokens,
            max_chars=self.max_chars,
            min_chars=self.min_chars,
            concurrency=self.concurrency,
        )

    def prepare_chunks(self, chapter: Chapter) -> List[str]:
        """Chunk a chapter and apply the length cap and floor.

        Args:
            chapter: Chapter to chunk

        Returns:
            Chunk texts ready to embed
        """
        chapter_text = f"Chapter: {chapter.title}\n\n{chapter.content}"
        prepared = []

        for chunk in self.chunker.chunk_text(chapter_text):
            if len(chunk) > self.max_chars:
                # Cuts at a character offset; may split a word
                logger.warning(
                    "chunk_truncated",
                    section=chapter.title,
                    chunk_length=len(chunk),
                    max_chars=self.max_chars,
                )
                chunk = chunk[: self.max_chars]
                self.stats["chunks_truncated"] += 1

            if len(chunk) < self.min_chars:
                self.stats["chunks_filtered"] += 1
                continue

            prepared.append(chunk)

        return prepared

    async def _embed_and_store(
        self, semaphore: asyncio.Semaphore, text: str, section: str
    ) -> bool:
        async with semaphore:
            try:
                embedding = await self.client.embed(text)
            except EmbeddingBackendError as e:
                logger.warning(
                    "chunk_embedding_skipped",
                    section=section,
                    text_preview=text[:100],
                    error=str(e),
                )
                self.stats["chunks_skipped"] += 1
                return False

        try:
            self.vector_store.add_embedding(embedding, text=text, section=section)
        except DimensionMismatchError as e:
            logger.warning(
                "chunk_dimension_skipped",
                section=section,
                text_preview=text[:100],
                error=str(e),
            )
            self.stats["chunks_skipped"] += 1
            return False

        self.stats["chunks_stored"] += 1
        return True

    async def ingest_chapter(self, chapter: Chapter) -> int:
        """Chunk, embed and store one chapter.

        Chunks whose embedding fails or has the wrong dimension are skipped;
        the rest are still stored.

        Args:
            chapter: Chapter to ingest

        Returns:
            Number of chunks stored
        """
        chunks = self.prepare_chunks(chapter)

        if not chunks:
            logger.warning("no_chunks_created", section=chapter.title)
            self.stats["chapters_processed"] += 1
            return 0

        semaphore = asyncio.Semaphore(self.concurrency)
        stored = await asyncio.gather(
            *(self._embed_and_store(semaphore, chunk, chapter.title) for chunk in chunks)
        )
        stored_count = sum(stored)

        self.stats["chunks_prepared"] += len(chunks)
        self.stats["chapters_processed"] += 1

        logger.info(
            "chapter_ingested",
            section=chapter.title,
            chunks_prepared=len(chunks),
            chunks_stored=stored_count,
        )

        return stored_count

    async def ingest_chapters(
        self,
        chapters: List[Chapter],
        progress_callback: Optional[Callable[[int, int, Chapter], None]] = None,
    ) -> Dict[str, Any]:
        """Ingest a list of chapters.

        Args:
            chapters: Chapters to ingest, in book order
            progress_callback: Optional callback function(current, total, chapter)

        Returns:
            Dictionary with ingestion statistics
        """
        self.stats = _empty_stats()

        logger.info("starting_ingest", chapter_count=len(chapters))

        for idx, chapter in enumerate(chapters, 1):
            if progress_callback:
                progress_callback(idx, len(chapters), chapter)
            await self.ingest_chapter(chapter)

        logger.info(
            "ingest_completed",
            stats=self.stats,
            total_vectors=len(self.vector_store),
        )

        return self.stats
