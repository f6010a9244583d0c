"""End-to-end pipeline: ingest a book, then generate from retrieved context."""
from pathlib import Path
from typing import Any, Callable, Dict, Optional
import structlog

from bookrag import config
from bookrag.llm_client import OllamaClient, ollama_client
from bookrag.rag.book_parser import Chapter, clean_text, load_book, split_chapters
from bookrag.rag.ingest import IngestPipeline
from bookrag.rag.retriever import Retriever, build_context
from bookrag.rag.vector_store import VectorStore

logger = structlog.get_logger()

CHAPTER_LIST_PROMPT = """
You are a teaching expert.

TASK:
Generate a list of chapters in the book from the context

RULES:
- Be specific and practical
- Follow the JSON OUTPUT FORMAT exactly
- Do NOT add any explanations or extra text
- Return ONLY valid JSON

CONTEXT:
{context}

OUTPUT FORMAT (strict JSON):
{{
"chapters": [<string>, <string>, <string>,...]
}}
"""


class GenerationPipeline:
    """Wires ingestion, retrieval and generation around one vector store."""

    def __init__(
        self,
        vector_store: VectorStore,
        client: Optional[OllamaClient] = None,
        ingest_pipeline: Optional[IngestPipeline] = None,
        retriever: Optional[Retriever] = None,
    ):
        self.vector_store = vector_store
        self.client = client or ollama_client
        self.ingest_pipeline = ingest_pipeline or IngestPipeline(
            vector_store=vector_store, client=self.client
        )
        self.retriever = retriever or Retriever(vector_store=vector_store)

    async def ingest_book(
        self,
        path: Path = None,
        clean: bool = True,
        progress_callback: Optional[Callable[[int, int, Chapter], None]] = None,
    ) -> Dict[str, Any]:
        """Load a book, split it into chapters and index every chapter.

        Args:
            path: Extracted text of the book (default from config)
            clean: Drop short noise lines before splitting
            progress_callback: Optional callback function(current, total, chapter)

        Returns:
            Ingestion statistics
        """
        text = load_book(path or config.BOOK_PATH)
        if clean:
            text = clean_text(text)

        chapters = split_chapters(text)
        return await self.ingest_pipeline.ingest_chapters(
            chapters, progress_callback=progress_callback
        )

    async def generate_chapter_list(self, query: str = None) -> str:
        """Retrieve context for ``query`` and ask the model for a chapter list.

        Raises:
            EmbeddingBackendError: If the query cannot be embedded
            GenerationError: If generation fails
        """
        query = query or config.RETRIEVAL_QUERY

        context_chunks = await self.retriever.retrieve_for_query(query, client=self.client)
        prompt = CHAPTER_LIST_PROMPT.format(context=build_context(context_chunks))

        logger.info(
            "generation_started",
            context_chunks=len(context_chunks),
            prompt_length=len(prompt),
        )

        return await self.client.generate(prompt, system=config.SYSTEM_PROMPT)
