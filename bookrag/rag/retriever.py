"""Retriever for semantic search over the vector store.

Handles:
- Cosine scoring of every stored entry against a query embedding
- Relevance ordering
- Greedy diversity filtering of near-duplicate chunks
- Context formatting for the generation prompt
"""
from typing import List, Optional, Sequence
from dataclasses import dataclass
import numpy as np
import structlog

from bookrag import config
from bookrag.llm_client import OllamaClient, ollama_client
from bookrag.rag.similarity import cosine_similarity, cosine_similarities
from bookrag.rag.vector_store import VectorEntry, VectorStore, get_global_store

logger = structlog.get_logger()


@dataclass
class RetrievalResult:
    """A single retrieved entry with its similarity to the query."""

    score: float
    entry: VectorEntry

    @property
    def text(self) -> str:
        return self.entry.text

    @property
    def section(self) -> str:
        return self.entry.section


class Retriever:
    """Ranks stored chunks by cosine similarity and filters near-duplicates."""

    def __init__(
        self,
        vector_store: Optional[VectorStore] = None,
        top_k: int = None,
        diversity_threshold: float = None,
    ):
        """Initialize the retriever.

        Args:
            vector_store: Store to search (the process-wide store if not provided)
            top_k: Maximum number of results (default from config)
            diversity_threshold: Candidates more similar than this to an
                already selected result are dropped (default from config)
        """
        self.vector_store = vector_store
        self.top_k = config.RETRIEVAL_TOP_K if top_k is None else top_k
        self.diversity_threshold = (
            config.DIVERSITY_THRESHOLD
            if diversity_threshold is None
            else diversity_threshold
        )

    def _get_store(self) -> VectorStore:
        if self.vector_store is None:
            self.vector_store = get_global_store()
        return self.vector_store

    def retrieve_results(self, query_embedding: Sequence[float]) -> List[RetrievalResult]:
        """Retrieve the most relevant, mutually dissimilar entries.

        Args:
            query_embedding: Query vector, same dimension as the stored vectors

        Returns:
            Up to ``top_k`` results, most similar first

        Raises:
            DimensionMismatchError: If the query and stored dimensions differ
        """
        entries = self._get_store().all()

        if not entries:
            logger.info("empty_store_no_results")
            return []

        matrix = np.array([e.embedding for e in entries], dtype=np.float64)
        scores = cosine_similarities(query_embedding, matrix)

        # Stable sort keeps snapshot order among equal scores
        order = np.argsort(-scores, kind="stable")

        selected: List[RetrievalResult] = []
        skipped = 0

        for idx in order:
            if len(selected) >= self.top_k:
                break

            candidate = entries[idx]
            if any(
                cosine_similarity(chosen.entry.embedding, candidate.embedding)
                > self.diversity_threshold
                for chosen in selected
            ):
                skipped += 1
                continue

            selected.append(RetrievalResult(score=float(scores[idx]), entry=candidate))

        logger.info(
            "retrieval_completed",
            candidates=len(entries),
            results_returned=len(selected),
            near_duplicates_skipped=skipped,
            top_score=selected[0].score if selected else None,
        )

        return selected

    def retrieve(self, query_embedding: Sequence[float]) -> List[str]:
        """Retrieve chunk texts for a query embedding, most relevant first."""
        return [r.text for r in self.retrieve_results(query_embedding)]

    async def retrieve_for_query(
        self,
        query: str,
        client: Optional[OllamaClient] = None,
    ) -> List[str]:
        """Embed a query and retrieve chunk texts for it.

        Args:
            query: Query text
            client: Embedding client (default: the global Ollama client)

        Returns:
            Retrieved chunk texts

        Raises:
            EmbeddingBackendError: If the query cannot be embedded
        """
        client = client or ollama_client

        logger.info("retrieval_started", query_length=len(query), top_k=self.top_k)

        query_embedding = await client.embed(query)
        return self.retrieve(query_embedding)


def build_context(texts: List[str], separator: str = None) -> str:
    """Join retrieved chunks into a single context block for a prompt."""
    if separator is None:
        separator = config.CONTEXT_SEPARATOR
    return separator.join(texts)


def retrieve(query_embedding: Sequence[float]) -> List[str]:
    """Retrieve from the process-wide store (convenience function)."""
    return Retriever().retrieve(query_embedding)
