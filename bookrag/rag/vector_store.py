"""In-memory vector store shared by ingestion and retrieval.

Handles:
- Immutable (embedding, text, section) entries
- Serialized appends and consistent snapshot reads across threads and tasks
- Dimension tracking (fixed by the first entry)
- An optional process-wide instance with first-initialization-wins semantics
"""
import threading
from dataclasses import dataclass
from typing import List, Optional, Tuple, Dict, Any, Sequence
import structlog

from bookrag.errors import DimensionMismatchError, UninitializedStoreError

logger = structlog.get_logger()


@dataclass(frozen=True)
class VectorEntry:
    """A stored chunk: its embedding, exact text and section label."""

    embedding: Tuple[float, ...]
    text: str
    section: str = ""

    def __post_init__(self):
        # Freeze the vector so an entry cannot change after insertion
        object.__setattr__(self, "embedding", tuple(float(x) for x in self.embedding))

        if not self.embedding:
            raise ValueError("VectorEntry embedding must not be empty")
        if not self.text:
            raise ValueError("VectorEntry text must not be empty")

    @property
    def dimension(self) -> int:
        return len(self.embedding)


class VectorStore:
    """Append-only collection of VectorEntry guarded by a single lock.

    ``add`` and ``all`` hold the lock only for the append or the copy, so a
    slow embedding call made by the caller never blocks other store users.
    """

    def __init__(self):
        self._entries: List[VectorEntry] = []
        self._lock = threading.Lock()
        self._dimension: Optional[int] = None

    @property
    def dimension(self) -> Optional[int]:
        """Embedding dimension, or None until the first entry is added."""
        return self._dimension

    def add(self, entry: VectorEntry) -> None:
        """Append an entry.

        Raises:
            DimensionMismatchError: If the entry's dimension differs from the store's
        """
        with self._lock:
            if self._dimension is None:
                self._dimension = entry.dimension
            elif entry.dimension != self._dimension:
                raise DimensionMismatchError(
                    f"Embedding dimension mismatch: expected {self._dimension}, "
                    f"got {entry.dimension}"
                )
            self._entries.append(entry)
            total = len(self._entries)

        logger.debug("vector_added", section=entry.section, total_vectors=total)

    def add_embedding(
        self, embedding: Sequence[float], text: str, section: str = ""
    ) -> VectorEntry:
        """Build an entry from its parts, add it and return it."""
        entry = VectorEntry(embedding=tuple(embedding), text=text, section=section)
        self.add(entry)
        return entry

    def all(self) -> List[VectorEntry]:
        """Return a copy of every entry present at the time of the call."""
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_stats(self) -> Dict[str, Any]:
        """Get statistics about the vector store.

        Returns:
            Dictionary with store statistics
        """
        entries = self.all()
        sections = {e.section for e in entries}

        return {
            "vector_count": len(entries),
            "dimension": self._dimension,
            "section_count": len(sections),
        }


# Process-wide instance
_store_instance: Optional[VectorStore] = None
_store_lock = threading.Lock()


def init_global_store() -> VectorStore:
    """Create the process-wide store, or return it if it already exists.

    The first call wins; later calls never replace the existing store.

    Returns:
        The process-wide VectorStore
    """
    global _store_instance
    with _store_lock:
        if _store_instance is None:
            _store_instance = VectorStore()
            logger.info("vector_store_initialized")
        return _store_instance


def get_global_store() -> VectorStore:
    """Get the process-wide store.

    Raises:
        UninitializedStoreError: If init_global_store() has not been called
    """
    store = _store_instance
    if store is None:
        raise UninitializedStoreError(
            "VectorStore not initialized. Call init_global_store() first."
        )
    return store


def reset_global_store() -> None:
    """Forget the process-wide store (test isolation)."""
    global _store_instance
    with _store_lock:
        _store_instance = None
