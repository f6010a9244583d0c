"""Exception types raised by the RAG pipeline."""


class BookRagError(Exception):
    """Base class for pipeline errors."""


class UninitializedStoreError(BookRagError, RuntimeError):
    """The process-wide vector store was used before init_global_store()."""


class EmbeddingBackendError(BookRagError, RuntimeError):
    """The embedding backend failed or returned an unusable vector."""


class GenerationError(BookRagError, RuntimeError):
    """The generation backend failed or returned an unusable response."""


class DimensionMismatchError(BookRagError, ValueError):
    """Two vectors that must share a dimension do not."""
