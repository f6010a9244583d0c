"""Pytest configuration and fixtures for unit tests."""
from typing import Dict, List, Optional

import pytest

from bookrag.errors import EmbeddingBackendError
from bookrag.rag.vector_store import VectorStore, reset_global_store


class FakeEmbeddingClient:
    """Stands in for OllamaClient.

    Texts containing a key of ``vectors`` get that vector, texts containing a
    marker in ``fail_on`` raise EmbeddingBackendError.
    """

    def __init__(
        self,
        vectors: Optional[Dict[str, List[float]]] = None,
        default: Optional[List[float]] = None,
        fail_on: Optional[set] = None,
    ):
        self.vectors = vectors or {}
        self.default = default or [1.0, 0.0, 0.0]
        self.fail_on = fail_on or set()
        self.embedded: List[str] = []
        self.prompts: List[str] = []
        self.systems: List[Optional[str]] = []

    async def embed(self, text: str, model: str = None) -> List[float]:
        self.embedded.append(text)
        if any(marker in text for marker in self.fail_on):
            raise EmbeddingBackendError("backend unavailable")
        for marker, vector in self.vectors.items():
            if marker in text:
                return vector
        return self.default

    async def generate(self, prompt: str, system: str = None, model: str = None) -> str:
        self.prompts.append(prompt)
        self.systems.append(system)
        return '{"chapters": ["One"]}'


@pytest.fixture
def store() -> VectorStore:
    """Fresh, independent vector store."""
    return VectorStore()


@pytest.fixture
def fake_client() -> FakeEmbeddingClient:
    return FakeEmbeddingClient()


@pytest.fixture
def make_client():
    """Factory for FakeEmbeddingClient with custom vectors or failures."""
    return FakeEmbeddingClient


@pytest.fixture(autouse=True)
def isolated_global_store():
    """Each test starts without a process-wide store."""
    reset_global_store()
    yield
    reset_global_store()
