"""Cosine similarity between embedding vectors."""
from typing import Sequence
import numpy as np

from bookrag.errors import DimensionMismatchError

# Added to the denominator so zero vectors score 0.0 instead of dividing by zero
EPSILON = 1e-6


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Return dot(a, b) / (|a| * |b| + EPSILON).

    Raises:
        DimensionMismatchError: If the vectors differ in length
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)

    if va.shape != vb.shape:
        raise DimensionMismatchError(
            f"Cannot compare vectors of dimension {va.shape[0]} and {vb.shape[0]}"
        )

    denominator = np.linalg.norm(va) * np.linalg.norm(vb) + EPSILON
    return float(np.dot(va, vb) / denominator)


def cosine_similarities(query: Sequence[float], matrix: np.ndarray) -> np.ndarray:
    """Cosine similarity of ``query`` against every row of ``matrix``.

    Same formula as cosine_similarity(), vectorized for ranking a whole store.
    """
    q = np.asarray(query, dtype=np.float64)
    m = np.asarray(matrix, dtype=np.float64)

    if m.size == 0:
        return np.zeros(0, dtype=np.float64)

    if m.ndim != 2 or m.shape[1] != q.shape[0]:
        raise DimensionMismatchError(
            f"Query dimension {q.shape[0]} does not match stored dimension {m.shape[-1]}"
        )

    denominators = np.linalg.norm(m, axis=1) * np.linalg.norm(q) + EPSILON
    return (m @ q) / denominators
