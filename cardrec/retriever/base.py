"""Shared retrieval interface and similarity helpers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from cardrec.models import CardEmbedding, EmbeddingsStore


def cosine_similarity(
    query_embedding: np.ndarray,
    embeddings: np.ndarray,
) -> np.ndarray:
    """Calculate cosine similarity between a query and each row of a matrix.

    Zero-norm vectors score 0.0 instead of producing NaN.

    Returns:
        np.ndarray: One similarity score per row of ``embeddings``.
    """
    query = np.asarray(query_embedding, dtype=np.float64)
    matrix = np.asarray(embeddings, dtype=np.float64)
    if matrix.size == 0:
        return np.zeros(matrix.shape[0], dtype=np.float64)

    query_norm = np.linalg.norm(query)
    doc_norms = np.linalg.norm(matrix, axis=1)
    denominators = doc_norms * query_norm
    dots = matrix @ query

    scores = np.zeros_like(dots)
    np.divide(dots, denominators, out=scores, where=denominators > 0)
    return scores


def rank_indices(scores: np.ndarray, top_k: int) -> np.ndarray:
    """Indices of the ``top_k`` highest scores, ties kept in original order.

    Returns:
        np.ndarray: Positions sorted by descending score.
    """
    if top_k <= 0:
        return np.empty(0, dtype=np.int64)
    return np.argsort(-scores, kind="stable")[:top_k]


class Retriever(ABC):
    """Ranks stored card embeddings against a query vector."""

    backend: str = "base"

    def __init__(self, store: EmbeddingsStore) -> None:
        self.store = store

    @property
    def dimension(self) -> int | None:
        return self.store.dimension

    def _check_query(self, query_embedding: np.ndarray) -> np.ndarray:
        query = np.asarray(query_embedding, dtype=np.float64)
        dimension = self.dimension
        if query.ndim != 1 or (dimension is not None and query.shape[0] != dimension):
            msg = (
                f"Query embedding shape {query.shape} does not match "
                f"store dimension {dimension}"
            )
            raise ValueError(msg)
        return query

    @abstractmethod
    def search(
        self,
        query_embedding: np.ndarray,
        top_k: int = 12,
    ) -> list[tuple[CardEmbedding, float]]:
        """Return up to ``top_k`` (card embedding, score) pairs, best first."""
