"""Retriever implementations and factory."""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from cardrec.config import config

from .base import Retriever, cosine_similarity, rank_indices
from .linear import LinearRetriever

if TYPE_CHECKING:
    from cardrec.models import EmbeddingsStore

RetrieverBackend = Literal["linear", "faiss"]


def get_retriever(
    store: EmbeddingsStore,
    backend: str | None = None,
) -> Retriever:
    """Return a retriever over ``store`` for the configured backend.

    Raises:
        ValueError: If an unsupported backend is requested.
    """
    backend_value = (backend or config.RETRIEVER_BACKEND).lower()

    if backend_value == "linear":
        return LinearRetriever(store)

    if backend_value == "faiss":
        from .faiss_retriever import FaissRetriever  # noqa: PLC0415

        return FaissRetriever(store)

    msg = f"Unsupported retriever backend: {backend_value}"
    raise ValueError(msg)


__all__ = [
    "LinearRetriever",
    "Retriever",
    "RetrieverBackend",
    "cosine_similarity",
    "get_retriever",
    "rank_indices",
]
