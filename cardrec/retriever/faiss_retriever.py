"""FAISS-backed retrieval for larger card catalogs."""

from __future__ import annotations

from typing import TYPE_CHECKING

import faiss
import numpy as np

from cardrec.config import config
from cardrec.retriever.base import Retriever

if TYPE_CHECKING:
    from cardrec.models import CardEmbedding, EmbeddingsStore

logger = config.get_logger(__name__)


class FaissRetriever(Retriever):
    """Exact inner-product FAISS index over L2-normalised card vectors.

    Rankings match ``LinearRetriever`` up to float32 precision: results are
    over-fetched and re-sorted so equal scores keep store order.
    """

    backend = "faiss"

    def __init__(self, store: EmbeddingsStore, raw_top_k_multiplier: int = 2) -> None:
        """Build the index from the store's vectors."""
        super().__init__(store)
        self.raw_top_k_multiplier = max(1, raw_top_k_multiplier)
        self.index: faiss.IndexFlatIP | None = None

        if store.embeddings:
            vectors = np.vstack([
                np.asarray(item.embedding, dtype="float32")
                for item in store.embeddings
            ])
            vectors = np.ascontiguousarray(vectors)
            faiss.normalize_L2(vectors)
            self.index = faiss.IndexFlatIP(vectors.shape[1])
            self.index.add(vectors)  # pyright: ignore[reportCallIssue]
            logger.info(
                "Built FAISS IndexFlatIP with %d vectors of dimension %d",
                self.index.ntotal,
                vectors.shape[1],
            )

    @staticmethod
    def _normalize_query(query: np.ndarray) -> np.ndarray:
        vector = np.ascontiguousarray(query, dtype="float32").reshape(1, -1)
        if np.linalg.norm(vector) > 0:
            faiss.normalize_L2(vector)
        return vector

    def search(
        self,
        query_embedding: np.ndarray,
        top_k: int = 12,
    ) -> list[tuple[CardEmbedding, float]]:
        """Search the index for the closest cards.

        Returns:
            Ranked list of (CardEmbedding, score) tuples.
        """
        index = self.index
        if index is None or index.ntotal == 0 or top_k <= 0:
            return []

        query = self._normalize_query(self._check_query(query_embedding))
        raw_top_k = min(max(top_k, self.raw_top_k_multiplier * top_k), index.ntotal)

        scores, positions = index.search(query, raw_top_k)  # pyright: ignore[reportCallIssue]

        hits = [
            (float(score), int(position))
            for score, position in zip(scores[0], positions[0], strict=True)
            if int(position) != -1  # faiss returns -1 for empty results
        ]
        hits.sort(key=lambda hit: (-hit[0], hit[1]))

        return [
            (self.store.embeddings[position], score)
            for score, position in hits[:top_k]
        ]
