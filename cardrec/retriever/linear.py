"""Exact linear-scan retrieval with NumPy."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from cardrec.config import config
from cardrec.retriever.base import Retriever, cosine_similarity, rank_indices

if TYPE_CHECKING:
    from cardrec.models import CardEmbedding, EmbeddingsStore

logger = config.get_logger(__name__)


class LinearRetriever(Retriever):
    """Scores every stored card against the query (O(N·D))."""

    backend = "linear"

    def __init__(self, store: EmbeddingsStore) -> None:
        """Stack the store's vectors into a read-only matrix."""
        super().__init__(store)
        if store.embeddings:
            self.embeddings: np.ndarray | None = np.vstack([
                np.asarray(item.embedding, dtype=np.float64)
                for item in store.embeddings
            ])
            self.embeddings.setflags(write=False)
        else:
            self.embeddings = None

    def search(
        self,
        query_embedding: np.ndarray,
        top_k: int = 12,
    ) -> list[tuple[CardEmbedding, float]]:
        """Rank cards by cosine similarity.

        Returns:
            A list of (CardEmbedding, score) tuples sorted by descending score.
        """
        if self.embeddings is None or top_k <= 0:
            return []

        query = self._check_query(query_embedding)
        similarities = cosine_similarity(query, self.embeddings)
        top_indices = rank_indices(similarities, top_k)

        results = []
        for idx in top_indices:
            item = self.store.embeddings[int(idx)]
            score = float(similarities[idx])
            logger.debug(
                "Retrieved card %s with similarity %.4f",
                item.card.credit_card_name,
                score,
            )
            results.append((item, score))

        return results
