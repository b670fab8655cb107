"""Unit tests for FaissRetriever."""

import numpy as np
import pytest

from cardrec import EmbeddingsStore, LinearRetriever, get_retriever
from cardrec.retriever.faiss_retriever import FaissRetriever


def test_faiss_top_two_of_three_cards(abc_store):
    retriever = FaissRetriever(abc_store)

    results = retriever.search(np.array([1.0, 0.0]), top_k=2)

    assert [item.card.credit_card_name for item, _ in results] == ["A", "C"]
    assert results[0][1] == pytest.approx(1.0, abs=1e-6)
    assert isinstance(results[0][1], float)


def test_faiss_matches_linear_ranking(sample_store, mock_embedding_service):
    query = mock_embedding_service.get_embedding("no annual fee cash back")

    linear = LinearRetriever(sample_store).search(query, top_k=3)
    indexed = FaissRetriever(sample_store).search(query, top_k=3)

    assert [item.card_id for item, _ in indexed] == [item.card_id for item, _ in linear]
    for (_, score1), (_, score2) in zip(linear, indexed, strict=True):
        assert abs(score1 - score2) < 1e-5


def test_faiss_ties_keep_store_order(card_factory, store_factory):
    cards = [card_factory(name) for name in ["First", "Second", "Third"]]
    store = store_factory(cards, [[1.0, 0.0], [2.0, 0.0], [0.0, 1.0]])

    results = FaissRetriever(store).search(np.array([3.0, 0.0]), top_k=2)

    assert [item.card.credit_card_name for item, _ in results] == ["First", "Second"]


def test_faiss_empty_store():
    store = EmbeddingsStore(cards=[], embeddings=[], generated_at="")
    retriever = FaissRetriever(store)

    assert retriever.index is None
    assert retriever.search(np.array([1.0, 0.0]), top_k=3) == []


def test_faiss_top_k_larger_than_store(abc_store):
    results = FaissRetriever(abc_store).search(np.array([1.0, 0.0]), top_k=50)

    assert len(results) == 3


def test_get_retriever_faiss_backend(abc_store):
    retriever = get_retriever(abc_store, "FAISS")

    assert isinstance(retriever, FaissRetriever)
    assert retriever.index.ntotal == 3
