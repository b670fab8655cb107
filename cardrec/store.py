"""Offline generation and persistence of the card embeddings store."""

from __future__ import annotations

import datetime
import json
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np

from .config import config
from .context import card_document
from .errors import StoreError
from .models import CardEmbedding, CreditCard, EmbeddingsStore

if TYPE_CHECKING:
    from .embeddings import EmbeddingService

logger = config.get_logger(__name__)


def build_embeddings_store(
    cards: list[CreditCard],
    embedding_service: EmbeddingService,
    batch_size: int | None = None,
) -> EmbeddingsStore:
    """Embed every card description and stamp the generation time.

    Returns:
        EmbeddingsStore: Store with one embedding per card, in corpus order.
    """
    logger.info("Generating embeddings for %d cards", len(cards))
    documents = [card_document(card) for card in cards]
    vectors = embedding_service.get_embeddings_batch(documents, batch_size=batch_size)

    embeddings = [
        CardEmbedding(card_id=card.id, card=card, embedding=vector)
        for card, vector in zip(cards, vectors, strict=True)
    ]
    store = EmbeddingsStore(
        cards=list(cards),
        embeddings=embeddings,
        generated_at=datetime.datetime.now(tz=datetime.UTC).isoformat(),
    )
    validate_store(store)
    return store


def validate_store(store: EmbeddingsStore) -> None:
    """Check that all vectors share one dimension.

    Raises:
        StoreError: If dimensions differ or a vector is not one-dimensional.
    """
    dimension = store.dimension
    for item in store.embeddings:
        if item.embedding.ndim != 1 or item.embedding.shape[0] != dimension:
            msg = (
                f"Embedding for card {item.card_id} has shape "
                f"{item.embedding.shape}, expected ({dimension},)"
            )
            raise StoreError(msg)


def save_store(store: EmbeddingsStore, path: Path | None = None) -> Path:
    """Write the store as JSON.

    Args:
        store: Store to persist.
        path: Target file. If None, uses config.EMBEDDINGS_STORE_PATH.

    Returns:
        Path: The file written.
    """
    path = Path(path or config.EMBEDDINGS_STORE_PATH)
    path.parent.mkdir(exist_ok=True, parents=True)
    payload = {
        "generatedAt": store.generated_at,
        "cards": [card.to_dict() for card in store.cards],
        "embeddings": [
            {"cardId": item.card_id, "embedding": item.embedding.tolist()}
            for item in store.embeddings
        ],
    }
    with path.open("w", encoding="utf-8") as file:
        json.dump(payload, file)
    logger.info("Saved %d card embeddings to %s", len(store.embeddings), path)
    return path


def load_store(path: Path | None = None) -> EmbeddingsStore:
    """Load a store written by ``save_store``.

    Args:
        path: Store file. If None, uses config.EMBEDDINGS_STORE_PATH.

    Returns:
        EmbeddingsStore: The loaded store.

    Raises:
        StoreError: If the file is missing, malformed, or inconsistent.
    """
    path = Path(path or config.EMBEDDINGS_STORE_PATH)
    try:
        with path.open(encoding="utf-8") as file:
            payload = json.load(file)
    except FileNotFoundError as e:
        msg = (
            f"Embeddings store not found at {path}. "
            "Run `python main.py embed` first."
        )
        raise StoreError(msg) from e
    except (OSError, json.JSONDecodeError) as e:
        msg = f"Could not read embeddings store {path}: {e}"
        raise StoreError(msg) from e

    try:
        cards = [CreditCard.from_dict(item) for item in payload["cards"]]
        cards_by_id = {card.id: card for card in cards}
        embeddings = []
        for item in payload["embeddings"]:
            card_id = str(item["cardId"])
            if card_id not in cards_by_id:
                msg = f"Embedding references unknown card id {card_id}"
                raise StoreError(msg)
            embeddings.append(
                CardEmbedding(
                    card_id=card_id,
                    card=cards_by_id[card_id],
                    embedding=np.asarray(item["embedding"], dtype=np.float64),
                )
            )
        store = EmbeddingsStore(
            cards=cards,
            embeddings=embeddings,
            generated_at=str(payload.get("generatedAt", "")),
        )
    except StoreError:
        raise
    except (KeyError, TypeError, ValueError) as e:
        msg = f"Malformed embeddings store {path}: {e}"
        raise StoreError(msg) from e

    validate_store(store)
    logger.info(
        "Loaded %d card embeddings generated at %s",
        len(store.embeddings),
        store.generated_at,
    )
    return store
