"""Data models for the recommendation application."""

from dataclasses import dataclass, field
from typing import Any, Literal

import numpy as np

AttributeValue = str | int | float


@dataclass(frozen=True)
class CreditCard:
    """A credit card record from the card corpus."""

    id: str
    credit_card_name: str
    url_application: str
    attributes: dict[str, AttributeValue] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Flatten the card into a single JSON-compatible mapping.

        Returns:
            dict[str, Any]: Identifying fields followed by the attributes.
        """
        return {
            "id": self.id,
            "credit_card_name": self.credit_card_name,
            "url_application": self.url_application,
            **self.attributes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CreditCard":
        """Build a card from the flat mapping produced by ``to_dict``.

        Returns:
            CreditCard: The reconstructed card.
        """
        reserved = {"id", "credit_card_name", "url_application"}
        return cls(
            id=str(data["id"]),
            credit_card_name=str(data["credit_card_name"]),
            url_application=str(data.get("url_application", "")),
            attributes={k: v for k, v in data.items() if k not in reserved},
        )


@dataclass
class CardEmbedding:
    """Embedding vector for a single card."""

    card_id: str
    card: CreditCard
    embedding: np.ndarray


@dataclass
class EmbeddingsStore:
    """Precomputed card embeddings generated offline."""

    cards: list[CreditCard]
    embeddings: list[CardEmbedding]
    generated_at: str

    @property
    def dimension(self) -> int | None:
        """Shared vector dimensionality, or None for an empty store."""
        if not self.embeddings:
            return None
        return int(self.embeddings[0].embedding.shape[0])

    def __len__(self) -> int:
        return len(self.embeddings)


@dataclass(frozen=True)
class Recommendation:
    """A single validated card pick from the language model."""

    credit_card_name: str
    apply_url: str
    reason: str

    def to_dict(self) -> dict[str, str]:
        return {
            "credit_card_name": self.credit_card_name,
            "apply_url": self.apply_url,
            "reason": self.reason,
        }


@dataclass
class RecommendationsResponse:
    """Response returned to the caller for one question."""

    recommendations: list[Recommendation]
    raw_model_answer: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the wire field names.

        Returns:
            dict[str, Any]: ``recommendations`` plus ``rawModelAnswer`` when set.
        """
        payload: dict[str, Any] = {
            "recommendations": [rec.to_dict() for rec in self.recommendations],
        }
        if self.raw_model_answer is not None:
            payload["rawModelAnswer"] = self.raw_model_answer
        return payload


@dataclass
class ChatMessage:
    """Represents a single turn in the chat UI."""

    role: Literal["user", "assistant"]
    content: str
    recommendations: list[Recommendation] = field(default_factory=list)
