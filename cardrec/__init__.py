"""CardRec - Credit Card Recommendation RAG Chat."""

from .cards import CardLoader
from .context import card_to_text, format_cards_for_context
from .embeddings import EmbeddingService
from .errors import (
    CardRecError,
    ConfigurationError,
    ExternalServiceError,
    StoreError,
)
from .generator import GenerationResult, RecommendationGenerator
from .models import (
    CardEmbedding,
    ChatMessage,
    CreditCard,
    EmbeddingsStore,
    Recommendation,
    RecommendationsResponse,
)
from .pipeline import RecommendationPipeline, assemble_response
from .retriever import LinearRetriever, Retriever, get_retriever
from .store import build_embeddings_store, load_store, save_store

__all__ = [
    "CardEmbedding",
    "CardLoader",
    "CardRecError",
    "ChatMessage",
    "ConfigurationError",
    "CreditCard",
    "EmbeddingService",
    "EmbeddingsStore",
    "ExternalServiceError",
    "GenerationResult",
    "LinearRetriever",
    "Recommendation",
    "RecommendationGenerator",
    "RecommendationPipeline",
    "RecommendationsResponse",
    "Retriever",
    "StoreError",
    "assemble_response",
    "build_embeddings_store",
    "card_to_text",
    "format_cards_for_context",
    "get_retriever",
    "load_store",
    "save_store",
]
