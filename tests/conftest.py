"""Test configuration and fixtures for CardRec tests.

This module provides reusable test fixtures organized by functionality:
- Constants and test data
- Mock services and API responses
- EmbeddingService fixtures
- Card corpus and embeddings store fixtures
- Generator and pipeline fixtures
"""

import hashlib
from contextlib import contextmanager
from unittest.mock import Mock, patch

import numpy as np
import pytest
from openai import OpenAIError

from cardrec import (
    CardEmbedding,
    CreditCard,
    EmbeddingService,
    EmbeddingsStore,
    RecommendationGenerator,
    RecommendationPipeline,
)
from cardrec.context import card_document


class TestConstants:
    """Centralized test constants to avoid repetition across test files."""

    # API Configuration
    TEST_API_KEY = "test-key"
    TEST_OPENAI_MODEL = "text-embedding-3-small"
    TEST_CHAT_MODEL = "gpt-3.5-turbo"
    DEFAULT_EMBEDDING_DIMENSION = 384

    # Store Configuration
    GENERATED_AT = "2024-01-01T00:00:00+00:00"


class MockEmbeddingService:
    """Mock embedding service for testing without API calls.

    Generates deterministic embeddings based on text content hash,
    ensuring consistent test results across runs.
    """

    def __init__(
        self, dimension: int = TestConstants.DEFAULT_EMBEDDING_DIMENSION
    ) -> None:
        self.dimension = dimension
        self.calls: list[str] = []

    def get_embedding(self, text: str) -> np.ndarray:
        """Generate deterministic mock embedding based on text hash."""
        self.calls.append(text)
        seed = int.from_bytes(
            hashlib.sha256(text.lower().encode("utf-8")).digest()[:8],
            byteorder="big",
            signed=False,
        )
        rng = np.random.default_rng(seed)
        embedding = rng.normal(0, 1, self.dimension)
        return embedding / np.linalg.norm(embedding)

    def get_embeddings_batch(
        self,
        texts: list[str],
        batch_size: int | None = None,  # noqa: ARG002
    ) -> list[np.ndarray]:
        """Generate batch of mock embeddings."""
        return [self.get_embedding(text) for text in texts]


def create_mock_openai_response(embeddings: list[list[float]]) -> Mock:
    """Create a mock OpenAI embeddings API response.

    Args:
        embeddings: List of embedding vectors to return.

    Returns:
        Mock object representing OpenAI embeddings API response.
    """
    mock_response = Mock()
    mock_response.data = [Mock(embedding=emb) for emb in embeddings]
    return mock_response


def create_mock_chat_response(content: str | None) -> Mock:
    """Create a mock OpenAI chat completion response.

    Args:
        content: The content for the chat completion response.

    Returns:
        Mock object representing OpenAI chat completion response.
    """
    mock_response = Mock()
    mock_response.choices = [Mock(message=Mock(content=content))]
    return mock_response


def make_card(name: str, **attributes) -> CreditCard:
    """Build a card whose id and URL are derived from its name."""
    slug = name.lower().replace(" ", "-")
    return CreditCard(
        id=slug,
        credit_card_name=name,
        url_application=f"https://example.com/apply/{slug}",
        attributes=attributes,
    )


def make_store(
    cards: list[CreditCard], vectors: list[list[float]] | list[np.ndarray]
) -> EmbeddingsStore:
    """Build an in-memory store pairing cards with the given vectors."""
    return EmbeddingsStore(
        cards=list(cards),
        embeddings=[
            CardEmbedding(
                card_id=card.id,
                card=card,
                embedding=np.asarray(vector, dtype=np.float64),
            )
            for card, vector in zip(cards, vectors, strict=True)
        ],
        generated_at=TestConstants.GENERATED_AT,
    )


@pytest.fixture
def openai_embeddings_api_mock():
    """Base fixture that patches OpenAI embeddings.create method."""
    with patch("openai.resources.embeddings.Embeddings.create") as mock_create:
        yield mock_create


@pytest.fixture
def openai_chat_api_mock():
    """Patch chat.completions.create for every OpenAI client."""
    with patch("openai.resources.chat.completions.Completions.create") as mock_create:
        mock_create.return_value = create_mock_chat_response('{"cards": []}')
        yield mock_create


@pytest.fixture
def openai_embeddings_factory(openai_embeddings_api_mock):
    """Factory for creating OpenAI embeddings API mocks with different scenarios."""

    def _create_mock(  # noqa: ANN202
        scenario="single_success",
        embeddings=None,
        error_message="API Error",
        side_effects=None,
    ):
        """Create a mock based on scenario type.

        Args:
            scenario: Type of mock ('single_success', 'batch_success', 'error',
                'multiple_batches', 'partial_failure')
            embeddings: Custom embeddings to return, or None for defaults
            error_message: Custom error message for error scenarios
            side_effects: Custom side effects list for complex scenarios
        """
        openai_embeddings_api_mock.reset_mock()
        openai_embeddings_api_mock.side_effect = None
        openai_embeddings_api_mock.return_value = None

        if scenario == "single_success":
            mock_embedding = embeddings or [0.1, 0.2, 0.3, 0.4, 0.5]
            mock_response = create_mock_openai_response([mock_embedding])
            openai_embeddings_api_mock.return_value = mock_response
        elif scenario == "batch_success":
            mock_embeddings = embeddings or [
                [0.1, 0.2, 0.3],
                [0.4, 0.5, 0.6],
                [0.7, 0.8, 0.9],
            ]
            mock_response = create_mock_openai_response(mock_embeddings)
            openai_embeddings_api_mock.return_value = mock_response
        elif scenario == "error":
            openai_embeddings_api_mock.side_effect = OpenAIError(error_message)
        elif scenario == "multiple_batches":
            if side_effects:
                openai_embeddings_api_mock.side_effect = side_effects
            else:
                mock_embedding1 = [[0.1, 0.2], [0.3, 0.4]]
                mock_embedding2 = [[0.5, 0.6], [0.7, 0.8]]
                openai_embeddings_api_mock.side_effect = [
                    create_mock_openai_response(mock_embedding1),
                    create_mock_openai_response(mock_embedding2),
                ]
        elif scenario == "partial_failure":
            mock_response = create_mock_openai_response([[0.1, 0.2]])
            openai_embeddings_api_mock.side_effect = [
                mock_response,
                OpenAIError("Second batch failed"),
            ]

        return openai_embeddings_api_mock

    return _create_mock


@pytest.fixture
def embedding_service_factory():
    """Factory for creating EmbeddingService instances with different configurations."""

    def _create_service(api_key=None, model=None, dimension=None):  # noqa: ANN202
        api_key = api_key or TestConstants.TEST_API_KEY
        return EmbeddingService(
            api_key=api_key,
            model=model or TestConstants.TEST_OPENAI_MODEL,
            dimension=dimension,
        )

    return _create_service


@pytest.fixture
def embedding_service(embedding_service_factory):
    """Default EmbeddingService with test API key for most tests."""
    return embedding_service_factory()


@pytest.fixture(scope="session")
def mock_embedding_service():
    """Pre-configured MockEmbeddingService for consistent test embeddings."""
    return MockEmbeddingService()


@pytest.fixture
def abc_store():
    """Three cards A, B, C at [1, 0], [0, 1] and [0.7, 0.7]."""
    cards = [make_card("A"), make_card("B"), make_card("C")]
    return make_store(cards, [[1.0, 0.0], [0.0, 1.0], [0.7, 0.7]])


@pytest.fixture
def sample_cards():
    """A small card corpus with mixed string and numeric attributes."""
    return [
        make_card(
            "Travel Rewards Plus",
            annual_fee=95,
            rewards="3x points on travel and dining",
            foreign_transaction_fee="None",
        ),
        make_card(
            "Cash Back Everyday",
            annual_fee=0,
            rewards="2% cash back on everything",
        ),
        make_card(
            "Grocery Gold",
            annual_fee=250,
            rewards="4x points at supermarkets and gas stations",
        ),
        make_card(
            "Student Starter",
            annual_fee=0,
            rewards="1% cash back",
            credit_score="Fair",
        ),
        make_card(
            "Premium Lounge",
            annual_fee=550,
            rewards="Airport lounge access and travel credits",
            intro_apr=0.0,
        ),
    ]


@pytest.fixture
def sample_store(sample_cards, mock_embedding_service):
    """Store of the sample cards embedded with the mock service."""
    vectors = mock_embedding_service.get_embeddings_batch([
        card_document(card) for card in sample_cards
    ])
    return make_store(sample_cards, vectors)


@pytest.fixture
def generator():
    """RecommendationGenerator with a test API key."""
    return RecommendationGenerator(openai_api_key=TestConstants.TEST_API_KEY)


@pytest.fixture
def generator_chat_mock_factory():
    """Factory mock fixture for a generator's client.chat.completions.create."""

    @contextmanager
    def _mock_generator_chat(  # noqa: ANN202
        generator, content: str | None = '{"cards": []}', side_effect=None
    ):
        with patch.object(
            generator.client.chat.completions,
            "create",
        ) as mock_create:
            if side_effect is not None:
                mock_create.side_effect = side_effect
                mock_create.return_value = None
            else:
                mock_create.side_effect = None
                mock_create.return_value = create_mock_chat_response(content)
            yield mock_create

    return _mock_generator_chat


@pytest.fixture
def pipeline_factory(mock_embedding_service):
    """Factory for pipelines over an in-memory store with mock embeddings."""

    def _create_pipeline(  # noqa: ANN202
        store,
        top_k=12,
        embedding_service=None,
        openai_api_key=TestConstants.TEST_API_KEY,
        retriever_backend="linear",
    ):
        return RecommendationPipeline(
            store=store,
            openai_api_key=openai_api_key,
            top_k=top_k,
            retriever_backend=retriever_backend,
            embedding_service=embedding_service or mock_embedding_service,
            generator=RecommendationGenerator(
                openai_api_key=openai_api_key or TestConstants.TEST_API_KEY
            ),
        )

    return _create_pipeline


@pytest.fixture
def card_factory():
    """Factory building cards whose id and URL derive from the name."""
    return make_card


@pytest.fixture
def store_factory():
    """Factory building in-memory stores from cards and vectors."""
    return make_store


@pytest.fixture
def mock_embedding_service_factory():
    """Factory for fresh MockEmbeddingService instances with their own call log."""
    return MockEmbeddingService


@pytest.fixture
def chat_response_factory():
    """Factory building mock chat completion responses."""
    return create_mock_chat_response
