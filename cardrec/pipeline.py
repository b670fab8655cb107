"""Main RAG pipeline orchestrating Embed -> Retrieve -> Generate -> Assemble."""

from pathlib import Path

from .config import config
from .embeddings import EmbeddingService
from .generator import GenerationResult, RecommendationGenerator
from .models import CardEmbedding, EmbeddingsStore, RecommendationsResponse
from .retriever import Retriever, get_retriever
from .store import load_store

logger = config.get_logger(__name__)

NO_MATCHES_MESSAGE = "No matching cards found."


def assemble_response(result: GenerationResult) -> RecommendationsResponse:
    """Wrap generator output in the response shape callers expect.

    Returns:
        RecommendationsResponse: Recommendations plus the raw model answer.
    """
    return RecommendationsResponse(
        recommendations=list(result.recommendations),
        raw_model_answer=result.raw_answer,
    )


class RecommendationPipeline:
    """Answers a single credit card question against a shared card store."""

    def __init__(  # noqa: PLR0913,PLR0917
        self,
        store: EmbeddingsStore | None = None,
        openai_api_key: str | None = None,
        top_k: int | None = None,
        store_path: Path | None = None,
        retriever_backend: str | None = None,
        embedding_service: EmbeddingService | None = None,
        generator: RecommendationGenerator | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            store: Preloaded embeddings store. If None, loads from ``store_path``.
            openai_api_key: OpenAI API key. If None, reads OPENAI_API_KEY.
            top_k: Candidates passed to the model. If None, uses
                config.TOP_N_CARDS.
            store_path: Embeddings store file. If None, uses
                config.EMBEDDINGS_STORE_PATH.
            retriever_backend: "linear" or "faiss". Defaults to
                config.RETRIEVER_BACKEND.
            embedding_service: Query embedder override.
            generator: Recommendation generator override.
        """
        self.openai_api_key = openai_api_key
        self.top_k = top_k if top_k is not None else config.TOP_N_CARDS
        self.store = store if store is not None else load_store(store_path)
        self.retriever: Retriever = get_retriever(self.store, retriever_backend)
        self.embedding_service = embedding_service or EmbeddingService(
            api_key=openai_api_key,
            dimension=self.store.dimension,
        )
        self.generator = generator or RecommendationGenerator(
            openai_api_key=openai_api_key
        )
        logger.info(
            "Recommendation pipeline ready: %d cards, %s retriever, top_k=%d",
            len(self.store),
            self.retriever.backend,
            self.top_k,
        )

    def _check_credentials(self) -> None:
        if self.openai_api_key:
            return
        config.validate()

    def retrieve(self, question: str) -> list[tuple[CardEmbedding, float]]:
        """Embed the question and return the top-K similar cards.

        Returns:
            A list of (CardEmbedding, score) tuples, best first.
        """
        logger.info("Embedding user query")
        query_embedding = self.embedding_service.get_embedding(question)
        logger.info("Finding top %d similar cards", self.top_k)
        return self.retriever.search(query_embedding, top_k=self.top_k)

    def recommend(self, question: str) -> RecommendationsResponse:
        """Generate credit card recommendations for one question.

        Returns:
            RecommendationsResponse: Validated picks plus the raw model text.

        Raises:
            ConfigurationError: If no OpenAI API key is available.
            ValueError: If the question is empty.
            ExternalServiceError: If the embedding or chat call fails.
        """
        self._check_credentials()
        if not question or not question.strip():
            msg = "Question must not be empty"
            raise ValueError(msg)

        logger.info("Processing question: %s", question)
        scored = self.retrieve(question)
        if not scored:
            return RecommendationsResponse(
                recommendations=[],
                raw_model_answer=NO_MATCHES_MESSAGE,
            )

        for item, score in scored:
            logger.debug(
                "Candidate %s (score: %.4f)", item.card.credit_card_name, score
            )

        candidates = [item for item, _ in scored]
        result = self.generator.generate(question, candidates)
        return assemble_response(result)
