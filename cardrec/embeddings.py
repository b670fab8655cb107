"""OpenAI embeddings service."""

import numpy as np
from openai import OpenAI, OpenAIError

from .config import config
from .errors import ExternalServiceError

logger = config.get_logger(__name__)


class EmbeddingService:
    """Handles OpenAI embeddings generation."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        dimension: int | None = None,
    ) -> None:
        """Initialize the EmbeddingService with OpenAI API key and model.

        Args:
            api_key: OpenAI API key. If None,
                reads from OPENAI_API_KEY environment variable.
            model: Embedding model name. If None, uses config.EMBEDDING_MODEL.
            dimension: Expected vector length. If None, uses
                config.EMBEDDING_DIMENSION; no check is made when both are None.
        """
        api_key = api_key or config.get_openai_api_key()
        default_headers = config.get_api_headers()
        self.client = OpenAI(
            api_key=api_key,
            base_url=config.OPENAI_BASE_URL,
            default_headers=default_headers or None,
            timeout=config.OPENAI_TIMEOUT,
            max_retries=config.OPENAI_MAX_RETRIES,
        )
        self.model = model or config.EMBEDDING_MODEL
        self.dimension = (
            dimension if dimension is not None else config.EMBEDDING_DIMENSION
        )

    def _check_vector(self, values: object) -> np.ndarray:
        embedding = np.asarray(values, dtype=np.float64)
        if embedding.ndim != 1 or embedding.size == 0:
            msg = "Embedding model returned a malformed vector"
            raise ExternalServiceError(msg, details=f"shape={embedding.shape}")
        if self.dimension is not None and embedding.shape[0] != self.dimension:
            msg = "Embedding model returned a vector of unexpected dimension"
            raise ExternalServiceError(
                msg,
                details=f"expected {self.dimension}, got {embedding.shape[0]}",
            )
        return embedding

    def get_embedding(self, text: str) -> np.ndarray:
        """Get embedding for a single text.

        Args:
            text: The input text to generate an embedding for.

        Returns:
            np.ndarray: The embedding vector for the input text.

        Raises:
            ValueError: If the text is empty.
            ExternalServiceError: If the API call fails or returns bad data.
        """
        if not text or not text.strip():
            msg = "Cannot embed empty text"
            raise ValueError(msg)

        try:
            response = self.client.embeddings.create(
                model=self.model,
                input=text,
            )
            values = response.data[0].embedding
        except OpenAIError as e:
            logger.exception("Error generating embedding")
            msg = "Embedding request failed"
            raise ExternalServiceError.from_exception(
                msg, e, secret=self.client.api_key
            ) from e
        except (AttributeError, IndexError, TypeError) as e:
            logger.exception("Malformed embedding response")
            msg = "Embedding model returned a malformed response"
            raise ExternalServiceError.from_exception(msg, e) from e

        return self._check_vector(values)

    def get_embeddings_batch(
        self,
        texts: list[str],
        batch_size: int | None = None,
    ) -> list[np.ndarray]:
        """Get embeddings for multiple texts in batches.

        Args:
            texts: List of input texts to generate embeddings for.
            batch_size: Number of texts to process in each batch. If None, uses
                config.EMBEDDING_BATCH_SIZE.

        Returns:
            list[np.ndarray]: List of embedding vectors for the input texts.

        Raises:
            ExternalServiceError: If any batch fails or returns the wrong count.
        """
        batch_size = batch_size or config.EMBEDDING_BATCH_SIZE
        embeddings: list[np.ndarray] = []

        for i in range(0, len(texts), batch_size):
            batch_texts = texts[i : i + batch_size]
            try:
                response = self.client.embeddings.create(
                    model=self.model,
                    input=batch_texts,
                )
            except OpenAIError as e:
                logger.exception("Error generating batch embeddings")
                msg = "Batch embedding request failed"
                raise ExternalServiceError.from_exception(
                    msg, e, secret=self.client.api_key
                ) from e

            if len(response.data) != len(batch_texts):
                msg = "Embedding model returned the wrong number of vectors"
                raise ExternalServiceError(
                    msg,
                    details=f"expected {len(batch_texts)}, got {len(response.data)}",
                )
            embeddings.extend(
                self._check_vector(data.embedding) for data in response.data
            )
            logger.info("Generated embeddings for batch %d", i // batch_size + 1)

        return embeddings
