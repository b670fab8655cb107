"""Request boundary: JSON payload in, status code and JSON body out."""

from typing import Any

from .config import config
from .errors import ConfigurationError, ExternalServiceError
from .pipeline import RecommendationPipeline

logger = config.get_logger(__name__)

HTTP_OK = 200
HTTP_BAD_REQUEST = 400
HTTP_SERVER_ERROR = 500


def error_body(error: str, details: str | None = None) -> dict[str, str]:
    body = {"error": error}
    if details:
        body["details"] = details
    return body


def handle_recommendations_request(
    payload: Any,  # noqa: ANN401
    pipeline: RecommendationPipeline,
) -> tuple[int, dict[str, Any]]:
    """Answer a ``{"message": str}`` request.

    Returns:
        tuple[int, dict[str, Any]]: HTTP status code and JSON-ready body.
    """
    message = payload.get("message") if isinstance(payload, dict) else None
    if not isinstance(message, str) or not message.strip():
        return HTTP_BAD_REQUEST, error_body("Message is required")

    try:
        response = pipeline.recommend(message.strip())
    except ConfigurationError as e:
        logger.exception("Configuration error while generating recommendations")
        return HTTP_SERVER_ERROR, error_body("Server configuration error", str(e))
    except ExternalServiceError as e:
        logger.exception("Error generating recommendations")
        return HTTP_SERVER_ERROR, error_body(
            "Failed to generate recommendations",
            e.details or e.message,
        )
    except ValueError as e:
        logger.exception("Invalid data while generating recommendations")
        return HTTP_SERVER_ERROR, error_body(
            "Failed to generate recommendations", f"{type(e).__name__}: {e}"
        )

    return HTTP_OK, response.to_dict()
