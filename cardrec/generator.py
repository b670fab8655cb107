"""LLM-backed recommendation generation with candidate validation."""

import json
from dataclasses import dataclass, field
from typing import Any

from openai import OpenAI, OpenAIError

from .config import config
from .context import format_cards_for_context
from .errors import ExternalServiceError
from .models import CardEmbedding, Recommendation

logger = config.get_logger(__name__)

SYSTEM_PROMPT = """Recommend 3-5 credit cards from the candidate list. Return JSON:
{
  "cards": [
    {
      "credit_card_name": "exact name from candidate",
      "apply_url": "exact URL from candidate",
      "reason": "2-3 sentence explanation"
    }
  ]
}"""

REQUIRED_FIELDS = ("credit_card_name", "apply_url", "reason")


@dataclass
class GenerationResult:
    """Validated recommendations plus the unmodified model text."""

    recommendations: list[Recommendation] = field(default_factory=list)
    raw_answer: str = ""


def build_user_prompt(question: str, context: str) -> str:
    """Build the user turn with the question and candidate lines.

    Returns:
        str: Prompt text sent as the user message.
    """
    return (
        f"Question: {question}\n\n"
        f"Candidates:\n{context}\n\n"
        "Return JSON with best matches."
    )


def parse_recommendations(raw_answer: str) -> list[dict[str, Any]]:
    """Extract candidate recommendation objects from model output.

    Malformed JSON, a non-object payload, or a missing ``cards`` list all
    yield an empty list.

    Returns:
        list[dict[str, Any]]: The raw recommendation objects.
    """
    try:
        parsed = json.loads(raw_answer)
    except (json.JSONDecodeError, TypeError):
        logger.warning("Failed to parse LLM response as JSON")
        return []

    if not isinstance(parsed, dict):
        logger.warning("LLM response JSON is not an object")
        return []

    cards = parsed.get("cards")
    if not isinstance(cards, list):
        return []
    return [item for item in cards if isinstance(item, dict)]


def validate_recommendations(
    items: list[dict[str, Any]],
    candidates: list[CardEmbedding],
) -> list[Recommendation]:
    """Keep only complete recommendations that match a card in ``candidates``.

    Both the name and the apply URL must equal a candidate card's stored
    ``credit_card_name`` and ``url_application``.

    Returns:
        list[Recommendation]: Accepted recommendations in model order.
    """
    candidate_urls: dict[str, set[str]] = {}
    for candidate in candidates:
        candidate_urls.setdefault(candidate.card.credit_card_name, set()).add(
            candidate.card.url_application
        )
    valid: list[Recommendation] = []

    for item in items:
        values = [item.get(key) for key in REQUIRED_FIELDS]
        if not all(isinstance(value, str) and value.strip() for value in values):
            logger.debug("Dropping incomplete recommendation: %s", item)
            continue
        name, apply_url, reason = values
        if name not in candidate_urls:
            logger.info("Dropping recommendation for unknown card %r", name)
            continue
        if apply_url not in candidate_urls[name]:
            logger.info(
                "Dropping recommendation for %r with unknown URL %r", name, apply_url
            )
            continue
        valid.append(
            Recommendation(credit_card_name=name, apply_url=apply_url, reason=reason)
        )

    return valid


class RecommendationGenerator:
    """Asks the chat model to pick and justify cards from the candidates."""

    def __init__(
        self,
        openai_api_key: str | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> None:
        """Initialize RecommendationGenerator.

        Args:
            openai_api_key: OpenAI API key.
            model: Chat model name. If None, uses config.CHAT_MODEL.
            max_tokens: Completion limit. If None, uses config.CHAT_MAX_TOKENS.
            temperature: Sampling temperature. If None, uses config.CHAT_TEMPERATURE.
        """
        default_headers = config.get_api_headers()
        self.client = OpenAI(
            api_key=openai_api_key or config.get_openai_api_key(),
            base_url=config.OPENAI_BASE_URL,
            default_headers=default_headers or None,
            timeout=config.OPENAI_TIMEOUT,
            max_retries=config.OPENAI_MAX_RETRIES,
        )
        self.model = model or config.CHAT_MODEL
        self.max_tokens = (
            max_tokens if max_tokens is not None else config.CHAT_MAX_TOKENS
        )
        self.temperature = (
            temperature if temperature is not None else config.CHAT_TEMPERATURE
        )

    def complete(self, question: str, context: str) -> str:
        """Run the chat completion and return the raw model text.

        Raises:
            ExternalServiceError: If the chat completion call fails.
        """
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_user_prompt(question, context)},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                response_format={"type": "json_object"},
            )
        except OpenAIError as e:
            logger.exception("Chat completion failed")
            msg = "Failed to generate recommendations"
            raise ExternalServiceError.from_exception(
                msg, e, secret=self.client.api_key
            ) from e

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    def generate(
        self,
        question: str,
        candidates: list[CardEmbedding],
    ) -> GenerationResult:
        """Generate recommendations restricted to ``candidates``.

        Returns:
            GenerationResult: Validated picks and the raw model text.
        """
        context = format_cards_for_context(candidates)
        logger.info("Calling LLM with %d candidate cards", len(candidates))
        raw_answer = self.complete(question, context)
        logger.info("LLM response received")

        recommendations = validate_recommendations(
            parse_recommendations(raw_answer), candidates
        )
        logger.info(
            "Accepted %d recommendations from model output", len(recommendations)
        )
        return GenerationResult(recommendations=recommendations, raw_answer=raw_answer)
