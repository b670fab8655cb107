"""Rendering of candidate cards into prompt text."""

from .models import AttributeValue, CardEmbedding, CreditCard


def format_value(value: AttributeValue) -> str:
    return value if isinstance(value, str) else str(value)


def card_to_text(card: CreditCard) -> str:
    """Render a card's descriptive attributes as ``key: value`` pairs.

    Empty values are skipped; attribute order is preserved.

    Returns:
        str: Comma separated attribute text.
    """
    parts = [
        f"{key}: {format_value(value)}"
        for key, value in card.attributes.items()
        if format_value(value).strip()
    ]
    return ", ".join(parts)


def card_document(card: CreditCard) -> str:
    """Text embedded for a card in the offline store.

    Returns:
        str: Card name followed by its attribute text.
    """
    text = card_to_text(card)
    return f"{card.credit_card_name}. {text}" if text else card.credit_card_name


def format_cards_for_context(candidates: list[CardEmbedding]) -> str:
    """Format candidate cards for the LLM context, one line per card.

    Returns:
        str: Lines of ``name | attributes | URL: url`` joined by newlines.
    """
    return "\n".join(
        f"{item.card.credit_card_name} | {card_to_text(item.card)} | "
        f"URL: {item.card.url_application}"
        for item in candidates
    )
