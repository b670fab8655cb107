"""Card corpus loading from CSV files and published spreadsheets."""

import csv
import io
import re
from pathlib import Path

import httpx

from .config import config
from .errors import ExternalServiceError
from .models import AttributeValue, CreditCard

logger = config.get_logger(__name__)

NAME_COLUMNS = ("credit_card_name", "card_name", "name")
URL_COLUMNS = ("url_application", "apply_url", "application_url", "url")

_NUMBER_PATTERN = re.compile(r"^-?\d+(\.\d+)?$")


def normalize_header(header: str) -> str:
    """Convert a spreadsheet column header to a snake_case key.

    Returns:
        str: Lower-case key with runs of non-alphanumerics collapsed to ``_``.
    """
    return re.sub(r"[^0-9a-z]+", "_", header.strip().lower()).strip("_")


def coerce_value(raw: str) -> AttributeValue:
    """Turn numeric-looking cell text into int or float.

    Text is only converted when ``str()`` of the number reproduces it exactly,
    so prompt rendering shows what the sheet says.

    Returns:
        AttributeValue: The parsed number, or the stripped text.
    """
    value = raw.strip()
    if not _NUMBER_PATTERN.match(value):
        return value
    if "." in value:
        number = float(value)
        # "95.00" and "1.50" stay as written
        return number if str(number) == value else value
    # Keep identifiers such as "0123" as text
    if len(value.lstrip("-")) > 1 and value.lstrip("-").startswith("0"):
        return value
    return int(value)


class CardLoader:
    """Loads the credit card corpus from CSV sources."""

    @staticmethod
    def _first_present(row: dict[str, str], columns: tuple[str, ...]) -> str:
        for column in columns:
            value = (row.get(column) or "").strip()
            if value:
                return value
        return ""

    @classmethod
    def parse_rows(cls, rows: list[dict[str, str]]) -> list[CreditCard]:
        """Build cards from CSV rows keyed by original headers.

        Rows without a card name are skipped.

        Returns:
            list[CreditCard]: Cards in source order.

        Raises:
            ValueError: If two rows share the same id.
        """
        cards: list[CreditCard] = []
        seen_ids: set[str] = set()
        consumed = {"id", *NAME_COLUMNS, *URL_COLUMNS}

        for index, raw_row in enumerate(rows):
            row = {
                normalize_header(key): (value or "")
                for key, value in raw_row.items()
                if key is not None
            }
            name = cls._first_present(row, NAME_COLUMNS)
            if not name:
                logger.warning("Skipping row %d without a card name", index + 1)
                continue

            card_id = row.get("id", "").strip() or f"card-{index + 1}"
            if card_id in seen_ids:
                msg = f"Duplicate card id: {card_id}"
                raise ValueError(msg)
            seen_ids.add(card_id)

            attributes = {
                key: coerce_value(value)
                for key, value in row.items()
                if key and key not in consumed and value.strip()
            }
            cards.append(
                CreditCard(
                    id=card_id,
                    credit_card_name=name,
                    url_application=cls._first_present(row, URL_COLUMNS),
                    attributes=attributes,
                )
            )

        logger.info("Loaded %d credit cards", len(cards))
        return cards

    @classmethod
    def load_csv_text(cls, text: str) -> list[CreditCard]:
        """Parse cards from CSV text with a header row.

        Returns:
            list[CreditCard]: Parsed cards.
        """
        reader = csv.DictReader(io.StringIO(text))
        return cls.parse_rows(list(reader))

    @classmethod
    def load_csv(cls, file_path: Path) -> list[CreditCard]:
        """Load cards from a local CSV file.

        Returns:
            list[CreditCard]: Parsed cards.
        """
        try:
            with file_path.open(encoding="utf-8-sig", newline="") as file:
                text = file.read()
        except OSError:
            logger.exception("Error loading card CSV %s", file_path)
            raise
        return cls.load_csv_text(text)

    @classmethod
    def load_from_url(cls, url: str, timeout: float | None = None) -> list[CreditCard]:
        """Fetch cards from a published CSV export (e.g. Google Sheets).

        Returns:
            list[CreditCard]: Parsed cards.

        Raises:
            ExternalServiceError: If the sheet cannot be downloaded.
        """
        try:
            response = httpx.get(
                url,
                timeout=timeout if timeout is not None else config.CARDS_FETCH_TIMEOUT,
                headers=config.get_api_headers(),
                follow_redirects=True,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.exception("Error fetching card sheet")
            msg = "Failed to download the card data sheet"
            raise ExternalServiceError.from_exception(msg, e) from e

        return cls.load_csv_text(response.text)

    @classmethod
    def load(
        cls,
        file_path: Path | None = None,
        url: str | None = None,
    ) -> list[CreditCard]:
        """Load cards from a URL if given, otherwise from a CSV file.

        Args:
            file_path: Local CSV path. If None, uses config.CARDS_CSV_PATH.
            url: Published CSV URL. If None, uses config.CARDS_SHEET_URL.

        Returns:
            list[CreditCard]: Parsed cards.
        """
        url = url or config.CARDS_SHEET_URL
        if url:
            return cls.load_from_url(url)
        return cls.load_csv(file_path or config.CARDS_CSV_PATH)
