"""Exception types raised by the recommendation pipeline."""


class CardRecError(Exception):
    """Base class for CardRec errors."""


class ConfigurationError(CardRecError, ValueError):
    """Required configuration is missing or invalid."""


class StoreError(CardRecError, ValueError):
    """The persisted embeddings store is unreadable or inconsistent."""


class ExternalServiceError(CardRecError, RuntimeError):
    """An embedding, chat or data-source call failed.

    Attributes:
        details: Diagnostic text (error class and message) safe to show users.
    """

    def __init__(self, message: str, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    @classmethod
    def from_exception(
        cls,
        message: str,
        exc: BaseException,
        *,
        secret: str | None = None,
    ) -> "ExternalServiceError":
        """Wrap a client exception, keeping its class name and message.

        Args:
            message: Human readable summary of the failed operation.
            exc: The underlying client exception.
            secret: Credential to mask if the client echoed it back.

        Returns:
            ExternalServiceError with ``details`` describing ``exc``.
        """
        details = f"{type(exc).__name__}: {exc}"
        if secret:
            details = details.replace(secret, "***")
        return cls(message, details=details)
