"""Error taxonomy shared by gateways and routes."""


class AskDocsError(Exception):
    """Base class for errors surfaced to API callers."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(AskDocsError):
    """A required setting is absent."""

    pass


class InputValidationError(AskDocsError):
    """Client input is missing or malformed."""

    pass


class PayloadTooLargeError(InputValidationError):
    """Upload exceeds the configured size ceiling."""

    pass


class NotFoundError(AskDocsError):
    """Referenced document does not exist."""

    pass


class BackendError(AskDocsError):
    """A managed service call failed."""

    pass
