"""Errors raised by the restock notification core."""


class RestockError(Exception):
    """Base class for all service errors."""


class ValidationError(RestockError):
    """A stock request is missing a required field.

    Raised before anything is written to the store.
    """

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field


class NotConnectedError(RestockError):
    """The email transport is unconfigured or unreachable."""
