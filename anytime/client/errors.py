from typing import Optional


class AnytimeClientError(Exception):
    """A request the API refused or could not serve."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class RequestTimeoutError(AnytimeClientError):
    pass


class UsageLimitError(AnytimeClientError):
    """A free-tier ceiling was hit. Raised before any request is sent."""
