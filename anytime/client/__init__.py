from anytime.client.api import AnytimeClient
from anytime.client.editor import AvailabilityEditor
from anytime.client.errors import AnytimeClientError, RequestTimeoutError, UsageLimitError

__all__ = [
    "AnytimeClient",
    "AnytimeClientError",
    "AvailabilityEditor",
    "RequestTimeoutError",
    "UsageLimitError",
]
