from typing import Any, Optional


class EnrichmentError(Exception):
    """Base class for every error the node surfaces for an input item."""

    def __init__(self, message: str, *, item_index: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.item_index = item_index


class ValidationError(EnrichmentError):
    pass


class SubmissionError(EnrichmentError):
    def __init__(self, message: str, *, raw: Any = None, item_index: Optional[int] = None):
        super().__init__(message, item_index=item_index)
        self.raw = raw


class EnrichmentFailedError(EnrichmentError):
    def __init__(self, message: str, *, remote_error: str, item_index: Optional[int] = None):
        super().__init__(message, item_index=item_index)
        self.remote_error = remote_error


class EnrichmentTimeoutError(EnrichmentError):
    def __init__(self, timeout_seconds: float, *, item_index: Optional[int] = None):
        super().__init__(
            f"Enrichment timed out after {timeout_seconds:g} seconds",
            item_index=item_index,
        )
        self.timeout_seconds = timeout_seconds


class PollError(EnrichmentError):
    pass


class ApiRequestError(RuntimeError):
    """Transport failure talking to the Wiza API (non-2xx or connection error)."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


def attach_item_index(error: Exception, index: int) -> EnrichmentError:
    # domain errors keep their type; anything else is wrapped
    if isinstance(error, EnrichmentError):
        error.item_index = index
        return error
    return EnrichmentError(str(error) or type(error).__name__, item_index=index)
