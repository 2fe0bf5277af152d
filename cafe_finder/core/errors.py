from typing import Optional


class SearchError(Exception):
    """Base class for failures surfaced by the proximity search pipeline."""

    code = "SEARCH_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidArgument(SearchError):
    """Malformed or out-of-range request input. Raised before any store access."""

    code = "INVALID_ARGUMENT"

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class UpstreamUnavailable(SearchError):
    """The record store could not answer. Never converted into an empty result."""

    code = "UPSTREAM_UNAVAILABLE"

    def __init__(self, stage: str, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.stage = stage
        self.cause = cause


class StoreConfigurationError(Exception):
    """Raised at startup when the configured record store cannot be built."""
