"""Error types raised by the search pipeline."""

from typing import Optional


class ApollyoError(Exception):
    """Base class for all pipeline errors."""


class ValidationError(ApollyoError):
    """Bad filter or request shape. The message is shown to the user as-is."""

    def __init__(self, message: str, errors: Optional[list] = None):
        super().__init__(message)
        self.errors = errors or [message]


class SearchTimeoutError(ApollyoError):
    """The search did not finish before the request deadline."""

    def __init__(self, timeout: float):
        super().__init__(
            f"Search timed out after {timeout:g}s. Try reducing depth or max results."
        )
        self.timeout = timeout


class SourceFetchError(ApollyoError):
    """A single crawl source could not be fetched."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class UpstreamAnalysisError(ApollyoError):
    """The optional AI analysis call failed."""


class RateLimitError(ApollyoError):
    """Too many requests from one client inside the window."""

    def __init__(self, client_id: str, retry_after: int):
        super().__init__(f"Too many requests. Please try again in {retry_after}s.")
        self.client_id = client_id
        self.retry_after = retry_after


class UnexpectedError(ApollyoError):
    """Catch-all reported without internal details."""

    def __init__(self, message: str = "An unexpected error occurred. Please try again."):
        super().__init__(message)
