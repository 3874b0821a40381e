"""GitHub client exceptions."""


class GitHubClientError(Exception):
    """Base exception for GitHub client errors."""

    pass


class MissingCredentialError(GitHubClientError):
    """Raised when no GitHub token is configured.

    This is a configuration defect and is never retried.
    """

    pass


class UpstreamError(GitHubClientError):
    """Raised for a failed GitHub call that is not recoverable by retrying.

    Covers non-success responses that are not rate limits, rate-limit
    responses without a usable retry-after header, transport failures,
    and malformed response bodies.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimitExceededError(GitHubClientError):
    """Raised when a call is still rate limited after the retry ceiling."""

    def __init__(
        self,
        message: str,
        attempts: int = 0,
        retry_after: int | None = None,
    ) -> None:
        super().__init__(message)
        self.attempts = attempts
        self.retry_after = retry_after


class CountUnavailableError(GitHubClientError):
    """Raised when pagination metadata is insufficient to derive a count."""

    pass


class CountTimeoutError(GitHubClientError):
    """Raised when a count does not finish within the caller's timeout."""

    def __init__(self, message: str, timeout: float | None = None) -> None:
        super().__init__(message)
        self.timeout = timeout
