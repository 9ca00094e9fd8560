"""gitcode1s exception classes."""

from typing import Any


class GitCode1sError(Exception):
    """Base exception for all gitcode1s errors."""

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")


class ConfigurationError(GitCode1sError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str) -> None:
        super().__init__("CONFIGURATION_ERROR", message)


class StateStoreError(GitCode1sError):
    """Raised when the persisted state cannot be written."""

    def __init__(self, message: str) -> None:
        super().__init__("STATE_STORE_ERROR", message)


class TransportError(GitCode1sError):
    """Raised when the provider cannot be reached at all."""

    def __init__(self, message: str) -> None:
        super().__init__("CONNECTION_ERROR", message)


class ApiError(GitCode1sError):
    """Raised for a non-2xx response from the provider."""

    def __init__(self, status: int, body: Any = None, message: str | None = None) -> None:
        self.status = status
        self.body = body
        super().__init__(f"HTTP_{status}", message or f"HTTP {status}")


class AuthenticationError(ApiError):
    """Raised on 401: the token is missing or no longer valid."""

    pass


class AuthorizationError(ApiError):
    """Raised on 403: access denied or rate limit exhausted."""

    pass


class NotFoundError(ApiError):
    """Raised when a resource is not found."""

    pass


class RateLimitedError(ApiError):
    """Raised when rate limited."""

    def __init__(
        self,
        status: int,
        body: Any = None,
        message: str | None = None,
        retry_after: int = 60,
    ) -> None:
        super().__init__(status, body, message)
        self.retry_after = retry_after


class ServerError(ApiError):
    """Raised on server errors (5xx)."""

    pass
