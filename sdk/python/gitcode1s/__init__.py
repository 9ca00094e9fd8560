"""gitcode1s - browse GitCode repositories through the REST API without cloning them."""

from gitcode1s.async_client import AsyncGitCode1sClient
from gitcode1s.async_transport import ApiResponse, AsyncHTTPTransport, build_path
from gitcode1s.authentication import (
    AuthenticationSurface,
    AuthenticationView,
    LoggingAuthenticationSurface,
)
from gitcode1s.credentials import CredentialStore
from gitcode1s.data_source import Capability, DataSource, GitCodeDataSource
from gitcode1s.exceptions import (
    ApiError,
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    GitCode1sError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    StateStoreError,
    TransportError,
)
from gitcode1s.gate import TokenGate
from gitcode1s.logging import configure_logging, get_logger
from gitcode1s.router import RouterParser
from gitcode1s.state import (
    JsonFileStateStore,
    KeyringStateStore,
    MemoryStateStore,
    StateStore,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Main Client
    "AsyncGitCode1sClient",
    # Transport
    "AsyncHTTPTransport",
    "ApiResponse",
    "build_path",
    # Credentials
    "CredentialStore",
    "StateStore",
    "MemoryStateStore",
    "JsonFileStateStore",
    "KeyringStateStore",
    # Re-authentication
    "AuthenticationView",
    "AuthenticationSurface",
    "LoggingAuthenticationSurface",
    "TokenGate",
    # Data sources
    "DataSource",
    "GitCodeDataSource",
    "Capability",
    # Router
    "RouterParser",
    # Exceptions
    "GitCode1sError",
    "ApiError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "RateLimitedError",
    "ServerError",
    "TransportError",
    "StateStoreError",
    "ConfigurationError",
    # Logging
    "configure_logging",
    "get_logger",
]
