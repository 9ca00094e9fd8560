"""
gitcode1s async client.

Wires the credential store, re-authentication view, transport, data source
and router parser into one object with process-wide lifetime.
"""

import os
from typing import Any

import httpx

from gitcode1s.authentication import (
    DEFAULT_GATE_TIMEOUT,
    AuthenticationSurface,
    AuthenticationView,
)
from gitcode1s.async_transport import AsyncHTTPTransport
from gitcode1s.credentials import DEFAULT_BASE_URL, CredentialStore
from gitcode1s.data_source import BrowserUrlAccessor, GitCodeDataSource
from gitcode1s.exceptions import ConfigurationError
from gitcode1s.router import RouterParser
from gitcode1s.state import (
    JsonFileStateStore,
    KeyringStateStore,
    MemoryStateStore,
    StateStore,
)


class AsyncGitCode1sClient:
    """
    Async client for browsing GitCode repositories without cloning them.

    Example:
        ```python
        import asyncio
        from gitcode1s import AsyncGitCode1sClient

        async def main():
            async with AsyncGitCode1sClient.from_env() as client:
                state = await client.router.parse_path("/owner/repo/tree/release/2.0/src")
                directory = await client.data_source.provide_directory(
                    state.repo, state.ref, state.file_path
                )

        asyncio.run(main())
        ```
    """

    DEFAULT_BASE_URL = DEFAULT_BASE_URL
    DEFAULT_TIMEOUT = 30.0

    scheme = "gitcode1s"
    platform_name = "GitCode"
    code_review_type = "PullRequest"

    def __init__(
        self,
        state: StateStore | None = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        auth_timeout: float = DEFAULT_GATE_TIMEOUT,
        surface: AuthenticationSurface | None = None,
        browser_url: BrowserUrlAccessor | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the async client.

        Args:
            state: Persisted state holding the token (default: in memory)
            base_url: Base URL for API requests
            timeout: Request timeout in seconds
            auth_timeout: Seconds a rejected request waits for a new token
            surface: Host page for entering a token
            browser_url: Async accessor for the host's current URL
            http_transport: Optional httpx transport (tests inject a MockTransport)
        """
        self.base_url = base_url
        self.timeout = timeout

        self.credentials = CredentialStore(
            state or MemoryStateStore(),
            api_base=base_url,
            timeout=timeout,
            http_transport=http_transport,
        )
        self.authentication = AuthenticationView(
            self.credentials,
            surface=surface,
            gate_timeout=auth_timeout,
        )
        self._transport = AsyncHTTPTransport(
            self.credentials,
            self.authentication,
            base_url=base_url,
            timeout=timeout,
            http_transport=http_transport,
        )
        self.data_source = GitCodeDataSource(self._transport, browser_url=browser_url)
        self.router = RouterParser(self.data_source)

    @classmethod
    def from_env(
        cls,
        surface: AuthenticationSurface | None = None,
        browser_url: BrowserUrlAccessor | None = None,
    ) -> "AsyncGitCode1sClient":
        """
        Create a client from environment variables.

        Environment variables:
            GITCODE1S_API_BASE: API base URL (optional, default: https://api.gitcode.com/api/v5)
            GITCODE1S_TOKEN: Access token for the in-memory store (optional)
            GITCODE1S_STATE_FILE: Persist the token in this JSON file (optional)
            GITCODE1S_USE_KEYRING: "1"/"true" to persist the token in the OS keychain (optional)
            GITCODE1S_TIMEOUT: Request timeout in seconds (optional, default: 30)
            GITCODE1S_AUTH_TIMEOUT: Re-authentication wait in seconds (optional, default: 600)

        Returns:
            Configured AsyncGitCode1sClient instance

        Raises:
            ConfigurationError: If a variable holds an invalid value
        """
        base_url = os.environ.get("GITCODE1S_API_BASE", cls.DEFAULT_BASE_URL)
        timeout = _float_from_env("GITCODE1S_TIMEOUT", cls.DEFAULT_TIMEOUT)
        auth_timeout = _float_from_env("GITCODE1S_AUTH_TIMEOUT", DEFAULT_GATE_TIMEOUT)

        state_file = os.environ.get("GITCODE1S_STATE_FILE")
        use_keyring = os.environ.get("GITCODE1S_USE_KEYRING", "").lower() in ("1", "true", "yes")
        if state_file and use_keyring:
            raise ConfigurationError(
                "GITCODE1S_STATE_FILE and GITCODE1S_USE_KEYRING are mutually exclusive"
            )

        # A persisted token outlives the process; GITCODE1S_TOKEN only seeds
        # the in-memory store
        state: StateStore
        if state_file:
            state = JsonFileStateStore(state_file)
        elif use_keyring:
            state = KeyringStateStore()
        else:
            token = os.environ.get("GITCODE1S_TOKEN")
            state = MemoryStateStore({CredentialStore.TOKEN_STATE_KEY: token} if token else None)

        return cls(
            state=state,
            base_url=base_url,
            timeout=timeout,
            auth_timeout=auth_timeout,
            surface=surface,
            browser_url=browser_url,
        )

    @property
    def transport(self) -> AsyncHTTPTransport:
        """The shared transport, for issuing raw API calls."""
        return self._transport

    async def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        self.authentication.close()
        await self._transport.close()

    async def __aenter__(self) -> "AsyncGitCode1sClient":
        """Return the client itself."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Close the transport on leaving the block."""
        await self.close()


def _float_from_env(name: str, default: float) -> float:
    value = os.environ.get(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        raise ConfigurationError(f"Invalid {name}: {value!r}. Must be a number of seconds")
