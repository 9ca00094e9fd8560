"""
Access token storage and validation.

The credential store owns the single persisted access token. Everything else
reads it through `get_token()` on each use, so a rotated token applies to the
very next request.
"""

from collections.abc import Callable
from typing import Any

import httpx

from gitcode1s.logging import get_logger, log_auth_event
from gitcode1s.state import StateStore
from gitcode1s.types.auth import RateLimit, ValidateResult

logger = get_logger("auth")

DEFAULT_BASE_URL = "https://api.gitcode.com/api/v5"

TokenListener = Callable[[str], None]


class CredentialStore:
    """
    Persists the GitCode access token and notifies subscribers of changes.

    Example:
        ```python
        store = CredentialStore(MemoryStateStore())
        unsubscribe = store.subscribe(lambda token: print("new token"))
        await store.set_token("abc")   # prints once
        await store.set_token("abc")   # unchanged, no notification
        unsubscribe()
        ```
    """

    TOKEN_STATE_KEY = "gitcode-oauth-token"

    def __init__(
        self,
        state: StateStore,
        api_base: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the credential store.

        Args:
            state: Backend holding the persisted token
            api_base: Provider API base used for token validation
            timeout: Validation request timeout in seconds
            http_transport: Optional httpx transport (tests inject a MockTransport)
        """
        self.state = state
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self._http_transport = http_transport
        self._listeners: list[TokenListener] = []

    def get_token(self) -> str:
        """Return the stored token, or an empty string when none is set."""
        return self.state.get(self.TOKEN_STATE_KEY) or ""

    async def set_token(self, token: str) -> None:
        """
        Replace the stored token.

        Subscribers are called once, after the write completed, and only when
        the value actually changed.
        """
        changed = self.get_token() != token
        await self.state.update(self.TOKEN_STATE_KEY, token)
        if not changed:
            return

        log_auth_event("token_changed", token=token)
        for listener in list(self._listeners):
            listener(token)

    def subscribe(self, listener: TokenListener) -> Callable[[], None]:
        """
        Register a callback for token changes.

        Returns:
            A function that removes the callback again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def validate_token(self, token: str | None = None) -> ValidateResult | None:
        """
        Look up the identity behind a token.

        Args:
            token: Token to check; the stored token when omitted

        Returns:
            ValidateResult, or None when the token is empty or rejected, or
            the provider cannot be reached
        """
        access_token = self.get_token() if token is None else token
        if not access_token:
            return None

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._http_transport,
            ) as client:
                response = await client.get(
                    f"{self.api_base}/user",
                    headers={"Authorization": f"token {access_token}"},
                )
        except httpx.HTTPError as e:
            logger.warning("Token validation failed: %s", e)
            return None

        if response.status_code == 401:
            log_auth_event("token_rejected", token=access_token)
            return None
        if not response.is_success:
            logger.warning("Token validation returned HTTP %s", response.status_code)
            return None

        try:
            data = response.json()
        except ValueError:
            logger.warning("Token validation returned a malformed body")
            return None
        if not isinstance(data, dict):
            return None

        return ValidateResult(
            username=data.get("login") or data.get("username"),
            avatar_url=data.get("avatar_url"),
            profile_url=data.get("html_url"),
            rate_limit=_parse_rate_limit(response.headers),
        )


def _parse_rate_limit(headers: Any) -> RateLimit | None:
    def as_int(name: str) -> int | None:
        value = headers.get(name)
        try:
            return int(value) if value is not None else None
        except ValueError:
            return None

    rate_limit = RateLimit(
        limit=as_int("X-RateLimit-Limit"),
        remaining=as_int("X-RateLimit-Remaining"),
        reset=as_int("X-RateLimit-Reset"),
        used=as_int("X-RateLimit-Used"),
        resource=headers.get("X-RateLimit-Resource"),
    )
    if rate_limit == RateLimit():
        return None
    return rate_limit
