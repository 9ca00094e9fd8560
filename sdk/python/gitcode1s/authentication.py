"""
Interactive re-authentication.

When the provider rejects a request the transport asks this view to show the
token page and waits on a `TokenGate` until the user stores a new token, or
the gate's deadline passes.
"""

from dataclasses import asdict
from typing import Any, Protocol

from gitcode1s.credentials import CredentialStore
from gitcode1s.gate import TokenGate
from gitcode1s.logging import get_logger, log_auth_event

logger = get_logger("auth")

DEFAULT_GATE_TIMEOUT = 600.0


class AuthenticationSurface(Protocol):
    """Host-provided page that lets the user enter a token."""

    def show(self, title: str, page_config: dict[str, Any]) -> None:
        """Display (or re-display) the token page."""
        ...

    def post_message(self, message: dict[str, Any]) -> None:
        """Push a message to the page."""
        ...


class LoggingAuthenticationSurface:
    """Fallback surface for headless hosts: only logs that a token is needed."""

    def show(self, title: str, page_config: dict[str, Any]) -> None:
        logger.warning(
            "%s: %s (create a token at %s)",
            title,
            page_config.get("notice") or "a GitCode access token is required",
            page_config.get("createTokenLink"),
        )

    def post_message(self, message: dict[str, Any]) -> None:
        logger.debug("Authentication page message: %s", message.get("type"))


class AuthenticationView:
    """
    Token entry page plus the gate that pauses rejected requests.

    Only one gate is pending at a time; every request that hits 401/403 while
    it is pending waits on the same gate.
    """

    page_title = "Authenticating to GitCode"
    page_config: dict[str, Any] = {
        "authenticationFormTitle": "Authenticating to GitCode",
        "createTokenLink": "https://gitcode.com/settings/tokens/new",
        "rateLimitDocLink": "https://docs.gitcode.com/api/rate_limits",
        "rateLimitDocLinkText": "GitCode Rate limiting Documentation",
        "authenticationFeatures": [
            {"text": "Access GitCode private repository", "link": "https://docs.gitcode.com/"},
            {"text": "Higher rate limit for GitCode official API", "link": "https://docs.gitcode.com/"},
        ],
    }

    def __init__(
        self,
        credentials: CredentialStore,
        surface: AuthenticationSurface | None = None,
        gate_timeout: float = DEFAULT_GATE_TIMEOUT,
    ) -> None:
        """
        Initialize the authentication view.

        Args:
            credentials: Store the entered token is written to
            surface: Host page; logs a warning when omitted
            gate_timeout: Seconds a rejected request waits for a new token
        """
        self.credentials = credentials
        self.surface: AuthenticationSurface = surface or LoggingAuthenticationSurface()
        self.gate_timeout = gate_timeout
        self.notice = ""
        self._gate: TokenGate | None = None
        self._unsubscribe = credentials.subscribe(self._on_token_changed)

    @property
    def pending(self) -> bool:
        """True while rejected requests are waiting for a token."""
        return self._gate is not None and not self._gate.is_open

    async def open(self, notice: str = "", wait: bool = False) -> None:
        """
        Show the token page.

        Args:
            notice: Reason shown to the user
            wait: Suspend until a new token is stored or the gate times out
        """
        self.notice = notice
        if wait and (self._gate is None or self._gate.is_open):
            self._gate = TokenGate(self.gate_timeout)

        log_auth_event("reauth_requested" if wait else "page_opened", reason=notice or None)
        self.surface.show(self.page_title, {**self.page_config, "notice": notice})

        if not wait or self._gate is None:
            return

        gate = self._gate
        opened = await gate.wait()
        if not opened:
            log_auth_event("reauth_timed_out", reason=notice or None)
        if self._gate is gate:
            self._gate = None

    def _on_token_changed(self, token: str) -> None:
        if self._gate is not None:
            self._gate.open()
            self._gate = None
        self.surface.post_message({"type": "token-changed", "token": token})

    async def handle_message(self, message: dict[str, Any]) -> dict[str, Any]:
        """
        Answer a message posted by the token page.

        Args:
            message: Dict with "id", "type" and optional "data"

        Returns:
            Response echoing "id" and "type", with the answer under "data"

        Raises:
            ValueError: If the message type is unknown
        """
        message_type = message.get("type")
        response: dict[str, Any] = {"id": message.get("id"), "type": message_type}

        if message_type == "get-notice":
            response["data"] = self.notice
        elif message_type == "get-token":
            response["data"] = self.credentials.get_token()
        elif message_type == "set-token":
            token = message.get("data") or ""
            if token:
                self.notice = ""
            await self.credentials.set_token(token)
            response["data"] = None
        elif message_type == "validate-token":
            result = await self.credentials.validate_token(message.get("data"))
            response["data"] = asdict(result) if result is not None else None
        else:
            raise ValueError(f"Unknown authentication message type: {message_type!r}")

        return response

    def close(self) -> None:
        """Stop listening for token changes and release any waiting requests."""
        self._unsubscribe()
        if self._gate is not None:
            self._gate.open()
            self._gate = None


__all__ = [
    "AuthenticationSurface",
    "AuthenticationView",
    "LoggingAuthenticationSurface",
    "DEFAULT_GATE_TIMEOUT",
]
