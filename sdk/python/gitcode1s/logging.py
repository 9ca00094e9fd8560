"""
gitcode1s logging utilities.

Three loggers are used: "gitcode1s" for the package, "gitcode1s.http" for
API traffic and "gitcode1s.auth" for token and re-authentication events.
Access tokens are redacted before anything reaches a handler.
"""

import logging
import re
from typing import Any

_sdk_logger = logging.getLogger("gitcode1s")
_http_logger = logging.getLogger("gitcode1s.http")
_auth_logger = logging.getLogger("gitcode1s.auth")

_DEFAULT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Handler installed by the last configure_logging() call
_installed_handler: logging.Handler | None = None

_REDACTED = "[REDACTED]"

_TOKEN_MASKS = [
    # "Bearer <token>" and "token <token>", the two Authorization schemes GitCode accepts
    (re.compile(r"\b(Bearer|token)\s+[A-Za-z0-9._~+/=-]{8,}"), rf"\1 {_REDACTED}"),
    (re.compile(r"(access_token=)[^&\s]+", re.IGNORECASE), rf"\1{_REDACTED}"),
    # key: "value" pairs in serialized page messages and JSON bodies
    (
        re.compile(r"(secret|token|password|authorization)['\"]?\s*[:=]\s*['\"][^'\"]+['\"]", re.IGNORECASE),
        rf"\1: {_REDACTED}",
    ),
]

_SENSITIVE_KEYS = frozenset({"authorization", "token", "access_token", "password", "secret"})

_TOKEN_PREVIEW_LENGTH = 4


def configure_logging(
    level: int = logging.INFO,
    http_level: int | None = None,
    auth_level: int | None = None,
    handler: logging.Handler | None = None,
    format_string: str | None = None,
) -> None:
    """
    Route gitcode1s logs to a handler.

    Calling it again replaces the handler from the previous call.

    Args:
        level: Level of the package logger
        http_level: Level of "gitcode1s.http" (defaults to `level`)
        auth_level: Level of "gitcode1s.auth" (defaults to `level`)
        handler: Destination (default: stderr)
        format_string: logging.Formatter format

    Example:
        ```python
        import logging
        from gitcode1s.logging import configure_logging

        # See every API call, but only warnings otherwise
        configure_logging(level=logging.WARNING, http_level=logging.DEBUG)
        ```
    """
    global _installed_handler

    handler = handler or logging.StreamHandler()
    handler.setFormatter(logging.Formatter(format_string or _DEFAULT_FORMAT))

    if _installed_handler is not None:
        _sdk_logger.removeHandler(_installed_handler)
    _sdk_logger.addHandler(handler)
    _installed_handler = handler

    _sdk_logger.setLevel(level)
    _http_logger.setLevel(level if http_level is None else http_level)
    _auth_logger.setLevel(level if auth_level is None else auth_level)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the package logger, or its child "gitcode1s.<name>"."""
    return _sdk_logger.getChild(name) if name else _sdk_logger


def mask_sensitive_data(text: str) -> str:
    """Redact tokens in free text such as URLs, headers or serialized messages."""
    for pattern, replacement in _TOKEN_MASKS:
        text = pattern.sub(replacement, text)
    return text


def preview_token(token: str) -> str:
    """Show only the last few characters of a token, e.g. "****abcd"."""
    if len(token) <= _TOKEN_PREVIEW_LENGTH * 2:
        return "[TOKEN_REDACTED]"
    return f"****{token[-_TOKEN_PREVIEW_LENGTH:]}"


def _is_sensitive(key: Any, sensitive_keys: frozenset[str] | set[str]) -> bool:
    key = str(key).lower()
    return any(fragment in key for fragment in sensitive_keys)


def _redact(value: Any, sensitive_keys: frozenset[str] | set[str]) -> Any:
    if isinstance(value, dict):
        return {
            key: _REDACTED if _is_sensitive(key, sensitive_keys) else _redact(item, sensitive_keys)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [_redact(item, sensitive_keys) for item in value]
    return value


def safe_log_dict(data: dict[str, Any], sensitive_keys: set[str] | None = None) -> dict[str, Any]:
    """
    Copy a dict for logging, replacing values under sensitive keys at any depth.

    A key is sensitive when it contains one of `sensitive_keys` (default:
    authorization, token, access_token, password, secret), so "X-Access-Token"
    is caught too.
    """
    return _redact(data, sensitive_keys or _SENSITIVE_KEYS)


def log_http_request(method: str, path: str, headers: dict[str, str] | None = None) -> None:
    """Log an outgoing API request at DEBUG level, headers redacted."""
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return
    _http_logger.debug(
        "%s %s headers=%s",
        method,
        mask_sensitive_data(path),
        safe_log_dict(headers or {}),
    )


def log_http_response(status_code: int, path: str, elapsed_ms: float | None = None) -> None:
    """Log an API response at DEBUG level."""
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return
    if elapsed_ms is None:
        _http_logger.debug("Response %d from %s", status_code, mask_sensitive_data(path))
    else:
        _http_logger.debug(
            "Response %d from %s (%.2fms)", status_code, mask_sensitive_data(path), elapsed_ms
        )


def log_auth_event(event: str, token: str | None = None, reason: str | None = None) -> None:
    """
    Log an authentication event at INFO level.

    Args:
        event: Event name (e.g., "token_changed", "reauth_requested")
        token: Token involved, shown only as a short preview
        reason: Human readable reason (optional)
    """
    if not _auth_logger.isEnabledFor(logging.INFO):
        return

    details = [event]
    if token:
        details.append(f"token={preview_token(token)}")
    if reason:
        details.append(f"reason={reason}")
    _auth_logger.info(" | ".join(details))


__all__ = [
    "configure_logging",
    "get_logger",
    "mask_sensitive_data",
    "preview_token",
    "safe_log_dict",
    "log_http_request",
    "log_http_response",
    "log_auth_event",
]
