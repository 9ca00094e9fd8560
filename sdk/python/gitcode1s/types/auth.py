"""Token validation data models."""

from dataclasses import dataclass


@dataclass
class RateLimit:
    """Rate-limit snapshot taken from the X-RateLimit-* response headers."""

    limit: int | None = None
    remaining: int | None = None
    reset: int | None = None
    used: int | None = None
    resource: str | None = None


@dataclass
class ValidateResult:
    """Identity behind a validated token."""

    username: str | None
    avatar_url: str | None
    profile_url: str | None
    rate_limit: RateLimit | None = None
