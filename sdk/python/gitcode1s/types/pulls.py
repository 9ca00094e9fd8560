"""Pull request (code review) data models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class CodeReviewState(Enum):
    """Lifecycle state of a pull request."""

    OPEN = "open"
    MERGED = "merged"
    CLOSED = "closed"

    @classmethod
    def derive(cls, state: str | None, merged_at: Any) -> "CodeReviewState":
        """Map the provider's state string and merge timestamp to a state."""
        if state == "open":
            return cls.OPEN
        if merged_at:
            return cls.MERGED
        return cls.CLOSED


@dataclass
class CodeReview:
    """Pull request information."""

    id: str
    title: str
    state: CodeReviewState
    creator: str | None
    created_at: datetime | None
    merged_at: datetime | None
    closed_at: datetime | None
    source: str
    target: str
    source_sha: str
    target_sha: str
    avatar_url: str | None = None
