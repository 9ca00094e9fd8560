"""Query options for list operations."""

from dataclasses import dataclass


@dataclass
class CommonQueryOptions:
    """Pagination shared by every list operation."""

    page: int | None = None
    page_size: int | None = None


@dataclass
class CommitsQueryOptions(CommonQueryOptions):
    """Filters for listing commits."""

    from_: str | None = None  # ref or sha to start from
    path: str | None = None
    author: str | None = None


@dataclass
class CodeReviewsQueryOptions(CommonQueryOptions):
    """Filters for listing pull requests."""

    state: str | None = None
