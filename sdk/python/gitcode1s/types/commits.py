"""Commit-related data models."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class ChangedFile:
    """A file touched by a commit or a pull request."""

    path: str
    status: str  # "added", "modified", "removed", "renamed", ...
    previous_path: str | None = None


@dataclass
class Commit:
    """Commit information."""

    sha: str
    author: str | None
    email: str | None
    committer: str | None
    message: str | None
    created_at: datetime | None
    parents: list[str] = field(default_factory=list)
    avatar_url: str | None = None
    files: list[ChangedFile] | None = None  # only on single-commit lookups
