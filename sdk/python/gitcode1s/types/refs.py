"""Branch and tag data models."""

from dataclasses import dataclass


@dataclass
class Branch:
    """A branch and the commit it points to."""

    name: str
    commit_sha: str | None


@dataclass
class Tag:
    """A tag and the commit it points to."""

    name: str
    commit_sha: str | None


@dataclass
class RefPath:
    """A virtual path split into a revision and an in-repository path."""

    ref: str
    path: str
