"""Repository and file-tree data models."""

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class RepositoryIdentity:
    """Owner and name of a hosted repository."""

    owner: str
    name: str

    @classmethod
    def parse(cls, full_name: str) -> "RepositoryIdentity":
        """
        Split a canonical "owner/repo" string.

        Raises:
            ValueError: If the string does not hold exactly one "/" with
                non-empty halves
        """
        parts = full_name.split("/")
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise ValueError(f"Invalid repository name: {full_name!r}")
        return cls(owner=parts[0], name=parts[1])

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


class FileType(Enum):
    """Kind of a directory entry."""

    FILE = "file"
    DIRECTORY = "directory"
    SUBMODULE = "submodule"


@dataclass
class DirectoryEntry:
    """One entry of a directory listing."""

    type: FileType
    path: str
    size: int | None = None
    commit_sha: str | None = None  # submodules only


@dataclass
class Directory:
    """Result of a directory listing."""

    entries: list[DirectoryEntry] = field(default_factory=list)
    truncated: bool = False


@dataclass(frozen=True)
class File:
    """Raw file content."""

    content: bytes
