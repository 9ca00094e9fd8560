"""Router state data models."""

from dataclasses import dataclass
from enum import Enum


class PageType(Enum):
    """Page a virtual path points at."""

    TREE = "tree"
    BLOB = "blob"
    COMMIT_LIST = "commit_list"
    COMMIT = "commit"
    CODE_REVIEW_LIST = "code_review_list"
    CODE_REVIEW = "code_review"
    SEARCH = "search"


@dataclass
class RouterState:
    """Typed result of parsing a virtual path."""

    page_type: PageType
    repo: str
    ref: str | None = None
    file_path: str | None = None
    commit_sha: str | None = None
    code_review_id: str | None = None
    start_line: int | None = None
    end_line: int | None = None
