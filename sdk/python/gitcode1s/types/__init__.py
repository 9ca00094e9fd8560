"""gitcode1s type definitions.

This module exports all data model types used by the package.
"""

from gitcode1s.types.auth import RateLimit, ValidateResult
from gitcode1s.types.commits import ChangedFile, Commit
from gitcode1s.types.pulls import CodeReview, CodeReviewState
from gitcode1s.types.queries import (
    CodeReviewsQueryOptions,
    CommitsQueryOptions,
    CommonQueryOptions,
)
from gitcode1s.types.refs import Branch, RefPath, Tag
from gitcode1s.types.repos import (
    Directory,
    DirectoryEntry,
    File,
    FileType,
    RepositoryIdentity,
)
from gitcode1s.types.router import PageType, RouterState
from gitcode1s.types.search import (
    BlameRange,
    SymbolHover,
    SymbolLocation,
    TextSearchQuery,
    TextSearchResult,
    TextSearchResults,
)

__all__ = [
    # Repository types
    "RepositoryIdentity",
    "FileType",
    "DirectoryEntry",
    "Directory",
    "File",
    # Ref types
    "Branch",
    "Tag",
    "RefPath",
    # Commit types
    "Commit",
    "ChangedFile",
    # Pull request types
    "CodeReview",
    "CodeReviewState",
    # Query options
    "CommonQueryOptions",
    "CommitsQueryOptions",
    "CodeReviewsQueryOptions",
    # Router types
    "PageType",
    "RouterState",
    # Token validation
    "ValidateResult",
    "RateLimit",
    # Stubbed capabilities
    "TextSearchQuery",
    "TextSearchResult",
    "TextSearchResults",
    "BlameRange",
    "SymbolLocation",
    "SymbolHover",
]
