"""
Pytest fixtures for gitcode1s testing.

Provides common fixtures and factories for testing code that browses
repositories through a DataSource.
"""

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, Generator

import httpx
import pytest

from gitcode1s.testing.mock import MockDataSource
from gitcode1s.types.commits import ChangedFile, Commit
from gitcode1s.types.pulls import CodeReview, CodeReviewState
from gitcode1s.types.refs import Branch


# ============================================================================
# Factories
# ============================================================================


def create_mock_branch(name: str = "main", commit_sha: str | None = "abc123") -> Branch:
    """Create a Branch for testing."""
    return Branch(name=name, commit_sha=commit_sha)


def create_mock_commit(
    sha: str = "abc123def456",
    author: str = "sample-author",
    message: str = "Initial commit",
    parents: list[str] | None = None,
    files: list[ChangedFile] | None = None,
    **kwargs: Any,
) -> Commit:
    """Create a Commit for testing."""
    return Commit(
        sha=sha,
        author=author,
        email=kwargs.get("email", f"{author}@example.com"),
        committer=kwargs.get("committer", author),
        message=message,
        created_at=kwargs.get("created_at", datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)),
        parents=parents or [],
        avatar_url=kwargs.get("avatar_url"),
        files=files,
    )


def create_mock_code_review(
    id: str = "1",
    title: str = "Add new feature",
    state: CodeReviewState = CodeReviewState.OPEN,
    source: str = "feature/new-feature",
    target: str = "main",
    **kwargs: Any,
) -> CodeReview:
    """Create a CodeReview for testing."""
    merged_at = kwargs.get("merged_at")
    if merged_at is None and state == CodeReviewState.MERGED:
        merged_at = datetime(2024, 1, 16, 9, 0, tzinfo=timezone.utc)
    return CodeReview(
        id=id,
        title=title,
        state=state,
        creator=kwargs.get("creator", "sample-author"),
        created_at=kwargs.get("created_at", datetime(2024, 1, 15, 14, 0, tzinfo=timezone.utc)),
        merged_at=merged_at,
        closed_at=kwargs.get("closed_at", merged_at),
        source=source,
        target=target,
        source_sha=kwargs.get("source_sha", "aaa111"),
        target_sha=kwargs.get("target_sha", "bbb222"),
        avatar_url=kwargs.get("avatar_url"),
    )


def api_payload_branch(name: str, sha: str = "abc123") -> dict[str, Any]:
    """A branch as the GitCode API returns it."""
    return {"name": name, "commit": {"sha": sha}}


def api_payload_pull(number: int, state: str = "open", merged_at: str | None = None) -> dict[str, Any]:
    """A pull request as the GitCode API returns it."""
    return {
        "number": number,
        "title": f"Pull request {number}",
        "state": state,
        "merged_at": merged_at,
        "closed_at": merged_at,
        "created_at": "2024-01-15T14:00:00Z",
        "user": {"login": "sample-author", "avatar_url": "https://gitcode.com/sample-author.png"},
        "head": {"ref": "feature/x", "sha": "aaa111"},
        "base": {"ref": "main", "sha": "bbb222"},
    }


# ============================================================================
# Mock Data Source Fixtures
# ============================================================================


@pytest.fixture
def mock_data_source() -> Generator[MockDataSource, None, None]:
    """
    Provide an empty MockDataSource.

    Example:
        ```python
        async def test_my_view(mock_data_source):
            mock_data_source.add_repository("owner/repo")
            ...
            assert mock_data_source.was_called("provide_directory")
        ```
    """
    source = MockDataSource()
    yield source
    source.reset()


@pytest.fixture
def mock_data_source_with_repo(mock_data_source: MockDataSource) -> MockDataSource:
    """
    Provide a MockDataSource holding "owner/repo" with slash-named refs and a
    small file tree on "main" and "release/2.0".
    """
    repo = mock_data_source.add_repository(
        "owner/repo",
        default_branch="main",
        branches=["main", "release", "release/2.0"],
        tags=["v1.0", "v1.0/rc1"],
    )
    for ref in ("main", "release/2.0"):
        repo.add_file(ref, "README.md", "# repo\n")
        repo.add_file(ref, "src/main.go", "package main\n")
        repo.add_file(ref, "src/util/strings.go", "package util\n")
    repo.commits.append(create_mock_commit(files=[ChangedFile(path="README.md", status="added")]))
    repo.code_reviews.extend([
        create_mock_code_review(id="1"),
        create_mock_code_review(id="2", state=CodeReviewState.MERGED),
    ])
    repo.code_review_files["1"] = [ChangedFile(path="src/main.go", status="modified")]
    return mock_data_source


@pytest.fixture
def sample_commit() -> Commit:
    """Provide a sample Commit object."""
    return create_mock_commit()


@pytest.fixture
def sample_code_review() -> CodeReview:
    """Provide a sample CodeReview object."""
    return create_mock_code_review()


# ============================================================================
# HTTP Fixtures
# ============================================================================


Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def recorded_requests() -> list[httpx.Request]:
    """Collects requests seen by `mock_http`."""
    return []


@pytest.fixture
def mock_http(recorded_requests: list[httpx.Request]) -> Callable[[Handler], httpx.MockTransport]:
    """
    Build an httpx.MockTransport that records every request it serves.

    Example:
        ```python
        def test_listing(mock_http, recorded_requests):
            transport = mock_http(lambda request: httpx.Response(200, json=[]))
            ...
            assert recorded_requests[0].url.path.endswith("/branches")
        ```
    """

    def build(handler: Handler) -> httpx.MockTransport:
        def record(request: httpx.Request) -> httpx.Response:
            recorded_requests.append(request)
            return handler(request)

        return httpx.MockTransport(record)

    return build
