"""
Tests for gitcode1s testing utilities.

Verifies that MockDataSource and fixtures work correctly.
"""

import asyncio

import httpx
import pytest

from gitcode1s.exceptions import NotFoundError
from gitcode1s.testing.fixtures import (  # noqa: F401
    mock_data_source,
    mock_data_source_with_repo,
    mock_http,
    recorded_requests,
)
from gitcode1s.testing import (
    MockDataSource,
    create_mock_branch,
    create_mock_code_review,
    create_mock_commit,
)
from gitcode1s.types.pulls import CodeReviewState
from gitcode1s.types.queries import CodeReviewsQueryOptions, CommonQueryOptions
from gitcode1s.types.refs import RefPath
from gitcode1s.types.repos import FileType


def run(coro):
    return asyncio.run(coro)


class TestMockDataSource:
    """Tests for MockDataSource."""

    def test_unknown_repository_degrades(self) -> None:
        source = MockDataSource()

        assert run(source.get_default_branch("owner/missing")) == "master"
        assert run(source.provide_branches("owner/missing")) == []
        assert run(source.provide_commit("owner/missing", "abc")) is None
        assert run(source.provide_directory("owner/missing", "main", "")) is None

    def test_directory_listing(self, mock_data_source_with_repo: MockDataSource) -> None:
        source = mock_data_source_with_repo

        root = run(source.provide_directory("owner/repo", "main", ""))
        assert root is not None
        assert [(e.type, e.path) for e in root.entries] == [
            (FileType.FILE, "README.md"),
            (FileType.DIRECTORY, "src"),
        ]

        src = run(source.provide_directory("owner/repo", "main", "src"))
        assert src is not None
        assert [(e.type, e.path) for e in src.entries] == [
            (FileType.FILE, "src/main.go"),
            (FileType.DIRECTORY, "src/util"),
        ]

        tree = run(source.provide_directory("owner/repo", "main", "src", recursive=True))
        assert tree is not None
        assert [e.path for e in tree.entries] == ["src/main.go", "src/util", "src/util/strings.go"]

    def test_directory_lookup_on_file(self, mock_data_source_with_repo: MockDataSource) -> None:
        assert run(mock_data_source_with_repo.provide_directory("owner/repo", "main", "README.md")) is None

    def test_provide_file(self, mock_data_source_with_repo: MockDataSource) -> None:
        source = mock_data_source_with_repo

        file = run(source.provide_file("owner/repo", "release/2.0", "src/main.go"))
        assert file.content == b"package main\n"

        with pytest.raises(NotFoundError):
            run(source.provide_file("owner/repo", "main", "missing.txt"))

    def test_extract_ref_path(self, mock_data_source_with_repo: MockDataSource) -> None:
        source = mock_data_source_with_repo

        assert run(source.extract_ref_path("owner/repo", "release/2.0/src")) == RefPath("release/2.0", "src")
        assert run(source.extract_ref_path("owner/repo", "v1.0/rc1/README.md")) == RefPath("v1.0/rc1", "README.md")
        assert run(source.extract_ref_path("owner/repo", "")) == RefPath("main", "")

    def test_code_reviews_filtered_by_state(self, mock_data_source_with_repo: MockDataSource) -> None:
        source = mock_data_source_with_repo

        open_reviews = run(source.provide_code_reviews("owner/repo"))
        merged = run(source.provide_code_reviews("owner/repo", CodeReviewsQueryOptions(state="MERGED")))
        every = run(source.provide_code_reviews("owner/repo", CodeReviewsQueryOptions(state="all")))

        assert [r.id for r in open_reviews] == ["1"]
        assert [r.id for r in merged] == ["2"]
        assert len(every) == 2
        assert [f.path for f in run(source.provide_code_review_changed_files("owner/repo", "1"))] == [
            "src/main.go"
        ]

    def test_commit_changed_files(self, mock_data_source_with_repo: MockDataSource) -> None:
        files = run(mock_data_source_with_repo.provide_commit_changed_files("owner/repo", "abc123def456"))
        assert [f.path for f in files] == ["README.md"]

    def test_pagination(self) -> None:
        source = MockDataSource()
        source.add_repository("owner/repo", branches=[f"b{i}" for i in range(5)])

        page = run(source.provide_branches("owner/repo", CommonQueryOptions(page=2, page_size=2)))

        assert [b.name for b in page] == ["b2", "b3"]

    def test_configured_failure(self, mock_data_source_with_repo: MockDataSource) -> None:
        source = mock_data_source_with_repo
        source.configure_failure("provide_branches")
        source.configure_failure("provide_tags")

        assert run(source.provide_branches("owner/repo")) == []
        assert run(source.extract_ref_path("owner/repo", "release/2.0/src")) == RefPath(
            "main", "release/2.0/src"
        )

    def test_call_tracking(self, mock_data_source: MockDataSource) -> None:
        mock_data_source.add_repository("owner/repo")

        run(mock_data_source.provide_branch("owner/repo", "main"))
        run(mock_data_source.provide_branch("owner/repo", "dev"))

        assert mock_data_source.was_called("provide_branch")
        assert not mock_data_source.was_called("provide_tags")
        assert mock_data_source.call_count("provide_branch") == 2
        calls = mock_data_source.get_calls("provide_branch")
        assert calls[1].args == ("owner/repo", "dev")

        mock_data_source.reset()
        assert mock_data_source.get_calls() == []


class TestFactories:
    """Tests for the factory helpers."""

    def test_create_mock_branch(self) -> None:
        branch = create_mock_branch("release/2.0")
        assert branch.name == "release/2.0"
        assert branch.commit_sha == "abc123"

    def test_create_mock_commit(self) -> None:
        commit = create_mock_commit(sha="fff000", author="alice", parents=["abc"])
        assert commit.sha == "fff000"
        assert commit.email == "alice@example.com"
        assert commit.parents == ["abc"]

    def test_create_mock_code_review(self) -> None:
        merged = create_mock_code_review(id="7", state=CodeReviewState.MERGED)
        assert merged.merged_at is not None
        assert merged.closed_at == merged.merged_at

        open_review = create_mock_code_review()
        assert open_review.state == CodeReviewState.OPEN
        assert open_review.merged_at is None


def test_mock_http_records_requests(mock_http, recorded_requests) -> None:
    transport = mock_http(lambda request: httpx.Response(200, json=[]))

    async def scenario() -> None:
        async with httpx.AsyncClient(transport=transport, base_url="https://api.gitcode.com/api/v5") as client:
            await client.get("/repos/owner/repo/branches")

    run(scenario())

    assert len(recorded_requests) == 1
    assert recorded_requests[0].url.path == "/api/v5/repos/owner/repo/branches"
