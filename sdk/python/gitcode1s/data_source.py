"""
Repository data sources.

`DataSource` is the interface virtual-filesystem and history views program
against. `GitCodeDataSource` implements it on top of the GitCode REST API,
including the resolution of "ref/path" strings whose ref part may itself
contain slashes.

List lookups degrade to an empty list and single lookups to None when the
provider fails, so an outage shows up as "nothing here" rather than an error.
"""

import asyncio
import base64
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from datetime import datetime
from enum import Enum
from typing import Any
from urllib.parse import urlsplit

from gitcode1s.async_transport import AsyncHTTPTransport
from gitcode1s.exceptions import GitCode1sError, NotFoundError
from gitcode1s.logging import get_logger
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
from gitcode1s.types.search import (
    BlameRange,
    SymbolHover,
    SymbolLocation,
    TextSearchQuery,
    TextSearchResults,
)

logger = get_logger("data_source")

DEFAULT_REPO = "gitcode/gitcode"
FALLBACK_BRANCH = "master"
GITCODE_ORIGIN = "https://gitcode.com"

# Page size used when collecting refs for ref/path resolution
REF_PAGE_SIZE = 100

# Failures a provider call can end in: API/transport errors, or a payload
# that does not have the expected shape
_PROVIDER_ERRORS = (GitCode1sError, KeyError, TypeError, ValueError, AttributeError)

BrowserUrlAccessor = Callable[[], Awaitable[str]]


class Capability(Enum):
    """Optional features a data source may back."""

    TEXT_SEARCH = "text_search"
    BLAME = "blame"
    SYMBOLS = "symbols"


class DataSource(ABC):
    """
    Abstract base class for repository data sources.

    Subclasses implement browsing and history lookups. Capabilities they do
    not back keep the defaults below, which return empty results.
    """

    capabilities: frozenset[Capability] = frozenset()

    def supports(self, capability: Capability) -> bool:
        return capability in self.capabilities

    @abstractmethod
    async def get_default_branch(self, repo: str) -> str:
        """Return the default branch name for the repository."""
        pass

    @abstractmethod
    async def provide_directory(
        self, repo: str, ref: str, path: str, recursive: bool = False
    ) -> Directory | None:
        """List a directory; None when the path is not a directory."""
        pass

    @abstractmethod
    async def provide_file(self, repo: str, ref: str, path: str) -> File:
        """Fetch a file's raw bytes."""
        pass

    @abstractmethod
    async def provide_branches(
        self, repo: str, options: CommonQueryOptions | None = None
    ) -> list[Branch]:
        pass

    @abstractmethod
    async def provide_branch(self, repo: str, branch_name: str) -> Branch | None:
        pass

    @abstractmethod
    async def provide_tags(
        self, repo: str, options: CommonQueryOptions | None = None
    ) -> list[Tag]:
        pass

    @abstractmethod
    async def provide_tag(self, repo: str, tag_name: str) -> Tag | None:
        pass

    @abstractmethod
    async def provide_commits(
        self, repo: str, options: CommitsQueryOptions | None = None
    ) -> list[Commit]:
        pass

    @abstractmethod
    async def provide_commit(self, repo: str, ref: str) -> Commit | None:
        pass

    @abstractmethod
    async def provide_code_reviews(
        self, repo: str, options: CodeReviewsQueryOptions | None = None
    ) -> list[CodeReview]:
        pass

    @abstractmethod
    async def provide_code_review(self, repo: str, code_review_id: str) -> CodeReview | None:
        pass

    @abstractmethod
    async def provide_code_review_changed_files(
        self, repo: str, code_review_id: str, options: CommonQueryOptions | None = None
    ) -> list[ChangedFile]:
        pass

    async def provide_commit_changed_files(
        self, repo: str, ref: str, options: CommonQueryOptions | None = None
    ) -> list[ChangedFile]:
        commit = await self.provide_commit(repo, ref)
        return (commit.files or []) if commit else []

    async def extract_ref_path(self, repo: str, path: str) -> RefPath:
        """
        Split "ref/path" where the ref may contain slashes.

        Every leading run of segments is tried as a ref name, longest first,
        against the repository's branches and tags. Without a match the whole
        string is a path on the default branch.
        """
        if not path:
            return RefPath(ref=await self.get_default_branch(repo), path="")

        options = CommonQueryOptions(page_size=REF_PAGE_SIZE)
        branches, tags = await asyncio.gather(
            self.provide_branches(repo, options),
            self.provide_tags(repo, options),
        )
        refs = {branch.name for branch in branches} | {tag.name for tag in tags}

        parts = path.split("/")
        for i in range(len(parts), 0, -1):
            candidate = "/".join(parts[:i])
            if candidate in refs:
                return RefPath(ref=candidate, path="/".join(parts[i:]))

        return RefPath(ref=await self.get_default_branch(repo), path=path)

    async def provide_text_search_results(
        self,
        repo: str,
        ref: str,
        query: TextSearchQuery,
    ) -> TextSearchResults:
        return TextSearchResults(results=[], truncated=False)

    async def provide_file_blame_ranges(self, repo: str, ref: str, path: str) -> list[BlameRange]:
        return []

    async def provide_symbol_definitions(
        self, repo: str, ref: str, path: str, line: int, character: int, symbol: str
    ) -> list[SymbolLocation]:
        return []

    async def provide_symbol_references(
        self, repo: str, ref: str, path: str, line: int, character: int, symbol: str
    ) -> list[SymbolLocation]:
        return []

    async def provide_symbol_hover(
        self, repo: str, ref: str, path: str, line: int, character: int, symbol: str
    ) -> SymbolHover | None:
        return None


def _parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        logger.warning("Ignoring unparseable timestamp %r", value)
        return None


def _parse_changed_file(item: dict[str, Any]) -> ChangedFile:
    return ChangedFile(
        path=item["filename"],
        status=item.get("status"),
        previous_path=item.get("previous_filename"),
    )


def _parse_commit(item: dict[str, Any]) -> Commit:
    commit = item.get("commit") or {}
    author = commit.get("author") or {}
    committer = commit.get("committer") or {}
    files = item.get("files")
    return Commit(
        sha=item["sha"],
        author=author.get("name"),
        email=author.get("email"),
        committer=committer.get("name"),
        message=commit.get("message"),
        created_at=_parse_datetime(author.get("date")),
        parents=[parent["sha"] for parent in item.get("parents") or []],
        avatar_url=(item.get("author") or {}).get("avatar_url"),
        files=[_parse_changed_file(f) for f in files] if files is not None else None,
    )


def _parse_code_review(item: dict[str, Any]) -> CodeReview:
    user = item.get("user") or {}
    return CodeReview(
        id=str(item["number"]),
        title=item["title"],
        state=CodeReviewState.derive(item.get("state"), item.get("merged_at")),
        creator=user.get("login"),
        created_at=_parse_datetime(item.get("created_at")),
        merged_at=_parse_datetime(item.get("merged_at")),
        closed_at=_parse_datetime(item.get("closed_at")),
        source=item["head"]["ref"],
        target=item["base"]["ref"],
        source_sha=item["head"]["sha"],
        target_sha=item["base"]["sha"],
        avatar_url=user.get("avatar_url"),
    )


def _parse_directory_entry(item: dict[str, Any]) -> DirectoryEntry:
    if item["type"] == "dir":
        return DirectoryEntry(type=FileType.DIRECTORY, path=item["path"])
    if item["type"] == "submodule":
        return DirectoryEntry(type=FileType.SUBMODULE, path=item["path"], commit_sha=item.get("sha"))
    # Files, and symlinks for now
    return DirectoryEntry(type=FileType.FILE, path=item["path"], size=item.get("size"))


def _decode_content(data: Any) -> bytes:
    if isinstance(data, bytes):
        return data
    if isinstance(data, str):
        return data.encode("utf-8")

    # The contents endpoint sends base64 unless it says otherwise
    content = data.get("content") or ""
    if data.get("encoding") in (None, "base64"):
        return base64.b64decode(content)
    return content.encode("utf-8")


class GitCodeDataSource(DataSource):
    """
    Data source backed by the GitCode REST API.

    Example:
        ```python
        source = GitCodeDataSource(transport)
        ref_path = await source.extract_ref_path("owner/repo", "release/2.0/src/main.go")
        # RefPath(ref="release/2.0", path="src/main.go")
        ```
    """

    def __init__(
        self,
        transport: AsyncHTTPTransport,
        browser_url: BrowserUrlAccessor | None = None,
    ) -> None:
        """
        Initialize the data source.

        Args:
            transport: Authenticated transport for API calls
            browser_url: Async accessor for the host's current URL, used to
                derive the active repository
        """
        self.transport = transport
        self.browser_url = browser_url
        self._current_repo: str | None = None

    async def get_current_repo(self) -> str:
        """Return "owner/repo" for the host's current URL. Computed once."""
        if self._current_repo is None:
            repo = DEFAULT_REPO
            if self.browser_url is not None:
                parts = [p for p in urlsplit(await self.browser_url()).path.split("/") if p]
                if len(parts) >= 2:
                    repo = "/".join(parts[:2])
            self._current_repo = repo
        return self._current_repo

    async def get_default_branch(self, repo: str) -> str:
        """Return the repository's default branch, or "master" if unknown."""
        try:
            identity = RepositoryIdentity.parse(repo)
            response = await self.transport.request(
                "/repos/:owner/:repo",
                {"owner": identity.owner, "repo": identity.name},
            )
            return response.data.get("default_branch") or FALLBACK_BRANCH
        except _PROVIDER_ERRORS as e:
            logger.warning("Default branch lookup for %s failed: %s", repo, e)
            return FALLBACK_BRANCH

    async def provide_directory(
        self,
        repo: str,
        ref: str,
        path: str,
        recursive: bool = False,
    ) -> Directory | None:
        """
        List a directory.

        Args:
            repo: "owner/repo"
            ref: Branch, tag or commit sha
            path: Directory path, "" for the root
            recursive: List the whole subtree through the git trees endpoint

        Returns:
            Directory, or None when the path is a file or the lookup failed
        """
        if recursive:
            return await self._provide_tree(repo, ref, path)

        try:
            identity = RepositoryIdentity.parse(repo)
            route = "/repos/:owner/:repo/contents/:path" if path else "/repos/:owner/:repo/contents"
            response = await self.transport.request(
                route,
                {"owner": identity.owner, "repo": identity.name, "path": path or None, "ref": ref},
            )
            if not isinstance(response.data, list):
                return None
            return Directory(
                entries=[_parse_directory_entry(item) for item in response.data],
                truncated=False,
            )
        except _PROVIDER_ERRORS as e:
            logger.warning("Listing %s@%s:/%s failed: %s", repo, ref, path, e)
            return None

    async def _provide_tree(self, repo: str, ref: str, path: str) -> Directory | None:
        try:
            identity = RepositoryIdentity.parse(repo)
            response = await self.transport.request(
                "/repos/:owner/:repo/git/trees/:sha",
                {
                    "owner": identity.owner,
                    "repo": identity.name,
                    "sha": ref,
                    "recursive": 1,
                    "file_path": path or None,
                },
            )
            prefix = f"{path.rstrip('/')}/" if path else ""
            entries = []
            for item in response.data.get("tree") or []:
                if not item["path"].startswith(prefix):
                    continue
                if item["type"] == "tree":
                    entries.append(DirectoryEntry(type=FileType.DIRECTORY, path=item["path"]))
                elif item["type"] == "commit":
                    entries.append(
                        DirectoryEntry(type=FileType.SUBMODULE, path=item["path"], commit_sha=item.get("sha"))
                    )
                else:
                    entries.append(DirectoryEntry(type=FileType.FILE, path=item["path"], size=item.get("size")))
            return Directory(entries=entries, truncated=bool(response.data.get("truncated")))
        except _PROVIDER_ERRORS as e:
            logger.warning("Tree listing %s@%s:/%s failed: %s", repo, ref, path, e)
            return None

    async def provide_file(self, repo: str, ref: str, path: str) -> File:
        """
        Fetch a file's raw bytes.

        Raises:
            NotFoundError: When the path is missing or is not a file
            GitCode1sError: When the file cannot be fetched
        """
        identity = RepositoryIdentity.parse(repo)
        response = await self.transport.request(
            "/repos/:owner/:repo/contents/:path",
            {"owner": identity.owner, "repo": identity.name, "path": path, "ref": ref},
        )
        data = response.data
        # Directories come back as a listing, submodules without content
        if isinstance(data, list) or (isinstance(data, dict) and "content" not in data):
            raise NotFoundError(404, data, f"{path} is not a file")
        return File(content=_decode_content(data))

    async def provide_branches(
        self, repo: str, options: CommonQueryOptions | None = None
    ) -> list[Branch]:
        options = options or CommonQueryOptions()
        try:
            identity = RepositoryIdentity.parse(repo)
            response = await self.transport.request(
                "/repos/:owner/:repo/branches",
                {
                    "owner": identity.owner,
                    "repo": identity.name,
                    "page": options.page,
                    "per_page": options.page_size,
                },
            )
            return [
                Branch(name=item["name"], commit_sha=(item.get("commit") or {}).get("sha"))
                for item in response.data
            ]
        except _PROVIDER_ERRORS as e:
            logger.warning("Listing branches of %s failed: %s", repo, e)
            return []

    async def provide_branch(self, repo: str, branch_name: str) -> Branch | None:
        try:
            identity = RepositoryIdentity.parse(repo)
            response = await self.transport.request(
                "/repos/:owner/:repo/branches/:branch",
                {"owner": identity.owner, "repo": identity.name, "branch": branch_name},
            )
            item = response.data
            return Branch(name=item["name"], commit_sha=(item.get("commit") or {}).get("sha"))
        except _PROVIDER_ERRORS as e:
            logger.warning("Branch %s of %s not available: %s", branch_name, repo, e)
            return None

    async def provide_tags(
        self, repo: str, options: CommonQueryOptions | None = None
    ) -> list[Tag]:
        options = options or CommonQueryOptions()
        try:
            identity = RepositoryIdentity.parse(repo)
            response = await self.transport.request(
                "/repos/:owner/:repo/tags",
                {
                    "owner": identity.owner,
                    "repo": identity.name,
                    "page": options.page,
                    "per_page": options.page_size,
                },
            )
            return [
                Tag(name=item["name"], commit_sha=(item.get("commit") or {}).get("sha"))
                for item in response.data
            ]
        except _PROVIDER_ERRORS as e:
            logger.warning("Listing tags of %s failed: %s", repo, e)
            return []

    async def provide_tag(self, repo: str, tag_name: str) -> Tag | None:
        # No single-tag endpoint; search the first page
        tags = await self.provide_tags(repo, CommonQueryOptions(page_size=REF_PAGE_SIZE))
        return next((tag for tag in tags if tag.name == tag_name), None)

    async def provide_commits(
        self, repo: str, options: CommitsQueryOptions | None = None
    ) -> list[Commit]:
        options = options or CommitsQueryOptions()
        try:
            identity = RepositoryIdentity.parse(repo)
            response = await self.transport.request(
                "/repos/:owner/:repo/commits",
                {
                    "owner": identity.owner,
                    "repo": identity.name,
                    "sha": options.from_,
                    "path": options.path,
                    "author": options.author,
                    "page": options.page,
                    "per_page": options.page_size,
                },
            )
            return [_parse_commit(item) for item in response.data]
        except _PROVIDER_ERRORS as e:
            logger.warning("Listing commits of %s failed: %s", repo, e)
            return []

    async def provide_commit(self, repo: str, ref: str) -> Commit | None:
        """Fetch one commit, including its changed files."""
        try:
            identity = RepositoryIdentity.parse(repo)
            response = await self.transport.request(
                "/repos/:owner/:repo/commits/:sha",
                {"owner": identity.owner, "repo": identity.name, "sha": ref},
            )
            return _parse_commit(response.data)
        except _PROVIDER_ERRORS as e:
            logger.warning("Commit %s of %s not available: %s", ref, repo, e)
            return None

    async def provide_code_reviews(
        self, repo: str, options: CodeReviewsQueryOptions | None = None
    ) -> list[CodeReview]:
        options = options or CodeReviewsQueryOptions()
        try:
            identity = RepositoryIdentity.parse(repo)
            response = await self.transport.request(
                "/repos/:owner/:repo/pulls",
                {
                    "owner": identity.owner,
                    "repo": identity.name,
                    "state": options.state.lower() if options.state else "open",
                    "page": options.page,
                    "per_page": options.page_size,
                },
            )
            return [_parse_code_review(item) for item in response.data]
        except _PROVIDER_ERRORS as e:
            logger.warning("Listing pull requests of %s failed: %s", repo, e)
            return []

    async def provide_code_review(self, repo: str, code_review_id: str) -> CodeReview | None:
        try:
            identity = RepositoryIdentity.parse(repo)
            response = await self.transport.request(
                "/repos/:owner/:repo/pulls/:number",
                {"owner": identity.owner, "repo": identity.name, "number": code_review_id},
            )
            return _parse_code_review(response.data)
        except _PROVIDER_ERRORS as e:
            logger.warning("Pull request %s of %s not available: %s", code_review_id, repo, e)
            return None

    async def provide_code_review_changed_files(
        self, repo: str, code_review_id: str, options: CommonQueryOptions | None = None
    ) -> list[ChangedFile]:
        options = options or CommonQueryOptions()
        try:
            identity = RepositoryIdentity.parse(repo)
            response = await self.transport.request(
                "/repos/:owner/:repo/pulls/:number/files",
                {
                    "owner": identity.owner,
                    "repo": identity.name,
                    "number": code_review_id,
                    "page": options.page,
                    "per_page": options.page_size,
                },
            )
            return [_parse_changed_file(item) for item in response.data]
        except _PROVIDER_ERRORS as e:
            logger.warning("Files of pull request %s of %s not available: %s", code_review_id, repo, e)
            return []

    def provide_user_avatar_link(self, user: str) -> str:
        return f"{GITCODE_ORIGIN}/{user}.png"
