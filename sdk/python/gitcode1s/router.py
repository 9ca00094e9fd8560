"""
Virtual path parsing and building.

Supported paths (optionally prefixed by "/gitcode"):
  - /owner/repo
  - /owner/repo/tree/ref/with/slashes/path/to/dir
  - /owner/repo/blob/ref/path/to/file#L10-L20
  - /owner/repo/commits[/ref]
  - /owner/repo/commit/sha
  - /owner/repo/pulls
  - /owner/repo/pull/42

Builders percent-encode "%", "?" and "#" in names, and the parser decodes them.
"""

import re
from urllib.parse import unquote, urlsplit

from gitcode1s.data_source import DEFAULT_REPO, GITCODE_ORIGIN, DataSource
from gitcode1s.types.router import PageType, RouterState

PATH_PREFIX = "/gitcode"

_LINE_FRAGMENT = re.compile(r"^L(\d+)(?:-L(\d+))?$")

# Characters that would otherwise end the path part of a URL
_PATH_ESCAPES = {"%": "%25", "?": "%3F", "#": "%23"}


def _escape(value: str) -> str:
    return "".join(_PATH_ESCAPES.get(char, char) for char in value)


def _split(path: str) -> tuple[list[str], str]:
    parsed = urlsplit(path)
    return [unquote(part) for part in parsed.path.split("/") if part], parsed.fragment


def parse_line_fragment(fragment: str) -> tuple[int | None, int | None]:
    """
    Parse "L<n>" or "L<n>-L<m>" (without "#") into a line range.

    A single line gives the same start and end; anything else gives (None, None).
    """
    match = _LINE_FRAGMENT.match(fragment)
    if not match:
        return None, None
    start = int(match.group(1))
    end = int(match.group(2)) if match.group(2) else start
    return start, end


class RouterParser:
    """
    Turns virtual paths into RouterState and back.

    Example:
        ```python
        parser = RouterParser(data_source)
        state = await parser.parse_path("/owner/repo/blob/release/2.0/main.go#L3")
        parser.build_blob_path(state.repo, state.ref, state.file_path, 3)
        # "/owner/repo/blob/release/2.0/main.go#L3"
        ```
    """

    def __init__(self, data_source: DataSource) -> None:
        self.data_source = data_source
        self.path_prefix = ""

    async def parse_path(self, path: str) -> RouterState:
        """Parse a virtual path. Unknown shapes fall back to the default repository."""
        if path.startswith(f"{PATH_PREFIX}/"):
            self.path_prefix = PATH_PREFIX
            path = path[len(PATH_PREFIX):]

        parts, fragment = _split(path)
        owner, repo = (parts + ["", ""])[:2]
        page_type = parts[2] if len(parts) > 2 else None
        rest = parts[3:]

        if not owner or not repo:
            return self._default_state()

        repo_name = f"{owner}/{repo}"

        if page_type is None or page_type == "tree":
            ref_path = await self.data_source.extract_ref_path(repo_name, "/".join(rest))
            return RouterState(
                page_type=PageType.TREE, repo=repo_name, ref=ref_path.ref, file_path=ref_path.path
            )

        if page_type == "blob":
            ref_path = await self.data_source.extract_ref_path(repo_name, "/".join(rest))
            start_line, end_line = parse_line_fragment(fragment)
            return RouterState(
                page_type=PageType.BLOB,
                repo=repo_name,
                ref=ref_path.ref,
                file_path=ref_path.path,
                start_line=start_line,
                end_line=end_line,
            )

        if page_type == "commits":
            ref = "/".join(rest) if rest else await self.data_source.get_default_branch(repo_name)
            return RouterState(page_type=PageType.COMMIT_LIST, repo=repo_name, ref=ref)

        if page_type == "commit":
            commit_sha = "/".join(rest)
            return RouterState(
                page_type=PageType.COMMIT, repo=repo_name, ref=commit_sha, commit_sha=commit_sha
            )

        if page_type == "pulls":
            return RouterState(page_type=PageType.CODE_REVIEW_LIST, repo=repo_name)

        if page_type == "pull" and rest:
            return RouterState(page_type=PageType.CODE_REVIEW, repo=repo_name, code_review_id=rest[0])

        return self._default_state()

    def _default_state(self) -> RouterState:
        return RouterState(page_type=PageType.TREE, repo=DEFAULT_REPO, ref="HEAD", file_path="")

    def build_tree_path(self, repo: str, ref: str | None = None, file_path: str | None = None) -> str:
        if not ref:
            return f"{self.path_prefix}/{_escape(repo)}"
        if file_path:
            return f"{self.path_prefix}/{_escape(repo)}/tree/{_escape(ref)}/{_escape(file_path)}"
        return f"{self.path_prefix}/{_escape(repo)}/tree/{_escape(ref)}"

    def build_blob_path(
        self,
        repo: str,
        ref: str,
        file_path: str,
        start_line: int | None = None,
        end_line: int | None = None,
    ) -> str:
        fragment = ""
        if start_line:
            fragment = f"#L{start_line}"
            if end_line and end_line != start_line:
                fragment += f"-L{end_line}"
        return f"{self.path_prefix}/{_escape(repo)}/blob/{_escape(ref)}/{_escape(file_path)}{fragment}"

    def build_commit_list_path(self, repo: str, ref: str | None = None) -> str:
        if ref:
            return f"{self.path_prefix}/{_escape(repo)}/commits/{_escape(ref)}"
        return f"{self.path_prefix}/{_escape(repo)}/commits"

    def build_commit_path(self, repo: str, commit_sha: str) -> str:
        return f"{self.path_prefix}/{_escape(repo)}/commit/{_escape(commit_sha)}"

    def build_code_review_list_path(self, repo: str) -> str:
        return f"{self.path_prefix}/{_escape(repo)}/pulls"

    def build_code_review_path(self, repo: str, code_review_id: str) -> str:
        return f"{self.path_prefix}/{_escape(repo)}/pull/{_escape(code_review_id)}"

    def build_external_link(self, path: str) -> str:
        """Link to the same page on gitcode.com."""
        return f"{GITCODE_ORIGIN}/{path.lstrip('/')}"
