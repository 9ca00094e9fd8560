"""Result shapes for capabilities the GitCode provider does not back.

Text search, blame and symbol navigation always come back empty, but hosts
still program against these types.
"""

from dataclasses import dataclass, field


@dataclass
class TextSearchQuery:
    query: str
    is_regex: bool = False
    is_case_sensitive: bool = False
    is_word_match: bool = False


@dataclass
class TextSearchResult:
    path: str
    line: int
    preview: str


@dataclass
class TextSearchResults:
    results: list[TextSearchResult] = field(default_factory=list)
    truncated: bool = False


@dataclass
class BlameRange:
    start_line: int
    end_line: int
    commit_sha: str
    author: str | None = None


@dataclass
class SymbolLocation:
    path: str
    ref: str
    line: int
    character: int


@dataclass
class SymbolHover:
    markdown: str
