"""Data models for the indexer."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CodeChunk:
    """A contiguous line range of one file, the unit of retrieval."""

    file_path: str  # Absolute
    relative_path: str  # POSIX, relative to the index root
    start_line: int  # 1-indexed, inclusive
    end_line: int  # 1-indexed, inclusive
    signature: str
    keywords: frozenset[str]
    content: str
    content_hash: str

    @property
    def line_count(self) -> int:
        return self.end_line - self.start_line + 1


@dataclass(frozen=True)
class IndexEntry:
    """Everything the index knows about one file."""

    file_path: str
    relative_path: str
    language: str
    chunks: tuple[CodeChunk, ...]
    last_modified: float
    file_hash: str

    @property
    def keywords(self) -> frozenset[str]:
        """Union of the keywords of every chunk."""
        return frozenset().union(*(chunk.keywords for chunk in self.chunks))


@dataclass
class CodebaseIndex:
    """The persisted index document."""

    version: int
    root_dir: str
    entries: dict[str, IndexEntry] = field(default_factory=dict)
    inverted_index: dict[str, set[str]] = field(default_factory=dict)
    created_at: str = ""
    updated_at: str = ""


@dataclass(frozen=True)
class IndexStats:
    """Diagnostic counts."""

    files: int
    chunks: int
    keywords: int


@dataclass(frozen=True)
class RefreshResult:
    """Outcome of a directory scan."""

    added: int = 0
    updated: int = 0
    unchanged: int = 0
    removed: int = 0
    failed: int = 0
    cancelled: bool = False


@dataclass(frozen=True)
class SearchResult:
    """A ranked chunk."""

    chunk: CodeChunk
    score: float
