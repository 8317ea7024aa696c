"""Main indexer that ties the store and the search engine together."""

import logging
import threading
from pathlib import Path

from codeindex_mcp.config import Config
from codeindex_mcp.indexer.chunker import DEFAULT_MAX_CHUNK_LINES
from codeindex_mcp.indexer.languages import LanguageRegistry, load_language_registry
from codeindex_mcp.indexer.models import (
    CodeChunk,
    IndexEntry,
    IndexStats,
    RefreshResult,
    SearchResult,
)
from codeindex_mcp.indexer.search import DEFAULT_TOP_K, SearchEngine
from codeindex_mcp.indexer.store import IndexStore
from codeindex_mcp.indexer.walker import DEFAULT_IGNORE_DIRS

logger = logging.getLogger(__name__)


class Indexer:
    """
    Handle on one project's code index.

    The filesystem is always the source of truth. The JSON document is a
    derived index that can be rebuilt at any time.

    Thread Safety:
        Per-file updates are atomic with respect to searches (see IndexStore).
        Searches may run from any number of threads.
    """

    def __init__(
        self,
        root: Path,
        index_path: Path,
        languages: LanguageRegistry | None = None,
        max_chunk_lines: int = DEFAULT_MAX_CHUNK_LINES,
        ignore_dirs: frozenset[str] = DEFAULT_IGNORE_DIRS,
        workers: int = 1,
    ):
        """
        Initialize the indexer.

        Args:
            root: Project root directory
            index_path: Path of the persisted index document
            languages: Language profiles; the bundled ones by default
            max_chunk_lines: Chunk size threshold
            ignore_dirs: Directory names excluded from indexing
            workers: Threads used for directory scans
        """
        self.store = IndexStore(
            root=root,
            index_path=index_path,
            languages=languages or load_language_registry(),
            max_chunk_lines=max_chunk_lines,
            ignore_dirs=ignore_dirs,
            workers=workers,
        )
        self.engine = SearchEngine(self.store)

    @classmethod
    def from_config(cls, config: Config) -> "Indexer":
        """Build an indexer from application configuration."""
        return cls(
            root=config.index_root,
            index_path=config.index_path,
            languages=load_language_registry(config.languages_file),
            max_chunk_lines=config.max_chunk_lines,
            ignore_dirs=DEFAULT_IGNORE_DIRS | config.extra_ignore_dirs,
            workers=config.workers,
        )

    @property
    def root(self) -> Path:
        return self.store.root

    def initialize(self) -> None:
        """Load the persisted index or create an empty one."""
        self.store.initialize()

    def dispose(self) -> None:
        """Drop in-memory state."""
        self.store.dispose()

    def index_directory(
        self,
        root: Path | None = None,
        cancel: threading.Event | None = None,
    ) -> RefreshResult:
        """Incrementally index a subtree (the whole project by default) and persist."""
        return self.store.index_directory(root, cancel=cancel)

    def index_file(self, path: Path) -> str:
        """Update a single file without persisting (e.g. on a watch event)."""
        return self.store.index_file(path)

    def remove_file(self, path: Path) -> bool:
        """Forget a deleted file without persisting."""
        return self.store.remove_file(path)

    def persist(self) -> None:
        self.store.persist()

    def search(self, query: str, top_k: int = DEFAULT_TOP_K) -> list[CodeChunk]:
        return self.engine.search(query, top_k)

    def search_scored(self, query: str, top_k: int = DEFAULT_TOP_K) -> list[SearchResult]:
        return self.engine.search_scored(query, top_k)

    def get_stats(self) -> IndexStats:
        return self.store.get_stats()

    def get_entry(self, path: Path) -> IndexEntry | None:
        return self.store.get_entry(path)
