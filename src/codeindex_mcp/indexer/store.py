"""In-memory index with incremental per-file updates and JSON persistence."""

import logging
import threading
from collections import Counter
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from codeindex_mcp.indexer.chunker import DEFAULT_MAX_CHUNK_LINES, chunk_file
from codeindex_mcp.indexer.languages import LanguageRegistry
from codeindex_mcp.indexer.models import CodebaseIndex, IndexEntry, IndexStats, RefreshResult
from codeindex_mcp.indexer.storage import (
    index_to_dict,
    load_index,
    new_index,
    save_index,
    utc_now_iso,
)
from codeindex_mcp.indexer.tokens import compute_hash
from codeindex_mcp.indexer.walker import DEFAULT_IGNORE_DIRS, is_ignored, iter_source_files

logger = logging.getLogger(__name__)

# index_file outcomes
ADDED = "added"
UPDATED = "updated"
UNCHANGED = "unchanged"
SKIPPED = "skipped"
FAILED = "failed"


class IndexStore:
    """
    Owns the codebase index and keeps its inverted index consistent.

    Thread Safety:
        A single lock guards the entries map and the inverted index. Each file
        update (drop old keywords, install entry, add new keywords) runs inside
        it, so readers never see a half-applied file. Reading, hashing and
        chunking happen outside the lock. Entries are immutable, so snapshots
        handed to readers stay valid after the lock is released.
    """

    def __init__(
        self,
        root: Path,
        index_path: Path,
        languages: LanguageRegistry,
        max_chunk_lines: int = DEFAULT_MAX_CHUNK_LINES,
        ignore_dirs: frozenset[str] = DEFAULT_IGNORE_DIRS,
        workers: int = 1,
    ):
        """
        Initialize the store.

        Args:
            root: Project root; only files below it are indexed
            index_path: Where the index document is persisted
            languages: Registry selecting files and signature patterns
            max_chunk_lines: Chunk size threshold
            ignore_dirs: Directory names excluded from indexing
            workers: Threads used by index_directory
        """
        if max_chunk_lines < 1:
            raise ValueError(f"max_chunk_lines must be >= 1, got {max_chunk_lines}")
        if workers < 1:
            raise ValueError(f"workers must be >= 1, got {workers}")

        self.root = root.resolve()
        self.index_path = index_path
        self.languages = languages
        self.max_chunk_lines = max_chunk_lines
        self.ignore_dirs = ignore_dirs
        self.workers = workers
        self._index: CodebaseIndex | None = None
        self._lock = threading.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._index is not None

    def initialize(self) -> None:
        """Load the persisted index, or start a fresh one. Never raises."""
        self._ensure_initialized()

    def _ensure_initialized(self) -> CodebaseIndex:
        """Return the loaded index, loading it first if needed.

        The index installed under the lock is returned, so a concurrent
        dispose() cannot turn the result into None.
        """
        index = self._index
        if index is not None:
            return index

        try:
            self.index_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning("Cannot create index directory %s: %s", self.index_path.parent, e)

        loaded = load_index(self.index_path, self.root)
        with self._lock:
            if self._index is None:
                self._index = loaded if loaded is not None else new_index(self.root)
            return self._index

    def dispose(self) -> None:
        """Drop in-memory state. The next operation reloads from disk."""
        with self._lock:
            self._index = None

    # Updates

    def index_file(self, path: Path) -> str:
        """
        Bring the entry for one file up to date.

        Does not persist; callers persist at batch granularity.

        Returns:
            One of "added", "updated", "unchanged", "skipped" or "failed".
        """
        index = self._ensure_initialized()

        try:
            file_path = path.resolve()
        except (OSError, RuntimeError) as e:
            logger.warning("Cannot resolve path %s: %s", path, e)
            return FAILED
        try:
            relative = file_path.relative_to(self.root)
        except ValueError:
            logger.warning("Skipping file outside index root: %s", path)
            return SKIPPED

        if is_ignored(relative, self.ignore_dirs):
            return SKIPPED
        profile = self.languages.for_path(file_path)
        if profile is None:
            return SKIPPED

        try:
            content = file_path.read_text(encoding="utf-8")
            mtime = file_path.stat().st_mtime
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Skipping unreadable file %s: %s", relative.as_posix(), e)
            return FAILED

        key = str(file_path)
        file_hash = compute_hash(content)
        with self._lock:
            existing = index.entries.get(key)
        if existing is not None and existing.file_hash == file_hash:
            return UNCHANGED

        relative_path = relative.as_posix()
        chunks = chunk_file(
            content,
            file_path=key,
            relative_path=relative_path,
            signatures=profile.signatures,
            max_lines=self.max_chunk_lines,
        )
        entry = IndexEntry(
            file_path=key,
            relative_path=relative_path,
            language=profile.name,
            chunks=tuple(chunks),
            last_modified=mtime,
            file_hash=file_hash,
        )

        with self._lock:
            previous = index.entries.get(key)
            if previous is not None and previous.file_hash == file_hash:
                return UNCHANGED
            if previous is not None:
                self._unlink_keywords(index, previous)
            index.entries[key] = entry
            self._link_keywords(index, entry)

        logger.debug("Indexed %s: %d chunks", relative_path, len(chunks))
        return ADDED if previous is None else UPDATED

    def remove_file(self, path: Path) -> bool:
        """Drop the entry for a file. Returns True if one existed."""
        index = self._ensure_initialized()
        key = str(path.resolve())
        with self._lock:
            return self._remove_entry(index, key)

    def index_directory(
        self,
        root: Path | None = None,
        cancel: threading.Event | None = None,
    ) -> RefreshResult:
        """
        Incrementally index every source file under root and persist once.

        Entries under root whose files were not found are swept. A cancelled
        walk keeps every file it finished, skips the sweep and still persists.

        Args:
            root: Subtree to scan. Defaults to the index root.
            cancel: Event checked between files to stop the walk early.

        Returns:
            Counts of what changed.
        """
        self._ensure_initialized()
        scan_root = (root or self.root).resolve()
        if not scan_root.is_relative_to(self.root):
            raise ValueError(f"Directory {root} is outside the index root {self.root}")

        logger.info("Scanning %s", scan_root)
        seen: set[str] = set()

        def walked_files() -> Iterable[Path]:
            for file_path in iter_source_files(
                scan_root, self.ignore_dirs, self.languages.extensions, cancel
            ):
                try:
                    seen.add(str(file_path.resolve()))
                except (OSError, RuntimeError):
                    pass  # index_file reports it
                yield file_path

        def process(file_path: Path) -> str | None:
            if cancel is not None and cancel.is_set():
                return None
            return self.index_file(file_path)

        if self.workers > 1:
            with ThreadPoolExecutor(
                max_workers=self.workers, thread_name_prefix="codeindex-worker"
            ) as pool:
                outcomes = Counter(pool.map(process, walked_files()))
        else:
            outcomes = Counter(process(file_path) for file_path in walked_files())

        cancelled = cancel is not None and cancel.is_set()
        removed = 0
        if cancelled:
            logger.info("Scan of %s cancelled, skipping deleted-file sweep", scan_root)
        else:
            removed = self._sweep(scan_root, seen)

        self.persist()

        result = RefreshResult(
            added=outcomes[ADDED],
            updated=outcomes[UPDATED],
            unchanged=outcomes[UNCHANGED],
            removed=removed,
            failed=outcomes[FAILED],
            cancelled=cancelled,
        )
        logger.info(
            "Scan complete: %d added, %d updated, %d unchanged, %d removed, %d failed",
            result.added,
            result.updated,
            result.unchanged,
            result.removed,
            result.failed,
        )
        return result

    def _sweep(self, scan_root: Path, seen: set[str]) -> int:
        """Remove entries under scan_root that the walk did not list."""
        index = self._ensure_initialized()
        with self._lock:
            stale = [
                key
                for key in index.entries
                if key not in seen and Path(key).is_relative_to(scan_root)
            ]
            for key in stale:
                self._remove_entry(index, key)

        for key in stale:
            logger.debug("Removed deleted file from index: %s", key)
        return len(stale)

    # Inverted index maintenance (callers hold the lock)

    @staticmethod
    def _link_keywords(index: CodebaseIndex, entry: IndexEntry) -> None:
        for keyword in entry.keywords:
            index.inverted_index.setdefault(keyword, set()).add(entry.file_path)

    @staticmethod
    def _unlink_keywords(index: CodebaseIndex, entry: IndexEntry) -> None:
        for keyword in entry.keywords:
            paths = index.inverted_index.get(keyword)
            if paths is None:
                continue
            paths.discard(entry.file_path)
            if not paths:
                del index.inverted_index[keyword]

    def _remove_entry(self, index: CodebaseIndex, key: str) -> bool:
        entry = index.entries.pop(key, None)
        if entry is None:
            return False
        self._unlink_keywords(index, entry)
        return True

    # Reads

    def candidates(self, keywords: Iterable[str]) -> list[IndexEntry]:
        """Snapshot of the entries containing any of the keywords, in path order."""
        index = self._ensure_initialized()
        with self._lock:
            paths: set[str] = set()
            for keyword in keywords:
                paths.update(index.inverted_index.get(keyword, ()))
            return [index.entries[path] for path in sorted(paths) if path in index.entries]

    def get_entry(self, path: Path) -> IndexEntry | None:
        index = self._ensure_initialized()
        with self._lock:
            return index.entries.get(str(path.resolve()))

    def files_for_keyword(self, keyword: str) -> set[str]:
        index = self._ensure_initialized()
        with self._lock:
            return set(index.inverted_index.get(keyword, ()))

    def get_stats(self) -> IndexStats:
        """Return file, chunk and distinct keyword counts."""
        index = self._ensure_initialized()
        with self._lock:
            return IndexStats(
                files=len(index.entries),
                chunks=sum(len(entry.chunks) for entry in index.entries.values()),
                keywords=len(index.inverted_index),
            )

    # Persistence

    def persist(self) -> None:
        """Write the whole index document to index_path."""
        index = self._ensure_initialized()
        with self._lock:
            index.updated_at = utc_now_iso()
            payload = index_to_dict(index)
        save_index(self.index_path, payload)
        logger.debug("Persisted index to %s", self.index_path)

    def snapshot(self) -> CodebaseIndex:
        """Deep-enough copy of the current document, for inspection and tests."""
        index = self._ensure_initialized()
        with self._lock:
            return CodebaseIndex(
                version=index.version,
                root_dir=index.root_dir,
                entries=dict(index.entries),
                inverted_index={k: set(v) for k, v in index.inverted_index.items()},
                created_at=index.created_at,
                updated_at=index.updated_at,
            )
