"""JSON persistence for the codebase index document."""

import json
import logging
from datetime import UTC, datetime
from pathlib import Path

from codeindex_mcp.indexer.models import CodebaseIndex, CodeChunk, IndexEntry

logger = logging.getLogger(__name__)

INDEX_VERSION = 1


class IndexFormatError(ValueError):
    """Raised when a stored document does not have the expected shape."""


def utc_now_iso() -> str:
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_index(root_dir: Path) -> CodebaseIndex:
    """Create an empty index document for root_dir."""
    now = utc_now_iso()
    return CodebaseIndex(
        version=INDEX_VERSION,
        root_dir=str(root_dir),
        created_at=now,
        updated_at=now,
    )


def _chunk_to_dict(chunk: CodeChunk) -> dict[str, object]:
    return {
        "file_path": chunk.file_path,
        "relative_path": chunk.relative_path,
        "start_line": chunk.start_line,
        "end_line": chunk.end_line,
        "signature": chunk.signature,
        "keywords": sorted(chunk.keywords),
        "content": chunk.content,
        "content_hash": chunk.content_hash,
    }


def _entry_to_dict(entry: IndexEntry) -> dict[str, object]:
    return {
        "file_path": entry.file_path,
        "relative_path": entry.relative_path,
        "language": entry.language,
        "chunks": [_chunk_to_dict(chunk) for chunk in entry.chunks],
        "last_modified": entry.last_modified,
        "file_hash": entry.file_hash,
    }


def index_to_dict(index: CodebaseIndex) -> dict[str, object]:
    """Serialize an index into plain JSON-compatible data."""
    return {
        "version": index.version,
        "root_dir": index.root_dir,
        "entries": {path: _entry_to_dict(entry) for path, entry in index.entries.items()},
        "inverted_index": {
            keyword: sorted(paths) for keyword, paths in index.inverted_index.items()
        },
        "created_at": index.created_at,
        "updated_at": index.updated_at,
    }


def _require(obj: dict, key: str, expected: type | tuple[type, ...]):
    value = obj.get(key)
    if not isinstance(value, expected):
        raise IndexFormatError(f"Field '{key}' is missing or has the wrong type")
    return value


def _chunk_from_dict(obj: object) -> CodeChunk:
    if not isinstance(obj, dict):
        raise IndexFormatError("Chunk must be an object")
    keywords = _require(obj, "keywords", list)
    if not all(isinstance(keyword, str) for keyword in keywords):
        raise IndexFormatError("Chunk keywords must be strings")
    return CodeChunk(
        file_path=_require(obj, "file_path", str),
        relative_path=_require(obj, "relative_path", str),
        start_line=_require(obj, "start_line", int),
        end_line=_require(obj, "end_line", int),
        signature=_require(obj, "signature", str),
        keywords=frozenset(keywords),
        content=_require(obj, "content", str),
        content_hash=_require(obj, "content_hash", str),
    )


def _entry_from_dict(obj: object) -> IndexEntry:
    if not isinstance(obj, dict):
        raise IndexFormatError("Entry must be an object")
    return IndexEntry(
        file_path=_require(obj, "file_path", str),
        relative_path=_require(obj, "relative_path", str),
        language=_require(obj, "language", str),
        chunks=tuple(_chunk_from_dict(chunk) for chunk in _require(obj, "chunks", list)),
        last_modified=float(_require(obj, "last_modified", (int, float))),
        file_hash=_require(obj, "file_hash", str),
    )


def index_from_dict(payload: object) -> CodebaseIndex:
    """
    Rebuild an index from data produced by index_to_dict.

    Raises:
        IndexFormatError: If the payload is malformed or from another version.
    """
    if not isinstance(payload, dict):
        raise IndexFormatError("Index document must be an object")

    version = payload.get("version")
    if not isinstance(version, int) or isinstance(version, bool):
        raise IndexFormatError("Index document has no version")
    if version != INDEX_VERSION:
        raise IndexFormatError(
            f"Unsupported index version {version} (this reader supports {INDEX_VERSION})"
        )

    entries = {
        path: _entry_from_dict(raw) for path, raw in _require(payload, "entries", dict).items()
    }

    inverted_index: dict[str, set[str]] = {}
    for keyword, paths in _require(payload, "inverted_index", dict).items():
        if not isinstance(paths, list) or not all(isinstance(p, str) for p in paths):
            raise IndexFormatError(f"Inverted index list for '{keyword}' is malformed")
        inverted_index[keyword] = set(paths)

    return CodebaseIndex(
        version=version,
        root_dir=_require(payload, "root_dir", str),
        entries=entries,
        inverted_index=inverted_index,
        created_at=_require(payload, "created_at", str),
        updated_at=_require(payload, "updated_at", str),
    )


def load_index(path: Path, root_dir: Path) -> CodebaseIndex | None:
    """
    Load the index stored at path.

    Returns None when the file is absent, unreadable, corrupt, written by an
    unsupported version or built for another root. Never raises.
    """
    if not path.exists():
        logger.info("No index found at %s", path)
        return None

    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
        index = index_from_dict(payload)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, IndexFormatError) as e:
        logger.warning("Discarding unreadable index %s: %s", path, e)
        return None

    if index.root_dir != str(root_dir):
        logger.warning(
            "Discarding index %s built for %s (current root: %s)", path, index.root_dir, root_dir
        )
        return None

    logger.info("Loaded index from %s: %d files", path, len(index.entries))
    return index


def save_index(path: Path, payload: dict[str, object]) -> None:
    """Write a serialized index, replacing the previous file atomically."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        with tmp.open("w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2, sort_keys=True)
            handle.write("\n")
        tmp.replace(path)
    except Exception:
        tmp.unlink(missing_ok=True)
        raise
