"""Configuration module for codeindex-mcp.

Loads configuration from environment variables with sensible defaults.
"""

import os
from dataclasses import dataclass
from pathlib import Path


def _int_from_env(name: str, default: str, minimum: int) -> int:
    raw = os.getenv(name, default)
    try:
        value = int(raw)
        if value < minimum:
            raise ValueError(f"must be >= {minimum}, got {value}")
    except ValueError as e:
        raise ValueError(f"Invalid {name} value '{raw}': {e}") from e
    return value


@dataclass
class Config:
    """Application configuration."""

    index_root: Path
    index_path: Path
    max_chunk_lines: int
    workers: int
    sync_interval: int
    extra_ignore_dirs: frozenset[str]
    languages_file: Path | None

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        index_root = Path(os.getenv("CODEINDEX_ROOT", os.getcwd())).expanduser().resolve()

        default_path = str(index_root / ".codeindex" / "index.json")
        index_path = Path(os.getenv("CODEINDEX_PATH", default_path)).expanduser()

        max_chunk_lines = _int_from_env("CODEINDEX_MAX_CHUNK_LINES", "50", minimum=1)
        workers = _int_from_env("CODEINDEX_WORKERS", "1", minimum=1)

        # 0 disables background sync
        sync_interval = _int_from_env("CODEINDEX_SYNC_INTERVAL", "30", minimum=0)

        extra_ignore = os.getenv("CODEINDEX_EXTRA_IGNORE", "")
        extra_ignore_dirs = frozenset(
            name.strip() for name in extra_ignore.split(",") if name.strip()
        )

        languages_env = os.getenv("CODEINDEX_LANGUAGES")
        languages_file = Path(languages_env).expanduser() if languages_env else None

        return cls(
            index_root=index_root,
            index_path=index_path,
            max_chunk_lines=max_chunk_lines,
            workers=workers,
            sync_interval=sync_interval,
            extra_ignore_dirs=extra_ignore_dirs,
            languages_file=languages_file,
        )
