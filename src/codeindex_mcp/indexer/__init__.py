"""
Indexer module for codeindex-mcp.

This module keeps an incremental keyword index of a source tree: files are
split into definition-sized chunks, tracked by content hash and reachable
through an inverted keyword index. It is the core component of the system.
"""

from codeindex_mcp.indexer.chunker import chunk_file
from codeindex_mcp.indexer.indexer import Indexer
from codeindex_mcp.indexer.languages import (
    LanguageConfigError,
    LanguageProfile,
    LanguageRegistry,
    load_language_registry,
)
from codeindex_mcp.indexer.models import (
    CodebaseIndex,
    CodeChunk,
    IndexEntry,
    IndexStats,
    RefreshResult,
    SearchResult,
)
from codeindex_mcp.indexer.search import SearchEngine
from codeindex_mcp.indexer.store import IndexStore
from codeindex_mcp.indexer.tokens import compute_hash, extract_keywords
from codeindex_mcp.indexer.walker import iter_source_files

__all__ = [
    "CodeChunk",
    "CodebaseIndex",
    "IndexEntry",
    "IndexStats",
    "IndexStore",
    "Indexer",
    "LanguageConfigError",
    "LanguageProfile",
    "LanguageRegistry",
    "RefreshResult",
    "SearchEngine",
    "SearchResult",
    "chunk_file",
    "compute_hash",
    "extract_keywords",
    "iter_source_files",
    "load_language_registry",
]
