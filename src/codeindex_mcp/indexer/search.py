"""Keyword search over the inverted index."""

import logging
import math

from codeindex_mcp.indexer.models import CodeChunk, SearchResult
from codeindex_mcp.indexer.store import IndexStore
from codeindex_mcp.indexer.tokens import extract_keywords

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 5


def score_chunk(chunk: CodeChunk, query_keywords: frozenset[str]) -> float:
    """
    Score a chunk against a query keyword set.

    Matching keywords are divided by the square root of the chunk's keyword
    count, so a small chunk dense in query terms beats a large chunk that
    happens to contain one of them.
    """
    if not chunk.keywords:
        return 0.0
    matches = len(chunk.keywords & query_keywords)
    return matches / math.sqrt(len(chunk.keywords))


class SearchEngine:
    """Ranks chunks of an IndexStore against free-text queries."""

    def __init__(self, store: IndexStore):
        self._store = store

    def search_scored(self, query: str, top_k: int = DEFAULT_TOP_K) -> list[SearchResult]:
        """
        Return the top_k best chunks for a query with their scores.

        Args:
            query: Free text; tokenized exactly like indexed content
            top_k: Number of results to return, must be positive

        Returns:
            Results by descending score, ties broken by path then start line.

        Raises:
            ValueError: If top_k is not a positive integer.
        """
        if isinstance(top_k, bool) or not isinstance(top_k, int) or top_k < 1:
            raise ValueError(f"top_k must be a positive integer, got {top_k!r}")

        query_keywords = extract_keywords(query)
        if not query_keywords:
            return []

        best: dict[tuple[str, int], SearchResult] = {}
        for entry in self._store.candidates(query_keywords):
            for chunk in entry.chunks:
                score = score_chunk(chunk, query_keywords)
                if score <= 0.0:
                    continue
                key = (chunk.file_path, chunk.start_line)
                current = best.get(key)
                if current is None or score > current.score:
                    best[key] = SearchResult(chunk=chunk, score=score)

        ranked = sorted(
            best.values(),
            key=lambda r: (-r.score, r.chunk.file_path, r.chunk.start_line),
        )
        logger.debug("Query %r matched %d chunks", query, len(ranked))
        return ranked[:top_k]

    def search(self, query: str, top_k: int = DEFAULT_TOP_K) -> list[CodeChunk]:
        """Return the top_k best chunks for a query."""
        return [result.chunk for result in self.search_scored(query, top_k)]
