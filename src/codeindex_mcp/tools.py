"""MCP tools for the codeindex-mcp server.

This module defines the tools exposed by the MCP server:
- search_code: Keyword search over indexed code chunks
- index_stats: File, chunk and keyword counts of the index
- refresh_index: Incremental rescan of the project
"""

from dataclasses import asdict

from fastmcp import FastMCP

from codeindex_mcp.indexer import Indexer, SearchResult


def format_result(result: SearchResult) -> dict:
    """Convert a search result into the tool response shape."""
    chunk = result.chunk
    return {
        "relative_path": chunk.relative_path,
        "start_line": chunk.start_line,
        "end_line": chunk.end_line,
        "signature": chunk.signature,
        "score": round(result.score, 4),
        "content": chunk.content,
    }


def register_tools(mcp: FastMCP, indexer: Indexer) -> None:
    """Register all index tools with the FastMCP server.

    Args:
        mcp: FastMCP server instance
        indexer: Initialized indexer serving the project
    """

    @mcp.tool()
    def search_code(query: str, top_k: int = 5) -> list[dict]:
        """Find the code chunks most relevant to a query.

        Chunks are roughly one definition each (function, class, method).
        Ranking favors small chunks dense in query keywords.

        Args:
            query: Free text or identifiers to look for
            top_k: Number of chunks to return (must be >= 1, default: 5)

        Returns:
            List of chunks, best first, with:
            - relative_path: File path relative to the project root
            - start_line / end_line: 1-indexed inclusive line range
            - signature: Definition name or line range label
            - score: Relevance score (higher is better)
            - content: Source text of the chunk
        """
        return [format_result(result) for result in indexer.search_scored(query, top_k)]

    @mcp.tool()
    def index_stats() -> dict:
        """Report how many files, chunks and distinct keywords are indexed."""
        return asdict(indexer.get_stats())

    @mcp.tool()
    def refresh_index() -> dict:
        """Rescan the project and update the index for changed files.

        Unchanged files are skipped by content hash; deleted files are removed.

        Returns:
            Counts of added, updated, unchanged, removed and failed files.
        """
        return asdict(indexer.index_directory())
