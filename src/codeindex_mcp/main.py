"""Main entry point for the codeindex-mcp server."""

import argparse
import logging
import sys

from fastmcp import FastMCP

from codeindex_mcp.config import Config
from codeindex_mcp.indexer import Indexer
from codeindex_mcp.sync import SyncManager
from codeindex_mcp.tools import register_tools

logger = logging.getLogger(__name__)


def create_server(config: Config, indexer: Indexer | None = None) -> FastMCP:
    """Create and configure the MCP server.

    Args:
        config: Configuration instance with all settings.
        indexer: Indexer to serve; built from config when omitted.
    """
    mcp = FastMCP(
        name="codeindex",
        instructions=(
            "codeindex keeps a keyword index of the current project's source code. "
            "Use search_code to find the functions, classes and methods relevant to "
            "a task before reading whole files."
        ),
    )

    if indexer is None:
        indexer = Indexer.from_config(config)

    logger.info("Loading index from %s", config.index_path)
    indexer.initialize()

    if indexer.get_stats().files == 0:
        logger.info("Index is empty, performing initial scan...")
        result = indexer.index_directory()
        logger.info("Initial scan complete: %d files indexed", result.added)

    logger.info("Registering tools...")
    register_tools(mcp, indexer)

    logger.info("Server configured successfully")
    return mcp


def main() -> None:
    """Main function - starts the MCP server."""
    # Configure logging here to avoid side effects on import. MCP talks over
    # stdout, so logs go to stderr.
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    parser = argparse.ArgumentParser(description="codeindex-mcp - code search for AI assistants")
    parser.add_argument(
        "--reindex",
        action="store_true",
        help="Rescan the project before starting",
    )
    parser.add_argument(
        "--no-sync",
        action="store_true",
        help="Disable the background rescan thread",
    )
    args = parser.parse_args()

    try:
        config = Config.from_env()
        indexer = Indexer.from_config(config)
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        sys.exit(2)

    logger.info("=" * 50)
    logger.info("codeindex-mcp starting...")
    logger.info("  ROOT:       %s", config.index_root)
    logger.info("  INDEX:      %s", config.index_path)
    logger.info("  CHUNK:      %d lines", config.max_chunk_lines)
    logger.info("  WORKERS:    %d", config.workers)
    logger.info("  SYNC:       %s", f"{config.sync_interval}s" if config.sync_interval else "disabled")
    logger.info("=" * 50)

    if args.reindex:
        logger.info("Rescan requested...")
        indexer.initialize()
        result = indexer.index_directory()
        logger.info(
            "Rescan complete: %d added, %d updated, %d removed",
            result.added,
            result.updated,
            result.removed,
        )

    sync_manager: SyncManager | None = None
    try:
        mcp = create_server(config, indexer)
        if config.sync_interval > 0 and not args.no_sync:
            sync_manager = SyncManager(indexer, config.sync_interval)
            sync_manager.start()
        logger.info("Starting MCP server on stdio...")
        mcp.run(transport="stdio")
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception:
        logger.exception("Server error")
        sys.exit(1)
    finally:
        if sync_manager is not None:
            sync_manager.stop()
        indexer.dispose()


if __name__ == "__main__":
    main()
