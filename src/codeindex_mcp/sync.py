"""Background sync manager for automatic index updates.

Runs a daemon thread that periodically rescans the project so source edits,
new files and deletions made outside the assistant reach the index. Stopping
the manager also cancels a scan that is in flight.
"""

import logging
import threading

from codeindex_mcp.indexer import Indexer

logger = logging.getLogger(__name__)


class SyncManager:
    """Manages periodic background rescans of the project.

    The sync thread is a daemon, so it automatically terminates when the
    main process exits.
    """

    def __init__(self, indexer: Indexer, interval: int):
        """Initialize the sync manager.

        Args:
            indexer: The indexer instance to keep up to date.
            interval: Seconds between scans. Must be > 0.
        """
        if interval <= 0:
            raise ValueError(f"Sync interval must be positive, got {interval}")

        self._indexer = indexer
        self._interval = interval
        self._stop_event = threading.Event()
        self._wake_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the background sync thread."""
        if self.is_running:
            logger.warning("Sync thread already running")
            return

        self._stop_event.clear()
        self._wake_event.clear()
        self._thread = threading.Thread(
            target=self._sync_loop,
            name="codeindex-sync",
            daemon=True,
        )
        self._thread.start()
        logger.info("Sync manager started (interval: %ds)", self._interval)

    def request_sync(self) -> None:
        """Run the next scan now instead of waiting for the interval."""
        self._wake_event.set()

    def stop(self, timeout: float | None = None) -> None:
        """Stop the background thread, cancelling a scan in progress.

        A cancelled scan finishes the file it is on, so the index stays
        consistent.
        """
        if not self.is_running:
            return

        self._stop_event.set()
        self._wake_event.set()
        self._thread.join(timeout=timeout if timeout is not None else self._interval + 1)
        if self._thread.is_alive():
            logger.warning("Sync thread did not stop cleanly")
        else:
            logger.info("Sync manager stopped")
        self._thread = None

    def _sync_loop(self) -> None:
        logger.debug("Sync loop started")

        while not self._stop_event.is_set():
            # Sleep first; the initial scan happens at startup
            self._wake_event.wait(timeout=self._interval)
            self._wake_event.clear()
            if self._stop_event.is_set():
                break

            try:
                result = self._indexer.index_directory(cancel=self._stop_event)
            except Exception:
                logger.exception("Error during auto-sync")
                continue

            if result.cancelled:
                logger.info("Auto-sync cancelled")
            elif result.added or result.updated or result.removed:
                logger.info(
                    "Auto-sync: %d added, %d updated, %d removed",
                    result.added,
                    result.updated,
                    result.removed,
                )
            else:
                logger.debug("Auto-sync: no changes detected")

        logger.debug("Sync loop stopped")
