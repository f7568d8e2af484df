"""
Periodic reclamation of idle sessions.

Runs on the application's event loop. Each cycle calls the store's
synchronous sweep, so a cycle never interleaves with a command handler.
"""

import asyncio
from datetime import UTC, datetime

from ..realtime.connection_manager import SessionConnectionManager
from ..services.session_store import SessionStore
from ..structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)


class PeriodicSessionSweeper:
    """
    Background task that removes empty sessions past the retention window.

    Sessions may outlive the window by up to one sweep interval.
    """

    def __init__(
        self,
        store: SessionStore,
        connection_manager: SessionConnectionManager | None = None,
        interval_seconds: float = 900.0,
    ):
        """
        Initialize the sweeper.

        Args:
            store: Store to sweep
            connection_manager: Broadcast groups of reclaimed sessions are dropped here
            interval_seconds: Seconds between sweep cycles
        """
        self.store = store
        self.connection_manager = connection_manager
        self.interval = interval_seconds
        self.running = False
        self.sweeper_task: asyncio.Task | None = None
        self.started_at: datetime | None = None
        self.total_cycles_completed = 0
        self.total_sessions_reclaimed = 0

    def start(self) -> None:
        """Schedule the sweep loop on the running event loop."""
        if self.running:
            raise RuntimeError("Session sweeper already running")
        self.sweeper_task = asyncio.get_running_loop().create_task(
            self._sweep_loop(), name="lifecycle/session_sweeper"
        )
        self.started_at = datetime.now(UTC)
        self.running = True
        logger.info("Session sweeper started", interval=self.interval)

    async def _sweep_loop(self) -> None:
        try:
            while True:
                await asyncio.sleep(self.interval)
                self.sweep_once()
        except asyncio.CancelledError:
            logger.info("Session sweeper cancelled")
            raise

    def sweep_once(self) -> list[str]:
        """
        Run one sweep cycle.

        Returns:
            Codes of the reclaimed sessions
        """
        removed = self.store.sweep_idle()
        if self.connection_manager is not None:
            for code in removed:
                self.connection_manager.drop_session_group(code)

        self.total_cycles_completed += 1
        self.total_sessions_reclaimed += len(removed)
        logger.debug(
            "Session sweep cycle completed",
            cycle=self.total_cycles_completed,
            reclaimed=len(removed),
            active_sessions=len(self.store),
        )
        return removed

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish."""
        if not self.running:
            logger.warning("Stop called on session sweeper that is not running")
            return
        self.running = False
        task = self.sweeper_task
        self.sweeper_task = None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        logger.info(
            "Session sweeper stopped",
            cycles=self.total_cycles_completed,
            reclaimed=self.total_sessions_reclaimed,
        )
