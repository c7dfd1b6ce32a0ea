# supply_stats/scheduler.py
import logging
import threading
from typing import Optional

from .errors import StatsError

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """Runs builder.refresh() now and then every `interval` seconds until stopped."""

    def __init__(self, builder, interval: float):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.builder = builder
        self.interval = interval
        self._run_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def trigger(self) -> bool:
        """Runs one refresh. Returns False if one was already running (tick skipped)."""
        if not self._run_lock.acquire(blocking=False):
            logger.warning("Refresh still running, skipping this tick")
            return False
        try:
            self.builder.refresh()
        except StatsError as e:
            logger.error("Refresh failed, keeping previous snapshot: %s", e)
        except Exception:
            logger.exception("Unexpected error during refresh, keeping previous snapshot")
        finally:
            self._run_lock.release()
        return True

    def run_forever(self) -> None:
        logger.info("Refreshing every %s seconds", self.interval)
        while not self._stop_event.is_set():
            self.trigger()
            if self._stop_event.wait(self.interval):
                break
        logger.info("Refresh loop stopped")

    def start(self) -> None:
        """Starts the loop on a daemon thread. Safe to call multiple times."""
        if self._thread and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self.run_forever, daemon=True, name="SupplyRefresh")
        self._thread.start()

    def stop(self, timeout: float = 5) -> None:
        self._stop_event.set()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=timeout)

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()
