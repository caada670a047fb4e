"""Background sampling loop for hostpanel."""

import logging
import threading
from collections.abc import Callable
from enum import Enum

from hostpanel.collector import SnapshotCollector
from hostpanel.models import Snapshot
from hostpanel.store import SnapshotStore

logger = logging.getLogger(__name__)


class SchedulerState(Enum):
    """Lifecycle states of the scheduler."""

    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class SnapshotScheduler:
    """
    Periodically collects a snapshot and publishes it to the store.

    Runs in a separate daemon thread. Each cycle waits the fixed interval,
    collects, then publishes, so collections never overlap: a slow
    collection simply pushes the next one back.
    """

    def __init__(
        self,
        collector: SnapshotCollector,
        store: SnapshotStore,
        interval: float = 0.9,
        on_publish: Callable[[Snapshot], None] | None = None,
        wait: Callable[[float], bool] | None = None,
    ) -> None:
        """
        Initialize the SnapshotScheduler.

        Args:
            collector: Source of snapshots.
            store: Where completed snapshots are published.
            interval: Seconds to wait before each collection.
            on_publish: Called from the scheduler thread after each publish.
            wait: Blocks for the given seconds and returns True once a stop
                has been requested. Defaults to waiting on the stop event.
        """
        self._collector = collector
        self._store = store
        self._interval = interval
        self._on_publish = on_publish
        self._stop_event = threading.Event()
        self._wait = wait if wait is not None else self._stop_event.wait
        self._thread: threading.Thread | None = None
        self._state = SchedulerState.IDLE
        self._state_lock = threading.Lock()
        self._cycles = 0

    @property
    def interval(self) -> float:
        """Seconds between collections."""
        return self._interval

    @property
    def state(self) -> SchedulerState:
        """Current lifecycle state."""
        return self._state

    @property
    def cycles(self) -> int:
        """Number of completed sampling cycles."""
        return self._cycles

    @property
    def is_running(self) -> bool:
        """Check if the scheduler thread is alive."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the sampling thread. Does nothing unless the scheduler is idle."""
        with self._state_lock:
            if self._state is not SchedulerState.IDLE:
                return
            self._state = SchedulerState.RUNNING
            self._thread = threading.Thread(
                target=self._run,
                daemon=True,
                name="SnapshotScheduler",
            )
            self._thread.start()
        logger.info("scheduler started with a %.2fs interval", self._interval)

    def request_stop(self) -> None:
        """
        Ask the loop to exit without waiting for it.

        Safe to call from the UI event loop: a collection in progress keeps
        running in the background and the loop exits at its next wake-up.
        """
        with self._state_lock:
            if self._state is SchedulerState.STOPPED:
                return
            self._state = SchedulerState.STOPPED
            self._stop_event.set()
        logger.info("scheduler stop requested after %d cycles", self._cycles)

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Request the loop to exit and wait for the thread.

        Calling stop more than once, or after request_stop, is harmless.

        Args:
            timeout: How long to wait for the thread to stop (seconds).
        """
        self.request_stop()
        thread = self._thread
        if thread is None or thread is threading.current_thread():
            return
        thread.join(timeout=timeout)
        if thread.is_alive():
            logger.warning("scheduler thread still busy after %.1fs", timeout or 0.0)

    def run_cycle(self) -> Snapshot:
        """Collect one snapshot and publish it."""
        snapshot = self._collector.collect()
        self._store.set(snapshot)
        self._cycles += 1
        if self._on_publish is not None:
            self._on_publish(snapshot)
        return snapshot

    def _run(self) -> None:
        """Main loop running in the background thread."""
        while not self._stop_event.is_set():
            if self._wait(self._interval) or self._stop_event.is_set():
                break
            try:
                self.run_cycle()
            except Exception:
                # The collector guards its own probes; keep sampling regardless
                logger.exception("sampling cycle failed")
