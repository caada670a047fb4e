"""Single-slot holder for the latest snapshot."""

import threading

from hostpanel.models import Snapshot


class SnapshotStore:
    """
    Thread-safe cell holding the most recently published Snapshot.

    The lock guards only the reference swap. Snapshots are immutable, so a
    reader always holds either the previous snapshot or the new one in full.
    """

    def __init__(self, initial: Snapshot | None = None) -> None:
        """Initialize the store with ``initial`` or the not-yet-sampled snapshot."""
        self._lock = threading.Lock()
        self._snapshot = initial if initial is not None else Snapshot.not_sampled()

    def set(self, snapshot: Snapshot) -> None:
        """Publish a fully collected snapshot."""
        with self._lock:
            self._snapshot = snapshot

    def get(self) -> Snapshot:
        """Return the latest snapshot without consuming it."""
        with self._lock:
            return self._snapshot
