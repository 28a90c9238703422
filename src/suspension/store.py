"""Process-wide holder for the current status snapshot.

A reload builds a complete snapshot before publishing it with a single
reference assignment. Readers therefore see either the previous
snapshot or the new one, never a partially built map. Reloads are
serialized so two loads never race to publish.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

from suspension.feed import FeedError
from suspension.status_types import StatusSnapshot

logger = logging.getLogger(__name__)


class StatusStore:
    """Holds the most recent successfully built snapshot."""

    def __init__(self, initial: StatusSnapshot | None = None) -> None:
        self._snapshot = initial
        self._reload_lock = threading.Lock()
        self.last_error: str | None = None

    @property
    def current(self) -> StatusSnapshot | None:
        """The published snapshot, or None before the first successful load."""
        return self._snapshot

    def reload(self, loader: Callable[[], StatusSnapshot]) -> StatusSnapshot:
        """Build a new snapshot with ``loader`` and publish it.

        Raises:
            FeedError: If the loader fails. The previous snapshot stays
                published and ``last_error`` records the message.
        """
        with self._reload_lock:
            try:
                snapshot = loader()
            except FeedError as exc:
                self.last_error = str(exc)
                logger.error("Status reload failed; keeping previous snapshot: %s", exc)
                raise

            self._snapshot = snapshot
            self.last_error = None
            logger.info("Published snapshot for %s (%d locations)", snapshot.today, len(snapshot.records))
            return snapshot
