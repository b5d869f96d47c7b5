"""
Sync engine -- keeps the document cache in step with the gist.

Polls on a fixed interval. The ``lastUpdated`` marker is the only
change signal: if it differs from the last one seen, the cache is
replaced, the refresh callback runs, and a notification goes out.

No backoff, no jitter. A failed poll leaves the cache alone and the
next tick tries again.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from .context import ClientContext
from .errors import StoreError
from .models import CatalogDocument
from .notify import Notifier

logger = logging.getLogger("revolico.sync")

CHANGE_MESSAGE = "New updates in the product listings!"

RefreshCallback = Callable[[CatalogDocument], None]


class SyncStats:
    """Thread-safe poll counters."""

    def __init__(self):
        self._lock = threading.Lock()
        self.polls: int = 0
        self.changes: int = 0
        self.errors: list[str] = []
        self.last_poll: Optional[datetime] = None
        self.last_change: Optional[datetime] = None

    def record_poll(self, changed: bool) -> None:
        with self._lock:
            now = datetime.now(timezone.utc)
            self.polls += 1
            self.last_poll = now
            if changed:
                self.changes += 1
                self.last_change = now

    def record_error(self, error: str) -> None:
        """Record an error, keeping only the last 50."""
        with self._lock:
            ts = datetime.now(timezone.utc).isoformat()
            self.errors.append(f"[{ts}] {error}")
            if len(self.errors) > 50:
                self.errors = self.errors[-50:]

    def snapshot(self) -> dict:
        with self._lock:
            return {
                "polls": self.polls,
                "changes": self.changes,
                "last_poll": self.last_poll.isoformat() if self.last_poll else None,
                "last_change": self.last_change.isoformat() if self.last_change else None,
                "recent_errors": self.errors[-10:],
            }


class SyncEngine:
    """Polls the store and refreshes the cache on change.

    Args:
        ctx: Client context whose cache is kept current.
        on_change: Called once per detected change with the new document.
        notifier: Emits a desktop notification on change, when permitted.
    """

    def __init__(
        self,
        ctx: ClientContext,
        on_change: Optional[RefreshCallback] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.ctx = ctx
        self.on_change = on_change
        self.notifier = notifier
        self.stats = SyncStats()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def poll_once(self) -> bool:
        """Fetch once and apply the document if its marker moved.

        Returns:
            True if a change was detected and applied.
        """
        try:
            document = self.ctx.store.fetch()
        except StoreError as exc:
            logger.error("Poll failed: %s", exc)
            self.stats.record_error(str(exc))
            return False

        with self.ctx.lock:
            if document.last_updated == self.ctx.last_seen_marker:
                self.stats.record_poll(False)
                return False
            logger.info(
                "Catalog changed: %s -> %s",
                self.ctx.last_seen_marker, document.last_updated,
            )
            self.ctx.last_seen_marker = document.last_updated
            self.ctx.replace_document(document)

        self.stats.record_poll(True)
        if self.on_change:
            try:
                self.on_change(document)
            except Exception as exc:
                logger.error("Refresh callback failed: %s", exc)
                self.stats.record_error(f"Callback: {exc}")
        if self.notifier:
            self.notifier.notify(CHANGE_MESSAGE)
        return True

    def run_forever(self) -> None:
        """Poll until ``stop()`` is called. The first poll waits one interval."""
        interval = self.ctx.config.poll_interval
        logger.info("Polling %s every %.1fs", self.ctx.store.name, interval)
        while not self._stop_event.is_set():
            self._stop_event.wait(timeout=interval)
            if self._stop_event.is_set():
                break
            try:
                self.poll_once()
            except Exception as exc:
                logger.error("Poll crashed: %s", exc)
                self.stats.record_error(str(exc))

    def start(self) -> None:
        """Run the poll loop on a background thread."""
        if self._thread and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self.run_forever, name="revolico-sync", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=timeout)
            self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
