"""
Debounced write-back of an open page.

Each new document snapshot restarts a quiet-period timer. When the timer
runs out, the latest blocks (and a title set through the scheduler) are
written onto the stored page; other fields keep their stored values.
Closing the page cancels a pending write instead of firing it.

Timers come from a ``call_later(delay, callback)`` function returning a
handle with ``cancel()``. The default is the running asyncio event loop's
``call_later``, so writes happen on the loop and never on another thread.
"""

import asyncio
import logging
import threading
from typing import Any, Callable, Optional

from ..config import config
from ..models import Page, utc_now
from ..storage import PersistenceStore, StorageError
from .document import BlockDocument, Snapshot

CallLater = Callable[[float, Callable[[], None]], Any]


class DebouncedTask:
    """
    A callback that runs once after a quiet period.

    ``schedule`` replaces any pending run with a new one; nothing queues up.
    A run that was canceled or replaced never calls the callback, even if
    its timer already fired on another thread. The callback runs under the
    task lock, so ``cancel`` returns only once no run is in progress.
    """

    def __init__(self, callback: Callable[[], None], delay: float,
                 call_later: Optional[CallLater] = None):
        self.callback = callback
        self.delay = delay
        # Outside a running event loop a timer must be passed in
        self._call_later = call_later or asyncio.get_running_loop().call_later
        self._handle = None
        self._generation = 0
        self._lock = threading.RLock()

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self) -> None:
        """Cancel any pending run and start the delay again."""
        with self._lock:
            self._cancel_locked()
            self._generation += 1
            generation = self._generation
            self._handle = self._call_later(self.delay, lambda: self._fire(generation))

    def cancel(self) -> None:
        """Drop the pending run, if any."""
        with self._lock:
            self._cancel_locked()
            self._generation += 1

    def flush(self) -> bool:
        """
        Run a pending callback now.

        Returns:
            True if a run was pending and the callback was called
        """
        with self._lock:
            if self._handle is None:
                return False
            self._cancel_locked()
            self._generation += 1
            self.callback()
        return True

    def _cancel_locked(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._handle = None
            self.callback()


class AutosaveScheduler:
    """
    Saves a page a short while after its document stops changing.
    """

    def __init__(self, store: PersistenceStore, page: Page, document: BlockDocument,
                 delay: Optional[float] = None, call_later: Optional[CallLater] = None,
                 enabled: Optional[bool] = None,
                 on_error: Optional[Callable[[StorageError], None]] = None):
        """
        Initialize the autosave scheduler and start observing the document.

        Args:
            store: Where pages are saved
            page: The page being edited; saved as-is if the stored copy is gone
            document: The page's block document
            delay: Quiet period in seconds (defaults to config value)
            call_later: Timer factory (defaults to the running event loop's)
            enabled: Whether edits are saved automatically (defaults to config value)
            on_error: Called with the error when a save fails
        """
        self.store = store
        self.page = page
        self.document = document
        self.enabled = config.autosave_enabled if enabled is None else enabled
        self.on_error = on_error
        self.save_count = 0
        self._title_changed = False

        self._latest: Snapshot = document.blocks
        self._task = DebouncedTask(
            self._write,
            config.autosave_delay if delay is None else delay,
            call_later
        )
        self._unsubscribe = document.subscribe(self.on_snapshot)
        self._closed = False

    @property
    def pending(self) -> bool:
        """True while a write is waiting for the quiet period to end."""
        return self._task.pending

    def on_snapshot(self, snapshot: Snapshot) -> None:
        """Remember the latest snapshot and restart the quiet period."""
        self._latest = snapshot
        if self.enabled and not self._closed:
            self._task.schedule()

    def set_title(self, title: str) -> None:
        """Change the page title; saved together with the blocks."""
        self.page = self.page.model_copy(update={"title": title})
        self._title_changed = True
        if self.enabled and not self._closed:
            self._task.schedule()

    def save_now(self) -> bool:
        """
        Save immediately, replacing any pending write.

        Returns:
            True if the page was written
        """
        self._task.cancel()
        return self._write()

    def close(self) -> None:
        """Stop observing the document and drop any pending write."""
        self._task.cancel()
        self._unsubscribe()
        self._closed = True

    def _write(self) -> bool:
        changes = {
            "content": list(self._latest),
            "updated_at": utc_now(),
            "last_edited_by": self.page.last_edited_by
        }
        if self._title_changed:
            changes["title"] = self.page.title

        try:
            page = self.store.update_page(self.page, changes)
        except StorageError as e:
            logging.error(f"Autosave of page {self.page.id} failed: {e}")
            if self.on_error:
                self.on_error(e)
            return False

        self.page = page
        self._title_changed = False
        self.save_count += 1
        logging.debug(f"Autosaved page {page.id} ({len(page.content)} blocks)")
        return True
