#!/usr/bin/env python3
"""
File watcher for watch mode.
Collects filesystem notifications from watchdog, debounces bursts of saves
into batches, and hands the batches to the watch loop through a queue.
"""

import os
import time
import queue
import logging
import threading
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler

from .state import ChangeEvent, ChangeKind


logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 1.0
MAX_QUEUED_BATCHES = 64


class WatchSetupError(Exception):
    """Raised when the watcher cannot be registered; not worth retrying"""


class WatchError(Exception):
    """A single notification could not be processed"""


Batch = Union[List[ChangeEvent], WatchError]


class DebouncedEventHandler(FileSystemEventHandler):
    """
    Records changes to source files and releases them once they settle.

    A path is released after no further event for it has arrived for
    `debounce_seconds`, so an editor writing a file several times per save
    produces one change.
    """

    def __init__(self, extensions: Iterable[str] = ('.py',), debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS):
        super().__init__()
        self.extensions = tuple(extensions)
        self.debounce_seconds = debounce_seconds
        self._lock = threading.Lock()
        self._pending: Dict[str, Tuple[ChangeKind, float]] = {}
        self._errors: List[WatchError] = []

    def dispatch(self, event):
        try:
            super().dispatch(event)
        except Exception as e:
            with self._lock:
                self._errors.append(WatchError(f"{event.event_type} event for {event.src_path!r}: {e}"))

    def on_modified(self, event):
        if not event.is_directory:
            self._record(event.src_path, ChangeKind.MODIFIED)

    def on_created(self, event):
        if not event.is_directory:
            self._record(event.src_path, ChangeKind.MODIFIED)

    def on_closed(self, event):
        if not event.is_directory:
            self._record(event.src_path, ChangeKind.MODIFIED)

    def on_moved(self, event):
        # Editors that save atomically write a temp file and rename it over the original
        if not event.is_directory:
            self._record(event.dest_path, ChangeKind.MODIFIED)

    def on_deleted(self, event):
        if not event.is_directory:
            self._record(event.src_path, ChangeKind.DELETED)

    def matches(self, path: str) -> bool:
        return Path(path).suffix in self.extensions

    def _record(self, raw_path, kind: ChangeKind, now: float = None):
        path = os.fsdecode(raw_path)
        if not self.matches(path):
            return
        with self._lock:
            self._pending[path] = (kind, now if now is not None else time.monotonic())

    def drain(self, now: float = None) -> Tuple[List[ChangeEvent], List[WatchError]]:
        """Remove and return the settled changes (sorted by path) and any errors"""
        now = now if now is not None else time.monotonic()
        with self._lock:
            ready = sorted(
                path for path, (_, seen) in self._pending.items()
                if now - seen >= self.debounce_seconds
            )
            events = [ChangeEvent(path=path, kind=self._pending.pop(path)[0]) for path in ready]
            errors, self._errors = self._errors, []
        return events, errors


class EventSource:
    """Bounded queue of change batches with a receive timeout"""

    def __init__(self, maxsize: int = MAX_QUEUED_BATCHES):
        self._queue: "queue.Queue[Batch]" = queue.Queue(maxsize=maxsize)

    def put(self, batch: Batch, stop: threading.Event = None) -> bool:
        """Block until there is room or `stop` is set; returns False when stopped"""
        while stop is None or not stop.is_set():
            try:
                self._queue.put(batch, timeout=0.1)
                return True
            except queue.Full:
                continue
        return False

    def receive(self, timeout: float) -> Optional[List[ChangeEvent]]:
        """
        Wait up to `timeout` seconds for the next batch.

        Returns:
            The batch, or None when the timeout expired

        Raises:
            WatchError: if the watcher reported a problem instead of a batch
        """
        try:
            batch = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None
        if isinstance(batch, WatchError):
            raise batch
        return batch


class FileChangeWatcher:
    """Manages the observer and the debounce flusher thread"""

    def __init__(
        self,
        extensions: Iterable[str] = ('.py',),
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        observer_factory=Observer,
    ):
        self.extensions = tuple(extensions)
        self.debounce_seconds = debounce_seconds
        self.observer_factory = observer_factory
        self.observer = None
        self.handler: Optional[DebouncedEventHandler] = None
        self.source: Optional[EventSource] = None
        self._stop = threading.Event()
        self._flusher: Optional[threading.Thread] = None

    def start(self, root) -> EventSource:
        """
        Watch `root` recursively.

        Raises:
            WatchSetupError: if the directory is missing or the OS refuses the watch
        """
        root_path = Path(root)
        if not root_path.is_dir():
            raise WatchSetupError(f"Cannot watch '{root}': no such directory")

        self.source = EventSource()
        self.handler = DebouncedEventHandler(self.extensions, self.debounce_seconds)
        self.observer = self.observer_factory()

        try:
            self.observer.schedule(self.handler, str(root_path), recursive=True)
            self.observer.start()
        except OSError as e:
            raise WatchSetupError(f"Failed to watch '{root}': {e}") from e

        self._stop.clear()
        self._flusher = threading.Thread(target=self._flush_loop, name='pylings-debounce')
        self._flusher.daemon = True
        self._flusher.start()

        logger.debug("Watching %s (debounce %.2fs)", root_path, self.debounce_seconds)
        return self.source

    def stop(self):
        """Stop watching"""
        self._stop.set()
        if self.observer:
            self.observer.stop()
            if self.observer.is_alive():
                self.observer.join()
            self.observer = None
        if self._flusher:
            self._flusher.join(timeout=1.0)
            self._flusher = None

    def _flush_loop(self):
        tick = max(self.debounce_seconds / 4, 0.01)
        while not self._stop.wait(tick):
            events, errors = self.handler.drain()
            for error in errors:
                if not self.source.put(error, self._stop):
                    return
            if events:
                logger.debug("Debounced batch: %s", ', '.join(e.path for e in events))
                if not self.source.put(events, self._stop):
                    return
