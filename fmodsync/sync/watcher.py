"""Export file watcher with debounce, re-running a sync when the export changes."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)


class _ExportHandler(FileSystemEventHandler):
    """Fires the callback for writes to one file, at most once per debounce window."""

    def __init__(
        self,
        export_path: Path,
        debounce_seconds: float,
        callback: Callable[[Path], None],
    ) -> None:
        super().__init__()
        self._export_path = export_path
        self._debounce = debounce_seconds
        self._callback = callback
        self._last_event = 0.0

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in ("created", "modified", "moved"):
            return
        touched = getattr(event, "dest_path", "") or event.src_path
        if Path(touched).resolve() != self._export_path:
            return

        now = time.time()
        if now - self._last_event < self._debounce:
            return
        self._last_event = now

        try:
            self._callback(self._export_path)
        except Exception:
            logger.exception("Watcher callback failed for %s", self._export_path)


class ExportWatcher:
    """Watches an export JSON file and calls ``callback`` on a worker thread when it changes.

    Each trigger gets its own thread, so a change that lands while a sync is
    still running reaches the synchronizer and is rejected there.
    """

    def __init__(
        self,
        export_path: Path,
        callback: Callable[[Path], None],
        debounce_seconds: float = 1.0,
    ) -> None:
        self._export_path = Path(export_path).resolve()
        self._callback = callback
        self._observer: Observer | None = None
        self._threads: list[threading.Thread] = []
        self._handler = _ExportHandler(self._export_path, debounce_seconds, self._dispatch)

    def _dispatch(self, path: Path) -> None:
        thread = threading.Thread(target=self._callback, args=(path,), daemon=True)
        self._threads = [t for t in self._threads if t.is_alive()]
        self._threads.append(thread)
        thread.start()

    def start(self) -> None:
        if self._observer is not None:
            return
        self._observer = Observer()
        self._observer.schedule(self._handler, str(self._export_path.parent), recursive=False)
        self._observer.start()
        logger.info("Watching %s for changes", self._export_path)

    def stop(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=5)
        self._observer = None
        for thread in self._threads:
            thread.join(timeout=5)
        logger.info("Stopped watching %s", self._export_path)
