"""Filesystem save watcher.

Turns watchdog modification events under the workspace root into
debounced save notifications for the lifecycle's router. Editors often
emit several events per save, so only the last one in the debounce
window produces a revision.
"""

from __future__ import annotations

import os
import threading
import time
from pathlib import Path
from typing import Callable

from watchdog.events import (
    FileCreatedEvent,
    FileModifiedEvent,
    FileMovedEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from core.types import RevisionId
from workspace.lifecycle import WorkspaceLifecycle


class WorkspaceSaveHandler(FileSystemEventHandler):
    """Collects file writes and flushes them as save notifications."""

    def __init__(
        self,
        lifecycle: WorkspaceLifecycle,
        debounce_seconds: float,
        on_recorded: Callable[[RevisionId], None] | None = None,
    ) -> None:
        super().__init__()
        self.lifecycle = lifecycle
        self.debounce_seconds = debounce_seconds
        self.on_recorded = on_recorded
        # path -> time of the latest write event
        self.pending: dict[str, float] = {}
        # guards pending; marks arrive on the observer thread
        self._pending_lock = threading.Lock()

    def _is_relevant(self, path: str) -> bool:
        if not self.lifecycle.is_open:
            return False
        repository_root = self.lifecycle.store.repository_root
        candidate = Path(path)
        return candidate != repository_root and repository_root not in candidate.parents

    def _mark(self, path: str | bytes) -> None:
        path_str = os.fsdecode(path)
        if self._is_relevant(path_str):
            with self._pending_lock:
                self.pending[path_str] = time.monotonic()

    def on_created(self, event: FileCreatedEvent) -> None:
        if not event.is_directory:
            self._mark(event.src_path)

    def on_modified(self, event: FileModifiedEvent) -> None:
        if not event.is_directory:
            self._mark(event.src_path)

    def on_moved(self, event: FileMovedEvent) -> None:
        # Atomic-save editors write a temp file and rename it over the target.
        if not event.is_directory:
            self._mark(event.dest_path)

    def flush_pending(self, now: float | None = None) -> list[RevisionId]:
        """Record revisions for writes that have been quiet long enough.

        Args:
            now: Monotonic clock reading; defaults to the current time.

        Returns:
            Ids of revisions recorded by this flush.
        """
        if now is None:
            now = time.monotonic()
        with self._pending_lock:
            ready = [
                path_str
                for path_str, seen_at in self.pending.items()
                if now - seen_at >= self.debounce_seconds
            ]
            for path_str in ready:
                del self.pending[path_str]
        recorded: list[RevisionId] = []
        for path_str in ready:
            if not self.lifecycle.is_open:
                continue
            revision_id = self.lifecycle.on_document_saved(path_str)
            if revision_id is None:
                continue
            recorded.append(revision_id)
            if self.on_recorded is not None:
                self.on_recorded(revision_id)
        return recorded


def watch_workspace(
    lifecycle: WorkspaceLifecycle,
    on_recorded: Callable[[RevisionId], None] | None = None,
) -> tuple[Observer, WorkspaceSaveHandler]:
    """Start watching the open workspace for saves.

    Args:
        lifecycle: Open workspace lifecycle.
        on_recorded: Callback receiving each recorded revision id.

    Returns:
        Tuple of (observer, handler); the caller stops the observer.

    Raises:
        WorkspaceNotOpenError: If no workspace is open.
    """
    root = lifecycle.root
    handler = WorkspaceSaveHandler(
        lifecycle,
        debounce_seconds=lifecycle.config.watch_debounce_seconds,
        on_recorded=on_recorded,
    )
    observer = Observer()
    observer.schedule(handler, str(root), recursive=True)
    observer.start()
    return observer, handler


def run_watch_loop(
    lifecycle: WorkspaceLifecycle,
    on_recorded: Callable[[RevisionId], None] | None = None,
    poll_seconds: float = 0.25,
) -> None:
    """Watch and flush saves until interrupted."""
    observer, handler = watch_workspace(lifecycle, on_recorded)
    try:
        while True:
            time.sleep(poll_seconds)
            handler.flush_pending()
    except KeyboardInterrupt:
        pass
    finally:
        observer.stop()
        observer.join()
    handler.flush_pending(now=float("inf"))
