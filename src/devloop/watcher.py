# watcher.py
from __future__ import annotations

import os
import sys
import threading
from pathlib import Path
from typing import List, Optional, Tuple

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .runner import WatchError

# inotify reports IN_CLOSE_WRITE; the other watchdog backends never emit
# close events, so there a finished modification is the closest signal.
CLOSE_EVENTS_SUPPORTED = sys.platform.startswith("linux")


class _Target:
    """One watched path: a directory (recursive) or a single file."""

    def __init__(self, path: Path):
        self.path = path
        self.is_dir = path.is_dir()

    def matches(self, changed: Path) -> bool:
        if self.is_dir:
            return changed == self.path or self.path in changed.parents
        return changed == self.path


class ChangeHandler(FileSystemEventHandler):
    """
    Sets a flag on the first qualifying event for any watched target.

    Runs on the watchdog observer thread; it only records the path.
    """

    def __init__(self, targets: List[_Target], close_events: bool = CLOSE_EVENTS_SUPPORTED):
        super().__init__()
        self.targets = targets
        self.close_events = close_events
        self.changed: Optional[str] = None
        self.fired = threading.Event()

    def _hit(self, raw_path) -> None:
        if self.fired.is_set():
            return
        path = Path(os.fsdecode(raw_path))
        if any(t.matches(path) for t in self.targets):
            self.changed = str(path)
            self.fired.set()

    def on_closed(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._hit(event.src_path)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not self.close_events and not event.is_directory:
            self._hit(event.src_path)

    def on_created(self, event: FileSystemEvent) -> None:
        if not self.close_events and not event.is_directory:
            self._hit(event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        if not self.close_events and not event.is_directory:
            self._hit(event.dest_path)


class PathWatcher:
    """
    Blocks until a close-after-write event lands on one of `paths`.

    Directories are watched recursively; a file is watched through its
    parent directory, filtered down to that file.
    """

    def __init__(
        self,
        paths: List[str],
        root: str | Path = ".",
        *,
        close_events: bool = CLOSE_EVENTS_SUPPORTED,
    ):
        self.root = Path(root).resolve()
        self.paths = list(paths)
        self.close_events = close_events
        self._observer = None
        self._handler: Optional[ChangeHandler] = None

    def _targets(self) -> List[_Target]:
        targets: List[_Target] = []
        missing: List[str] = []
        for p in self.paths:
            full = (self.root / Path(p).expanduser()).resolve()
            if not full.exists():
                missing.append(str(full))
                continue
            targets.append(_Target(full))

        if missing:
            raise WatchError(
                kind="watch_path_missing",
                message="Cannot watch paths that do not exist",
                details={"missing": ", ".join(missing)},
            )
        return targets

    def start(self) -> None:
        targets = self._targets()
        self._handler = ChangeHandler(targets, close_events=self.close_events)
        observer = Observer()

        # one schedule per (directory, recursive)
        keys = [
            (str(t.path), True) if t.is_dir else (str(t.path.parent), False)
            for t in targets
        ]
        schedules: List[Tuple[str, bool]] = list(dict.fromkeys(keys))

        try:
            for directory, recursive in schedules:
                observer.schedule(self._handler, directory, recursive=recursive)
            observer.start()
        except OSError as e:
            raise WatchError(
                kind="watch_failed",
                message=f"Could not start file watcher: {e}",
                details={"paths": ", ".join(self.paths)},
            ) from e

        self._observer = observer

    def wait(self, timeout: float | None = None) -> Optional[str]:
        """
        Block until one qualifying event. Returns the changed path, or None
        if `timeout` expired.
        """
        if self._handler is None:
            raise RuntimeError("PathWatcher.wait() called before start()")
        if not self._handler.fired.wait(timeout):
            return None
        return self._handler.changed

    def stop(self) -> None:
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None

    def __enter__(self) -> "PathWatcher":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()


def wait_for_change(paths: List[str], root: str | Path = ".") -> Optional[str]:
    """Start watching, block until one change (no timeout), stop."""
    with PathWatcher(paths, root) as watcher:
        return watcher.wait()
