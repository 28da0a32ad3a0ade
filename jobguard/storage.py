"""File-based JSON storage shared by the jobguard stores.

Each store keeps its collections as JSON files under one directory.  Every
read-modify-write runs inside :meth:`JsonFileStore.transaction`, which holds a
process-local lock and an exclusive ``flock`` on ``<dir>/.lock``, so threads
and worker processes sharing the directory are serialized.
"""

from __future__ import annotations

import fcntl
import json
import os
import tempfile
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Iterator, Optional

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# One lock per directory, shared by every store instance in this process.
_DIR_LOCKS: dict[str, threading.RLock] = {}
_DIR_LOCKS_GUARD = threading.Lock()


_HELD = threading.local()


def _dir_lock(key: str) -> threading.RLock:
    with _DIR_LOCKS_GUARD:
        lock = _DIR_LOCKS.get(key)
        if lock is None:
            lock = _DIR_LOCKS[key] = threading.RLock()
        return lock


def _held_depths() -> dict[str, int]:
    """Per-thread nesting depth of open transactions, keyed by directory."""
    depths = getattr(_HELD, "depths", None)
    if depths is None:
        depths = _HELD.depths = {}
    return depths


class JsonFileStore:
    """Base class for stores backed by JSON files in a single directory."""

    default_subdir = ""

    def __init__(self, base_dir: Optional[str | Path] = None, clock: Optional[Clock] = None) -> None:
        if base_dir is None:
            self._base = Path.home() / ".jobguard" / self.default_subdir
        else:
            self._base = Path(base_dir)
        self._base.mkdir(parents=True, exist_ok=True)
        self._lock_path = self._base / ".lock"
        self._key = str(self._base.resolve())
        self._lock = _dir_lock(self._key)
        self._clock: Clock = clock or utc_now

    def now(self) -> datetime:
        return self._clock()

    # ------------------------------------------------------------------
    # Locking
    # ------------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Hold the directory's thread and file locks for the enclosed block.

        Re-entrant within a thread, across every store sharing the directory;
        only the outermost call takes the flock.
        """
        with self._lock:
            held = _held_depths()
            if held.get(self._key):
                held[self._key] += 1
                try:
                    yield
                finally:
                    held[self._key] -= 1
                return
            with open(self._lock_path, "a") as fh:
                fcntl.flock(fh.fileno(), fcntl.LOCK_EX)
                held[self._key] = 1
                try:
                    yield
                finally:
                    held[self._key] = 0
                    fcntl.flock(fh.fileno(), fcntl.LOCK_UN)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _read_json(self, path: Path, default: Any = None) -> Any:
        empty = [] if default is None else default
        if not path.exists():
            return empty
        try:
            data = json.loads(path.read_text())
        except (json.JSONDecodeError, OSError):
            return empty
        return data if isinstance(data, type(empty)) else empty

    def _write_json(self, path: Path, data: Any) -> None:
        fd, tmp = tempfile.mkstemp(dir=self._base, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as fh:
                json.dump(data, fh, indent=2, default=str)
            os.replace(tmp, path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
