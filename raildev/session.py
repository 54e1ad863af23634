"""Exclusive lock that keeps one develop session per project."""

from __future__ import annotations

import contextlib
import os
from pathlib import Path
from typing import IO, Optional

import portalocker

from raildev.ports import get_develop_dir

_LOCK_FILE = "session.lock"


class SessionBusyError(RuntimeError):
    """Another develop session already holds the project's lock."""

    def __init__(self) -> None:
        super().__init__(
            "Another develop session is already running for this project.\n"
            "Stop it with Ctrl+C before starting a new one."
        )


class DevelopSessionLock:
    """A held session lock; releasing it removes the lock file."""

    def __init__(self, file: IO[str], path: Path) -> None:
        self._file: Optional[IO[str]] = file
        self.path = path

    def release(self) -> None:
        if self._file is None:
            return
        with contextlib.suppress(Exception):
            portalocker.unlock(self._file)
        self._file.close()
        self._file = None
        with contextlib.suppress(OSError):
            self.path.unlink()

    def __enter__(self) -> "DevelopSessionLock":
        return self

    def __exit__(self, *args) -> None:
        self.release()

    def __del__(self) -> None:
        with contextlib.suppress(Exception):
            self.release()


def try_acquire_at(develop_dir: os.PathLike | str) -> DevelopSessionLock:
    """Take the lock in a directory; raise SessionBusyError when it is held."""
    develop_dir = Path(develop_dir)
    develop_dir.mkdir(parents=True, exist_ok=True)
    path = develop_dir / _LOCK_FILE
    file = open(path, "w", encoding="utf-8")
    try:
        portalocker.lock(file, portalocker.LOCK_EX | portalocker.LOCK_NB)
    except portalocker.exceptions.LockException:
        file.close()
        raise SessionBusyError() from None
    except BaseException:
        file.close()
        raise
    return DevelopSessionLock(file, path)


def try_acquire(project_id: str) -> DevelopSessionLock:
    """Take the lock for code services of a project."""
    return try_acquire_at(get_develop_dir(project_id))