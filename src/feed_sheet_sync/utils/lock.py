"""Filesystem lock keeping a single run per feed."""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from ..exceptions import LockContentionError

logger = logging.getLogger(__name__)


def _sanitize_name(name: str) -> str:
    safe = [char if char.isalnum() or char in "-_." else "_" for char in name]
    value = "".join(safe).strip("_")
    return value or "feed"


class ExecutionLock:
    """
    Advisory lock file created exclusively for the duration of one run.

    The marker is ``feed-lock-<name>.lock`` in the temp directory and holds the
    PID of the owner. It is removed on release, whether the run succeeded or not.
    A process killed before release leaves the marker behind; delete it by hand.
    """

    def __init__(self, name: str, lock_dir: Optional[Union[str, Path]] = None):
        self.name = name
        self.lock_dir = Path(lock_dir) if lock_dir else Path(tempfile.gettempdir())
        self.path = self.lock_dir / f"feed-lock-{_sanitize_name(name)}.lock"
        self._held = False

    def acquire(self) -> "ExecutionLock":
        self.lock_dir.mkdir(parents=True, exist_ok=True)
        try:
            fd = os.open(str(self.path), os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError as exc:
            raise LockContentionError(
                f"Another run is in progress for {self.name} (lock {self.path}). Exit."
            ) from exc

        try:
            os.write(fd, str(os.getpid()).encode())
        except OSError:
            os.close(fd)
            self.path.unlink()
            raise
        os.close(fd)

        self._held = True
        logger.debug(f"Acquired lock {self.path}")
        return self

    def release(self) -> None:
        if not self._held:
            return
        self._held = False
        try:
            self.path.unlink()
            logger.debug(f"Released lock {self.path}")
        except FileNotFoundError:
            logger.warning(f"Lock file {self.path} was already removed")

    @property
    def held(self) -> bool:
        return self._held

    def __enter__(self) -> "ExecutionLock":
        return self.acquire()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

