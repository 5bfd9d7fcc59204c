#!/usr/bin/env python3
"""
Workspace lifecycle for Dog Watcher
Each backup run owns one temporary directory, removed once the run is over
"""

import fcntl
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional, Union
import logging

from .errors import CleanupError, ProvisioningError, RunLockedError

WORKSPACE_PREFIX = "dog-watcher-work"


class WorkspaceManager:
    """Creates and removes the ephemeral directory of a run"""

    def __init__(self, base_dir: Optional[str] = None, logger: Optional[logging.Logger] = None):
        self.base_dir = base_dir
        self.logger = logger or logging.getLogger("dog-watcher")

    def acquire(self) -> Path:
        """Create a uniquely named workspace directory"""
        try:
            path = Path(tempfile.mkdtemp(prefix=WORKSPACE_PREFIX, dir=self.base_dir))
        except OSError as e:
            raise ProvisioningError(f"Could not create workspace: {e}") from e

        self.logger.debug(f"Workspace created at {path}")
        return path

    def release(self, path: Union[str, Path]) -> None:
        """Remove the workspace recursively; failures are logged, never raised"""
        try:
            shutil.rmtree(path)
            self.logger.debug(f"Workspace {path} removed")
        except OSError as e:
            error = CleanupError(f"There was an error removing the work dir {path}: {e}")
            self.logger.error(str(error))


class RunLock:
    """Process level exclusive lock so that overlapping invocations do not share a run"""

    def __init__(self, lock_file: Union[str, Path]):
        self.lock_file = Path(lock_file)
        self._fd: Optional[int] = None

    def acquire(self) -> None:
        try:
            self.lock_file.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(self.lock_file, os.O_RDWR | os.O_CREAT, 0o644)
        except OSError as e:
            raise ProvisioningError(f"Could not open lock file {self.lock_file}: {e}") from e

        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError as e:
            os.close(fd)
            raise RunLockedError(f"Another backup run holds {self.lock_file}") from e

        self._fd = fd

    def release(self) -> None:
        if self._fd is None:
            return
        try:
            fcntl.flock(self._fd, fcntl.LOCK_UN)
        finally:
            os.close(self._fd)
            self._fd = None

    def __enter__(self) -> 'RunLock':
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
