#!/usr/bin/env python3
"""
Git integration for Dog Watcher
Thin wrapper around the git command line used to clone, commit and push backups
"""

import os
import subprocess
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union
import logging

from ..core.errors import NoopSignal, SyncError

GIT_NOOP_MARKERS = ("nothing to commit", "nothing added to commit")

# untranslated git messages regardless of the host locale
GIT_ENV = {"LC_ALL": "C", "LANGUAGE": ""}


class CommitOutcome(Enum):
    """Result of a commit attempt"""
    COMMITTED = "committed"
    NOTHING_TO_COMMIT = "nothing_to_commit"


class GitRepository:
    """Runs git commands against the backup repository checkout"""

    def __init__(self, workdir: Union[str, Path], executable: str = "git",
                 author_name: str = "", author_email: str = "",
                 logger: Optional[logging.Logger] = None):
        self.workdir = Path(workdir)
        self.executable = executable
        self.author_name = author_name
        self.author_email = author_email
        self.logger = logger or logging.getLogger("dog-watcher")

    def _identity_args(self) -> List[str]:
        args = []
        if self.author_name:
            args += ["-c", f"user.name={self.author_name}"]
        if self.author_email:
            args += ["-c", f"user.email={self.author_email}"]
        return args

    def _execute(self, args: Sequence[str], cwd: Optional[Union[str, Path]] = None) -> Tuple[int, str]:
        """Run git under the C locale and return its exit status and combined output"""
        command = [self.executable, *self._identity_args(), *args]
        cwd = cwd or self.workdir
        self.logger.debug(f"$ {' '.join(command)} (cwd={cwd})")

        env = {**os.environ, **GIT_ENV}
        try:
            result = subprocess.run(command, cwd=cwd, env=env, capture_output=True, text=True, check=False)
        except OSError as e:
            raise SyncError(f"Could not run {self.executable}: {e}") from e

        output = "\n".join(part.strip() for part in (result.stdout, result.stderr) if part and part.strip())
        if output:
            self.logger.debug(output)

        return result.returncode, output

    def run_command(self, args: Sequence[str], cwd: Optional[Union[str, Path]] = None) -> str:
        """Run a git command and return its combined output.

        Raises NoopSignal when a commit had nothing to record and SyncError
        for any other failure.
        """
        returncode, output = self._execute(args, cwd)

        if returncode != 0:
            if args and args[0] == "commit" and any(marker in output for marker in GIT_NOOP_MARKERS):
                raise NoopSignal("There was nothing new to commit.")
            raise SyncError(f"git {' '.join(args)} failed ({returncode}): {output or 'no output'}")

        return output

    def has_staged_changes(self) -> bool:
        """Whether the index differs from HEAD, decided by exit status alone"""
        returncode, output = self._execute(["diff", "--cached", "--quiet"])
        if returncode == 0:
            return False
        if returncode == 1:
            return True
        raise SyncError(f"git diff --cached failed ({returncode}): {output or 'no output'}")

    def clone(self, repo_url: str) -> None:
        """Clone the backup repository into the working directory"""
        self.logger.info(f"Cloning {repo_url} into {self.workdir}")
        self.run_command(["clone", repo_url, str(self.workdir)], cwd=self.workdir)

    def add_all(self) -> None:
        """Stage every change in the working directory, deletions included"""
        self.run_command(["add", "--all", "."])

    def commit(self, message: str) -> CommitOutcome:
        """Commit staged changes"""
        if not self.has_staged_changes():
            return CommitOutcome.NOTHING_TO_COMMIT
        try:
            self.run_command(["commit", "-m", message])
        except NoopSignal:
            return CommitOutcome.NOTHING_TO_COMMIT
        return CommitOutcome.COMMITTED

    def push(self, remote: str = "origin", branch: str = "master") -> None:
        """Push the local branch to the remote"""
        self.logger.info(f"Pushing to {remote}/{branch}")
        self.run_command(["push", remote, branch])
