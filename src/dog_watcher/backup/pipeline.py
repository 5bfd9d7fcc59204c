#!/usr/bin/env python3
"""
The backup coordinator.

Strings together everything a full backup needs: a fresh workspace, a clone
of the backup repository, an export of every resource kind, a commit and a
push. Stages run strictly in order and the first failure skips straight to
reporting. The outcome is reported as a DataDog event and the workspace is
removed on every path, after the event has been sent (or attempted).
"""

from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, Optional
import logging

from ..core.config import PipelineSettings
from ..core.errors import DogWatcherError
from ..core.template import resolve
from ..core.workspace import WorkspaceManager
from .datadog_client import RESOURCE_KINDS, ResourceKind
from .git_repository import CommitOutcome, GitRepository
from .outcome import BackupReport, BackupRun, Outcome, OutcomeKind, classify


class BackupPipeline:
    """Runs one backup and reports its outcome"""

    def __init__(self, settings: PipelineSettings,
                 workspaces: WorkspaceManager,
                 repository_factory: Callable[[Path], GitRepository],
                 exporter,
                 notifier,
                 resolve_template: Callable[[str], str] = resolve,
                 resource_kinds: Iterable[ResourceKind] = RESOURCE_KINDS,
                 logger: Optional[logging.Logger] = None):
        self.settings = settings
        self.workspaces = workspaces
        self.repository_factory = repository_factory
        self.exporter = exporter
        self.notifier = notifier
        self.resolve_template = resolve_template
        self.resource_kinds = tuple(resource_kinds)
        self.logger = logger or logging.getLogger("dog-watcher")

    def run(self) -> BackupReport:
        """Perform the backup and clean up the workspace on completion"""
        backup_run = BackupRun()

        try:
            backup_run.workspace_path = self.workspaces.acquire()
        except Exception as e:
            self.logger.error(f"Could not provision a workspace: {e}")
            outcome = Outcome.failure(e)
            try:
                confirmed = self._conclude(backup_run, outcome)
            finally:
                backup_run.finished_at = datetime.now()
            return BackupReport(outcome=outcome, notification_confirmed=confirmed, run=backup_run)

        backup_run.completed_stages.append("provision")
        try:
            outcome = self._perform(backup_run)
            confirmed = self._conclude(backup_run, outcome)
        finally:
            self.workspaces.release(backup_run.workspace_path)
            backup_run.completed_stages.append("release")
            backup_run.finished_at = datetime.now()

        return BackupReport(outcome=outcome, notification_confirmed=confirmed, run=backup_run)

    def _conclude(self, backup_run: BackupRun, outcome: Outcome) -> bool:
        """Freeze the outcome on the run record and report it"""
        backup_run.outcome = outcome
        confirmed = self._report(outcome)
        backup_run.completed_stages.append("report")
        return confirmed

    def _perform(self, backup_run: BackupRun) -> Outcome:
        """Run clone, export, commit and push; the first failure ends the run"""
        stages = backup_run.completed_stages

        try:
            repository = self.repository_factory(backup_run.workspace_path)
            repository.clone(self.settings.repo_url)
            stages.append("clone")

            for kind in self.resource_kinds:
                self.exporter.fetch_resources(kind, backup_run.workspace_path)
                stages.append(f"export:{ResourceKind(kind).value}")

            repository.add_all()
            stages.append("add")

            message = self.resolve_template(self.settings.commit_message)
            if repository.commit(message) is CommitOutcome.NOTHING_TO_COMMIT:
                self.logger.info("There was nothing new to commit.")
                return Outcome.noop()
            stages.append("commit")

            repository.push(self.settings.remote, self.settings.branch)
            stages.append("push")
        except DogWatcherError as e:
            self.logger.error(f"There was an error during the backup attempt: {e}")
            return Outcome.failure(e)
        except Exception as e:
            self.logger.exception(f"Unexpected error during the backup attempt: {e}")
            return Outcome.failure(e)

        self.logger.info(f"Backup pushed to {self.settings.remote}/{self.settings.branch}")
        return Outcome.success()

    def _report(self, outcome: Outcome) -> bool:
        """Send the outcome event; returns whether delivery was confirmed"""
        event = classify(outcome, self.settings.send_event_on_noop)
        if event is None:
            if outcome.kind is OutcomeKind.NOOP:
                self.logger.info("No DataDog event was sent.")
            return False

        try:
            confirmed = bool(self.notifier.send_event(event))
        except Exception as e:
            self.logger.error(f"Failed to send DataDog event: {e}")
            return False

        self.logger.debug("Event sent to DataDog")
        return confirmed
