#!/usr/bin/env python3
"""
Backup run records, outcomes and the notification events derived from them
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional


class OutcomeKind(Enum):
    """Terminal state of a backup run"""
    SUCCESS = "success"
    NOOP = "noop"
    FAILURE = "failure"


@dataclass(frozen=True)
class Outcome:
    """Exactly one outcome is produced per run and never changes afterwards"""
    kind: OutcomeKind
    cause: Optional[BaseException] = None

    @classmethod
    def success(cls) -> 'Outcome':
        return cls(OutcomeKind.SUCCESS)

    @classmethod
    def noop(cls) -> 'Outcome':
        return cls(OutcomeKind.NOOP)

    @classmethod
    def failure(cls, cause: BaseException) -> 'Outcome':
        return cls(OutcomeKind.FAILURE, cause)

    @property
    def is_failure(self) -> bool:
        return self.kind is OutcomeKind.FAILURE

    @property
    def description(self) -> Optional[str]:
        if self.cause is None:
            return None
        return str(self.cause) or type(self.cause).__name__


class EventKind(Enum):
    """Kind of event reported to the monitoring system"""
    PASS = "pass"
    FAIL = "fail"
    INFORMATIONAL = "informational"


@dataclass(frozen=True)
class NotificationEvent:
    kind: EventKind
    message: Optional[str] = None

    @property
    def success(self) -> Optional[bool]:
        """True/False verdict; None for informational events"""
        if self.kind is EventKind.INFORMATIONAL:
            return None
        return self.kind is EventKind.PASS


NOOP_MESSAGE = "There was nothing new to commit."


def classify(outcome: Outcome, send_event_on_noop: bool) -> Optional[NotificationEvent]:
    """Map an outcome to the event to send, or None when nothing is sent"""
    if outcome.kind is OutcomeKind.NOOP:
        if not send_event_on_noop:
            return None
        return NotificationEvent(EventKind.INFORMATIONAL, NOOP_MESSAGE)

    if outcome.kind is OutcomeKind.FAILURE:
        return NotificationEvent(EventKind.FAIL, outcome.description)

    return NotificationEvent(EventKind.PASS)


@dataclass
class BackupRun:
    """Diagnostics of a single execution"""
    started_at: datetime = field(default_factory=datetime.now)
    workspace_path: Optional[Path] = None
    completed_stages: List[str] = field(default_factory=list)
    outcome: Optional[Outcome] = None
    finished_at: Optional[datetime] = None

    @property
    def duration(self) -> float:
        if self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()


@dataclass
class BackupReport:
    """What run() hands back to its invoker"""
    outcome: Outcome
    notification_confirmed: bool
    run: BackupRun

    @property
    def exit_code(self) -> int:
        return 1 if self.outcome.is_failure else 0
