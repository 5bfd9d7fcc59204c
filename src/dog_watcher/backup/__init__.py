"""
Dog Watcher - Backup Components

The backup pipeline together with its git and DataDog collaborators.
"""

from .datadog_client import DataDogClient, ResourceKind, RESOURCE_KINDS
from .git_repository import GitRepository, CommitOutcome
from .outcome import (
    BackupReport,
    BackupRun,
    EventKind,
    NotificationEvent,
    Outcome,
    OutcomeKind,
    classify,
)
from .pipeline import BackupPipeline

__all__ = [
    'BackupPipeline',
    'BackupReport',
    'BackupRun',
    'CommitOutcome',
    'DataDogClient',
    'EventKind',
    'GitRepository',
    'NotificationEvent',
    'Outcome',
    'OutcomeKind',
    'RESOURCE_KINDS',
    'ResourceKind',
    'classify',
]
