"""
Dog Watcher - Core Components

Configuration, error taxonomy, workspace lifecycle and commit message templates.
"""

from .config import Config, PipelineSettings
from .errors import (
    DogWatcherError,
    ConfigurationError,
    ProvisioningError,
    RunLockedError,
    SyncError,
    NoopSignal,
    FetchError,
    NotificationError,
    CleanupError,
)
from .template import first_external_ipv4, resolve
from .workspace import WorkspaceManager, RunLock

__all__ = [
    'Config',
    'PipelineSettings',
    'DogWatcherError',
    'ConfigurationError',
    'ProvisioningError',
    'RunLockedError',
    'SyncError',
    'NoopSignal',
    'FetchError',
    'NotificationError',
    'CleanupError',
    'first_external_ipv4',
    'resolve',
    'WorkspaceManager',
    'RunLock',
]
