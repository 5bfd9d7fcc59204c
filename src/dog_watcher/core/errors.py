#!/usr/bin/env python3
"""
Error taxonomy for Dog Watcher
Every expected failure of a backup run maps to one of these exceptions
"""


class DogWatcherError(RuntimeError):
    """Base exception for all Dog Watcher failures"""


class ConfigurationError(DogWatcherError):
    """Raised when the loaded configuration cannot drive a backup run"""


class ProvisioningError(DogWatcherError):
    """Raised when the run workspace cannot be created"""


class RunLockedError(ProvisioningError):
    """Raised when another backup run already holds the run lock"""


class SyncError(DogWatcherError):
    """Raised when a git command (clone, add, commit, push) fails"""


class NoopSignal(SyncError):
    """Not a real failure: the commit had nothing new to record"""


class FetchError(DogWatcherError):
    """Raised when resources cannot be fetched from the monitoring API"""


class NotificationError(DogWatcherError):
    """Raised when the outcome event cannot be delivered"""


class CleanupError(DogWatcherError):
    """Workspace removal failure; logged only, never the run's outcome"""
