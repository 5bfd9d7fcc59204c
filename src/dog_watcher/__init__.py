"""
Dog Watcher

Backs up DataDog dashboards, screenboards and monitors into a git repository
and reports each run as a DataDog event.
"""

__version__ = "1.0.0"
