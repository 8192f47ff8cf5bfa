#!/usr/bin/env python3
"""
Watch mode: re-verifies exercises as their files change, with a small
command shell (hint, clear, quit, help) running alongside.
"""

from .state import (
    WatchStatus,
    ChangeKind,
    ChangeEvent,
    SharedHintState,
    QuitFlag,
)
from .file_watcher import FileChangeWatcher, EventSource, WatchError, WatchSetupError
from .progress import PendingSet, recompute_pending
from .shell import InteractiveShell
from .orchestrator import WatchOrchestrator

__all__ = [
    'WatchStatus',
    'ChangeKind',
    'ChangeEvent',
    'SharedHintState',
    'QuitFlag',
    'FileChangeWatcher',
    'EventSource',
    'WatchError',
    'WatchSetupError',
    'PendingSet',
    'recompute_pending',
    'InteractiveShell',
    'WatchOrchestrator',
]
