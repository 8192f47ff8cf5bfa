#!/usr/bin/env python3
"""
State shared between the watch loop and the interactive shell.
"""

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class WatchStatus(Enum):
    """How a watch session ended"""
    FINISHED = 'finished'      # Every exercise passes
    UNFINISHED = 'unfinished'  # The learner typed 'quit'


class ChangeKind(Enum):
    """Kind of a debounced filesystem change"""
    MODIFIED = 'modified'  # Content written, created, or moved into place
    DELETED = 'deleted'


@dataclass(frozen=True)
class ChangeEvent:
    """One settled change from a debounce window"""
    path: str
    kind: ChangeKind = ChangeKind.MODIFIED


class SharedHintState:
    """Hint of the exercise that failed last; written by the loop, read by the shell"""

    def __init__(self, hint: Optional[str] = None):
        self._lock = threading.Lock()
        self._hint = hint

    def get(self) -> Optional[str]:
        with self._lock:
            return self._hint

    def set(self, hint: Optional[str]) -> None:
        with self._lock:
            self._hint = hint


class QuitFlag:
    """Set once by the shell, polled by the loop; never cleared"""

    def __init__(self):
        self._event = threading.Event()

    def set(self) -> None:
        self._event.set()

    def is_set(self) -> bool:
        return self._event.is_set()
