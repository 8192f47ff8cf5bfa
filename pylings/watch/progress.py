#!/usr/bin/env python3
"""
Pending-exercise recomputation for watch mode.
"""

import logging
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Iterable, List, Sequence, Tuple

from ..exercise import Exercise


logger = logging.getLogger(__name__)


@dataclass
class PendingSet:
    """Exercises to re-check in one watch iteration, in catalog order"""
    exercises: List[Exercise] = field(default_factory=list)
    total: int = 0

    @property
    def num_done(self) -> int:
        return self.total - len(self.exercises)

    @property
    def progress(self) -> Tuple[int, int]:
        return self.num_done, self.total

    def __len__(self) -> int:
        return len(self.exercises)

    def __iter__(self):
        return iter(self.exercises)


def path_ends_with(path, suffix) -> bool:
    """Component-wise suffix match: 'a/b/c.py' ends with 'b/c.py' but not with 'c/c.py'"""
    path_parts = PurePath(path).parts
    suffix_parts = PurePath(suffix).parts
    # Relative exercise paths may start with '.', which never appears in watcher paths
    suffix_parts = tuple(part for part in suffix_parts if part != '.')
    if not suffix_parts or len(suffix_parts) > len(path_parts):
        return False
    return path_parts[-len(suffix_parts):] == suffix_parts


def recompute_pending(exercises: Sequence[Exercise], changed_paths: Iterable[str]) -> PendingSet:
    """
    Select the exercises to re-check after a batch of file changes.

    An exercise is pending when it does not look done, or when one of the
    changed paths is its file (so a breakage in a finished exercise shows up).

    Raises:
        ExerciseError: if an exercise file cannot be read
    """
    changed = list(changed_paths)
    pending = []

    for exercise in exercises:
        touched = any(path_ends_with(path, exercise.path) for path in changed)
        if touched or not exercise.looks_done():
            pending.append(exercise)

    if logger.isEnabledFor(logging.DEBUG):
        for path in changed:
            if not any(path_ends_with(path, exercise.path) for exercise in exercises):
                logger.debug("Changed file %s belongs to no exercise", path)
        logger.debug("Pending: %s", ', '.join(e.name for e in pending) or '(none)')

    return PendingSet(exercises=pending, total=len(exercises))
