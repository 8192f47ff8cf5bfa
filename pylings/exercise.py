#!/usr/bin/env python3
"""
Exercise catalog.
Loads the ordered exercise list from info.json and answers "is this one done yet".
"""

import re
import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence


logger = logging.getLogger(__name__)

# Learners delete this line once they are happy with their solution
NOT_DONE_MARKER = '# I AM NOT DONE'
_NOT_DONE_PATTERN = re.compile(r'^\s*#\s*I\s+AM\s+NOT\s+DONE', re.MULTILINE)


class ExerciseError(Exception):
    """Raised when an exercise cannot be found or its file cannot be read"""


class ExerciseListError(Exception):
    """Raised when info.json is missing or malformed"""


class ExerciseMode(Enum):
    """How an exercise is checked"""
    COMPILE = 'compile'  # Byte-compile only
    RUN = 'run'          # Execute the file, exit status 0 passes
    TEST = 'test'        # Run pytest on the file


@dataclass(frozen=True)
class Exercise:
    """A single exercise from the catalog"""
    name: str
    path: Path
    mode: ExerciseMode
    hint: str = ''

    def __str__(self) -> str:
        return self.name

    def looks_done(self) -> bool:
        """
        Check the exercise file for the not-done marker.

        Raises:
            ExerciseError: if the file cannot be read
        """
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                source = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise ExerciseError(f"Failed to read exercise file {self.path}: {e}") from e

        return _NOT_DONE_PATTERN.search(source) is None


@dataclass
class ExerciseList:
    """Ordered exercise catalog, fixed for the lifetime of a session"""
    exercises: List[Exercise]

    @classmethod
    def parse(cls, info_path: str = 'info.json', root: Optional[str] = None) -> 'ExerciseList':
        """
        Load the catalog from an info.json file.

        Exercise paths in the file are relative to `root` (the directory of
        the info file when not given) and keep their listed order.

        Raises:
            ExerciseListError: on a missing file, invalid JSON, or invalid entries
        """
        info_file = Path(info_path)
        base = Path(root) if root is not None else info_file.parent

        try:
            with open(info_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise ExerciseListError(
                f"Failed to find {info_file}. Are you in the pylings directory?"
            ) from e
        except (OSError, json.JSONDecodeError) as e:
            raise ExerciseListError(f"Failed to parse {info_file}: {e}") from e

        entries = data.get('exercises') if isinstance(data, dict) else None
        if not isinstance(entries, list):
            raise ExerciseListError(f"{info_file} must contain an 'exercises' list")

        exercises = []
        seen = set()
        for index, entry in enumerate(entries, 1):
            exercise = cls._parse_entry(entry, index, base)
            if exercise.name in seen:
                raise ExerciseListError(f"Duplicate exercise name: {exercise.name}")
            seen.add(exercise.name)
            exercises.append(exercise)

        logger.debug("Loaded %d exercises from %s", len(exercises), info_file)
        return cls(exercises=exercises)

    @staticmethod
    def _parse_entry(entry, index: int, base: Path) -> Exercise:
        if not isinstance(entry, dict):
            raise ExerciseListError(f"Exercise #{index} is not an object")

        missing = [key for key in ('name', 'path', 'mode') if key not in entry]
        if missing:
            raise ExerciseListError(f"Exercise #{index} is missing: {', '.join(missing)}")

        try:
            mode = ExerciseMode(entry['mode'])
        except ValueError:
            choices = ', '.join(m.value for m in ExerciseMode)
            raise ExerciseListError(
                f"Exercise {entry['name']} has unknown mode '{entry['mode']}' (expected one of: {choices})"
            )

        return Exercise(
            name=str(entry['name']),
            path=base / entry['path'],
            mode=mode,
            hint=str(entry.get('hint', '')).strip(),
        )

    def __len__(self) -> int:
        return len(self.exercises)

    def __iter__(self):
        return iter(self.exercises)


def find_exercise(name: str, exercises: Sequence[Exercise]) -> Optional[Exercise]:
    """
    Look up an exercise by name.

    'next' selects the first exercise that does not look done yet, or
    None when everything is done.

    Raises:
        ExerciseError: if no exercise has that name
    """
    if name == 'next':
        for exercise in exercises:
            if not exercise.looks_done():
                return exercise
        return None

    for exercise in exercises:
        if exercise.name == name:
            return exercise

    raise ExerciseError(f"No exercise found for '{name}'!")
