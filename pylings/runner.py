#!/usr/bin/env python3
"""
Exercise runner.
Invokes the Python interpreter as a subprocess to compile, run or test one exercise.
"""

import os
import sys
import logging
import subprocess
from dataclasses import dataclass
from typing import List, Optional

from .exercise import Exercise, ExerciseMode


logger = logging.getLogger(__name__)

# Compiles the source without writing bytecode next to it
COMPILE_ONLY = "import sys; compile(open(sys.argv[1], encoding='utf-8').read(), sys.argv[1], 'exec')"


@dataclass
class RunResult:
    """Outcome of checking a single exercise"""
    success: bool
    output: str = ''
    returncode: int = 0
    # Passed, but the learner has not removed the not-done marker yet
    marked_not_done: bool = False


class ExerciseRunner:
    """Runs exercises with a Python interpreter in a subprocess"""

    def __init__(self, python: str = None, timeout: Optional[float] = None):
        self.python = python or sys.executable
        self.timeout = timeout

    def command_for(self, exercise: Exercise) -> List[str]:
        """Build the interpreter command for an exercise's mode"""
        path = str(exercise.path)
        if exercise.mode == ExerciseMode.COMPILE:
            return [self.python, '-c', COMPILE_ONLY, path]
        if exercise.mode == ExerciseMode.TEST:
            return [self.python, '-m', 'pytest', '-q', '--no-header', '-p', 'no:cacheprovider', path]
        return [self.python, path]

    def run(self, exercise: Exercise) -> RunResult:
        """
        Compile, run or test an exercise.

        Returns:
            RunResult with the combined stdout/stderr of the subprocess
        """
        cmd = self.command_for(exercise)
        env = dict(os.environ, PYTHONDONTWRITEBYTECODE='1')
        logger.debug("Running %s: %s", exercise.name, ' '.join(cmd))

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                env=env,
            )
        except subprocess.TimeoutExpired:
            return RunResult(
                success=False,
                output=f"Exercise {exercise.name} timed out after {self.timeout} seconds",
                returncode=-1,
            )
        except OSError as e:
            return RunResult(
                success=False,
                output=f"Failed to start {self.python}: {e}",
                returncode=-1,
            )

        output = result.stdout
        if result.stderr:
            output = f"{output}\n{result.stderr}" if output else result.stderr

        return RunResult(
            success=result.returncode == 0,
            output=output.rstrip(),
            returncode=result.returncode,
        )

    def check(self, exercise: Exercise) -> RunResult:
        """
        Verification check: the exercise must pass and look done.

        Raises:
            ExerciseError: if the exercise file cannot be read
        """
        result = self.run(exercise)
        if result.success and not exercise.looks_done():
            result.success = False
            result.marked_not_done = True
        return result
