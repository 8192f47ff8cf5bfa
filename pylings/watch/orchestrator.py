#!/usr/bin/env python3
"""
Watch mode.
Verifies everything once, then re-verifies pending exercises each time a
batch of source changes arrives, until all pass or the learner quits.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence

from rich.console import Console

from ..config import WatchSettings
from ..exercise import Exercise
from ..runner import ExerciseRunner
from ..verify import verify
from .file_watcher import FileChangeWatcher, WatchError
from .progress import recompute_pending
from .shell import InteractiveShell, write_control, RESET_SCREEN
from .state import ChangeEvent, ChangeKind, QuitFlag, SharedHintState, WatchStatus


logger = logging.getLogger(__name__)


class WatchOrchestrator:
    """
    The watch loop.

    Workflow:
    1. Register the watcher on the exercise directory
    2. Verify every exercise; stop here if all pass
    3. Start the shell with the failing exercise's hint
    4. On each batch of changes, re-verify the pending exercises
    5. Return once everything passes or the shell sets the quit flag
    """

    def __init__(
        self,
        exercises: Sequence[Exercise],
        settings: WatchSettings = None,
        runner: ExerciseRunner = None,
        console: Console = None,
        watcher: FileChangeWatcher = None,
        shell: InteractiveShell = None,
    ):
        self.exercises = list(exercises)
        self.settings = settings or WatchSettings()
        self.runner = runner or ExerciseRunner(
            python=self.settings.python_executable,
            timeout=self.settings.run_timeout,
        )
        self.console = console or Console()
        self.watcher = watcher or FileChangeWatcher(
            extensions=(self.settings.suffix,),
            debounce_seconds=self.settings.debounce_seconds,
        )
        self.hint_state = SharedHintState()
        self.quit_flag = QuitFlag()
        self.shell = shell or InteractiveShell(self.hint_state, self.quit_flag, console=self.console)

    def run(self) -> WatchStatus:
        """
        Run watch mode to completion.

        Raises:
            WatchSetupError: if the exercise directory cannot be watched
            ExerciseError: if an exercise file cannot be read
        """
        source = self.watcher.start(Path(self.settings.exercises_dir))
        try:
            self.clear_screen()

            state = self._verify(self.exercises, (0, len(self.exercises)))
            if state.is_done:
                return WatchStatus.FINISHED
            self.hint_state.set(state.exercise.hint)

            self.shell.start()
            with self.shell.patched_output():
                return self._loop(source)
        finally:
            self.watcher.stop()

    def _loop(self, source) -> WatchStatus:
        while True:
            try:
                batch = source.receive(timeout=self.settings.poll_seconds)
            except WatchError as e:
                self.console.print(f"watch error: {e}", markup=False, highlight=False)
                batch = None

            if batch:
                changed = self.relevant_paths(batch)
                if changed:
                    status = self.process_changes(changed)
                    if status is not None:
                        return status

            if self.quit_flag.is_set():
                return WatchStatus.UNFINISHED

    def relevant_paths(self, batch: Sequence[ChangeEvent]) -> List[str]:
        """Paths of modified source files in a batch"""
        suffix = self.settings.suffix
        return [
            event.path for event in batch
            if event.kind == ChangeKind.MODIFIED and Path(event.path).suffix == suffix
        ]

    def process_changes(self, changed_paths: Sequence[str]) -> Optional[WatchStatus]:
        """
        Re-verify after a batch of changes.

        Returns:
            WatchStatus.FINISHED when everything passes, otherwise None
        """
        pending = recompute_pending(self.exercises, changed_paths)
        self.clear_screen()

        state = self._verify(pending.exercises, pending.progress)
        if state.is_done:
            return WatchStatus.FINISHED

        self.hint_state.set(state.exercise.hint)
        return None

    def _verify(self, exercises, progress):
        return verify(exercises, progress, self.runner, console=self.console)

    def clear_screen(self):
        write_control(self.console, RESET_SCREEN)
