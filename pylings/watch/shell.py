#!/usr/bin/env python3
"""
Interactive shell that runs next to the watch loop.
Reads one command per line on its own thread.
"""

import sys
import logging
import threading
from contextlib import nullcontext
from typing import Callable, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory
from prompt_toolkit.patch_stdout import patch_stdout
from rich.console import Console

from ..config import get_config_dir
from .commands import WATCH_MODE_HELP_MESSAGE
from .state import SharedHintState, QuitFlag


logger = logging.getLogger(__name__)

# Erase the display and move the cursor home
CLEAR_SCREEN = '\x1b[2J\x1b[1;1H'
# Full terminal reset, used between verification passes
RESET_SCREEN = '\x1bc'


def write_control(console: Console, sequence: str) -> None:
    """Write a raw terminal control sequence"""
    console.file.write(sequence)
    console.file.flush()


class InteractiveShell:
    """Line-oriented command reader for watch mode"""

    def __init__(
        self,
        hint_state: SharedHintState,
        quit_flag: QuitFlag,
        console: Console = None,
        read_line: Optional[Callable[[], str]] = None,
    ):
        self.hint_state = hint_state
        self.quit_flag = quit_flag
        self.console = console or Console()
        self._prompt_session: Optional[PromptSession] = None
        self.read_line = read_line or self._default_reader()
        self._thread: Optional[threading.Thread] = None

    def _default_reader(self) -> Callable[[], str]:
        if sys.stdin is not None and sys.stdin.isatty():
            history_path = get_config_dir() / 'watch_history'
            self._prompt_session = PromptSession(history=FileHistory(str(history_path)))
            return lambda: self._prompt_session.prompt('')
        return self._read_stdin_line

    @staticmethod
    def _read_stdin_line() -> str:
        line = sys.stdin.readline()
        if not line:
            raise EOFError
        return line

    def patched_output(self):
        """Context manager that keeps loop output from tearing up the prompt line"""
        if self._prompt_session is not None:
            return patch_stdout(raw=True)
        return nullcontext()

    def start(self):
        """Print the greeting and start reading commands in the background"""
        self.console.print(
            "Welcome to watch mode! You can type 'help' to get an overview "
            "of the commands you can use here."
        )
        self._thread = threading.Thread(target=self._read_loop, name='pylings-shell')
        self._thread.daemon = True
        self._thread.start()

    def _read_loop(self):
        while True:
            try:
                line = self.read_line()
            except EOFError:
                logger.debug("Shell input closed")
                return
            except KeyboardInterrupt:
                self.console.print("[dim]Use 'quit' to leave watch mode[/dim]")
                continue
            except (OSError, ValueError) as e:
                self.console.print(f"error reading command: {e}", markup=False, highlight=False)
                continue

            self.handle(line)

    def handle(self, line: str) -> None:
        """Act on one line of input"""
        command = line.strip()

        if command == 'hint':
            hint = self.hint_state.get()
            if hint is not None:
                self.console.print(hint, markup=False, highlight=False)
        elif command == 'clear':
            write_control(self.console, CLEAR_SCREEN)
        elif command == 'quit':
            self.quit_flag.set()
            self.console.print("Bye!")
        elif command == 'help':
            self.console.print(WATCH_MODE_HELP_MESSAGE, markup=False, highlight=False)
        else:
            self.console.print(
                f"unknown command: {command}\n{WATCH_MODE_HELP_MESSAGE}",
                markup=False,
                highlight=False,
            )
