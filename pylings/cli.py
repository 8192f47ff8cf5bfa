#!/usr/bin/env python3
"""
pylings - Small Python exercises CLI

Usage:
    pylings watch               # Re-verify exercises as you save them
    pylings verify              # Verify all exercises in order
    pylings run next            # Run the next unsolved exercise
    pylings hint variables1     # Show the hint for an exercise
    pylings list --unsolved     # List exercises still to do
"""

import sys
import shutil
import logging
import argparse
from dataclasses import asdict
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from . import __version__
from .config import DEFAULTS, WatchSettings, coerce_value, get_config_path, load_config, load_settings, set_config_value
from .exercise import Exercise, ExerciseError, ExerciseList, ExerciseListError, find_exercise
from .runner import ExerciseRunner
from .verify import verify
from .watch import WatchOrchestrator, WatchSetupError, WatchStatus


WELCOME = r"""       welcome to...
              _ _
  _ __  _   _| (_)_ __   __ _ ___
 | '_ \| | | | | | '_ \ / _` / __|
 | |_) | |_| | | | | | | (_| \__ \
 | .__/ \__, |_|_|_| |_|\__, |___/
 |_|    |___/           |___/"""

INTRODUCTION = """Is this your first time? Don't worry, pylings was made for beginners! We are
going to teach you a lot of things about Python, but before we can get
started, here's a couple of notes about how pylings operates:

1. The central concept behind pylings is that you solve exercises. These
   exercises usually have some sort of syntax error in them, which will cause
   them to fail compilation or testing. Sometimes there's a logic error instead
   of a syntax error. No matter what error, it's your job to find it and fix it!
   You'll know when you fixed it because then the exercise will pass and
   pylings will be able to move on to the next exercise.
2. If you run pylings in watch mode (which we recommend), it'll automatically
   start with the first exercise. Don't get confused by an error message popping
   up as soon as you run pylings! This is part of the exercise that you're
   supposed to solve, so open the exercise file in an editor and start your
   detective work!
3. If you're stuck on an exercise, there is a helpful hint you can view by typing
   'hint' (in watch mode), or running `pylings hint exercise_name`.

Got all that? Great! To get started, run `pylings watch` in order to get the first exercise.
Make sure to have your editor open in the pylings directory!"""

FINISH_LINE = """+----------------------------------------------------+
|          You made it to the finish line!           |
+----------------------------------------------------+

We hope you enjoyed learning about the various aspects of Python!
If you noticed any issues, please don't hesitate to report them.
You can also contribute your own exercises to help the greater community!"""

WATCH_SETUP_HELP = (
    "Most likely you've run out of disk space or your 'inotify limit' has been reached."
)


def setup_logging(verbose: bool = False) -> None:
    """Send diagnostics to stderr through rich"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=verbose)],
    )


class Pylings:
    """Main CLI interface for pylings"""

    def __init__(self, exercises: List[Exercise], settings: WatchSettings, console: Console = None):
        self.exercises = exercises
        self.settings = settings
        self.console = console or Console()
        self.runner = ExerciseRunner(
            python=settings.python_executable,
            timeout=settings.run_timeout,
        )

    def list_exercises(
        self,
        paths: bool = False,
        names: bool = False,
        filter: Optional[str] = None,
        unsolved: bool = False,
        solved: bool = False,
    ) -> int:
        """List exercises with their status"""
        filters = [f.strip() for f in (filter or '').lower().split(',') if f.strip()]

        table = Table(show_edge=False, box=None)
        table.add_column("Name", style="cyan")
        table.add_column("Path")
        table.add_column("Status")

        exercises_done = 0
        for exercise in self.exercises:
            fname = str(exercise.path)
            looks_done = exercise.looks_done()
            if looks_done:
                exercises_done += 1

            filter_cond = not filter or any(f in exercise.name or f in fname for f in filters)
            solve_cond = (looks_done and solved) or (not looks_done and unsolved) or (not solved and not unsolved)
            if not (filter_cond and solve_cond):
                continue

            if paths:
                self.console.print(fname, markup=False, highlight=False)
            elif names:
                self.console.print(exercise.name, markup=False, highlight=False)
            else:
                status = "[green]Done[/green]" if looks_done else "[yellow]Pending[/yellow]"
                table.add_row(exercise.name, fname, status)

        if not paths and not names:
            self.console.print(table)

        total = len(self.exercises)
        percentage = exercises_done / total * 100 if total else 100.0
        self.console.print(
            f"Progress: You completed {exercises_done} / {total} exercises ({percentage:.1f} %)."
        )
        return 0

    def run_exercise(self, name: str) -> int:
        """Run a single exercise and show its output"""
        exercise = self._find(name)
        if exercise is None:
            return 0

        self.console.print(f"[dim]Running {exercise.path}...[/dim]")
        result = self.runner.run(exercise)

        if result.output:
            self.console.print(Panel(
                Text(result.output),
                title=str(exercise.path),
                border_style="green" if result.success else "red",
            ))

        if result.success:
            self.console.print(f"[green]Successfully ran {exercise.name}![/green]")
            return 0

        self.console.print(f"[red]Ran {exercise.name} with errors[/red]")
        return 1

    def show_hint(self, name: str) -> int:
        """Print an exercise's hint"""
        exercise = self._find(name)
        if exercise is None:
            return 0
        self.console.print(exercise.hint or "No hint for this exercise.", markup=False, highlight=False)
        return 0

    def verify_all(self) -> int:
        """Verify every exercise in order"""
        state = verify(self.exercises, (0, len(self.exercises)), self.runner, console=self.console)
        if state.is_done:
            self.console.print("[bold green]All exercises done![/bold green]")
            return 0
        self.console.print(f"[red]Exercise {state.exercise.name} failed[/red]")
        return 1

    def watch(self) -> int:
        """Run watch mode and report how it ended"""
        orchestrator = WatchOrchestrator(
            self.exercises,
            settings=self.settings,
            runner=self.runner,
            console=self.console,
        )

        try:
            status = orchestrator.run()
        except WatchSetupError as e:
            self.console.print(
                f"[red]Error: Could not watch your progress. Error message was {e}.[/red]",
            )
            self.console.print(WATCH_SETUP_HELP)
            return 1
        except KeyboardInterrupt:
            self.console.print("\n[dim]Stopping file watcher...[/dim]")
            status = WatchStatus.UNFINISHED

        if status == WatchStatus.FINISHED:
            self.console.print("[bold green]All exercises completed![/bold green]")
            self.console.print(Panel(FINISH_LINE, border_style="green"))
        else:
            self.console.print("We hope you're enjoying learning about Python!")
            self.console.print(
                "If you want to continue working on the exercises at a later point, "
                "you can simply run `pylings watch` again"
            )
        return 0

    def _find(self, name: str) -> Optional[Exercise]:
        exercise = find_exercise(name, self.exercises)
        if exercise is None:
            self.console.print("[green]Congratulations! You have done all the exercises![/green]")
            self.console.print("There are no more exercises to do next!")
        return exercise


def show_config(console: Console, key: Optional[str] = None) -> int:
    """Show effective settings, or a single one"""
    settings = asdict(load_settings())
    stored = load_config()

    if key:
        if key not in DEFAULTS:
            console.print(f"[red]Unknown setting: {key}[/red]")
            return 1
        console.print(str(settings[key]), markup=False, highlight=False)
        return 0

    table = Table(title=f"Settings ({get_config_path()})")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    table.add_column("Source", style="dim")
    for name, value in settings.items():
        table.add_row(name, str(value), "config" if name in stored else "default")
    console.print(table)
    return 0


def update_config(console: Console, key: str, value: str) -> int:
    """Store one setting"""
    try:
        coerced = coerce_value(key, value)
    except KeyError:
        console.print(f"[red]Unknown setting: {key}[/red]")
        console.print(f"[dim]Known settings: {', '.join(DEFAULTS)}[/dim]")
        return 1
    except ValueError as e:
        console.print(f"[red]Invalid value for {key}: {e}[/red]")
        return 1

    set_config_value(key, coerced)
    shown = coerced if coerced is not None else f"default ({DEFAULTS[key]})"
    console.print(f"[green]{key} set to {shown}[/green]")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='pylings',
        description='pylings - small exercises to get you used to reading and writing Python',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  pylings watch                    # Recommended: re-verify as you save
  pylings verify                   # Verify all exercises once
  pylings run next                 # Run the next unsolved exercise
  pylings hint next                # Hint for the next unsolved exercise
  pylings list --unsolved          # What is left to do
  pylings config poll_seconds 0.5  # Change a setting
        """
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('-v', '--verbose', action='store_true', help='Show debug logging')

    subparsers = parser.add_subparsers(dest='command')

    subparsers.add_parser('verify', help='Verify all exercises according to the recommended order')
    subparsers.add_parser('watch', help='Rerun `verify` when files were edited')

    run_parser = subparsers.add_parser('run', help='Run/Test a single exercise')
    run_parser.add_argument('name', help="The name of the exercise, or 'next'")

    hint_parser = subparsers.add_parser('hint', help='Return a hint for the given exercise')
    hint_parser.add_argument('name', help="The name of the exercise, or 'next'")

    list_parser = subparsers.add_parser('list', help='List the exercises available in pylings')
    list_parser.add_argument('-p', '--paths', action='store_true', help='Show only the paths of the exercises')
    list_parser.add_argument('-n', '--names', action='store_true', help='Show only the names of the exercises')
    list_parser.add_argument('-f', '--filter',
                             help='Provide a string to match exercise names. Comma separated patterns are accepted')
    list_parser.add_argument('-u', '--unsolved', action='store_true', help='Display only exercises not yet solved')
    list_parser.add_argument('-s', '--solved', action='store_true', help='Display only exercises that have been solved')

    config_parser = subparsers.add_parser('config', help='Show or change pylings settings')
    config_parser.add_argument('key', nargs='?', help='Setting name')
    config_parser.add_argument('value', nargs='?', help="New value ('default' to reset)")

    return parser


def main(argv: Optional[List[str]] = None, console: Console = None) -> int:
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)
    console = console or Console()

    setup_logging(args.verbose)

    if args.command is None:
        console.print(f"\n{WELCOME}\n", markup=False, highlight=False)
        console.print(f"{INTRODUCTION}\n", markup=False, highlight=False)
        return 0

    if args.command == 'config':
        if args.key and args.value is not None:
            return update_config(console, args.key, args.value)
        return show_config(console, args.key)

    settings = load_settings()

    python = settings.python_executable
    if not (shutil.which(python) or Path(python).is_file()):
        console.print(f"[red]Failed to find `{python}`.[/red]")
        console.print("Did you already install Python?")
        console.print(f"Try running `{python} --version` to diagnose the problem.")
        return 1

    if not Path(settings.exercises_dir).is_dir():
        console.print(
            f"\nThe `{settings.exercises_dir}` directory wasn't found in the current directory.\n"
            "Run pylings from the directory that contains your exercises."
        )
        return 1

    try:
        exercises = ExerciseList.parse(settings.info_file).exercises
    except ExerciseListError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    app = Pylings(exercises, settings, console=console)

    try:
        if args.command == 'list':
            return app.list_exercises(
                paths=args.paths,
                names=args.names,
                filter=args.filter,
                unsolved=args.unsolved,
                solved=args.solved,
            )
        elif args.command == 'run':
            return app.run_exercise(args.name)
        elif args.command == 'hint':
            return app.show_hint(args.name)
        elif args.command == 'verify':
            return app.verify_all()
        elif args.command == 'watch':
            return app.watch()
    except ExerciseError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
