#!/usr/bin/env python3
"""
Verification of exercises in catalog order.
Stops at the first exercise that does not pass.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from .exercise import Exercise, NOT_DONE_MARKER


logger = logging.getLogger(__name__)

PROGRESS_BAR_WIDTH = 40


class VerifyOutcome(Enum):
    """Terminal result of one verification pass"""
    ALL_DONE = 'all_done'
    FAILED = 'failed'


@dataclass(frozen=True)
class VerifyState:
    """Result of verify(); carries the failing exercise when there is one"""
    outcome: VerifyOutcome
    exercise: Optional[Exercise] = None

    @classmethod
    def all_exercises_done(cls) -> 'VerifyState':
        return cls(outcome=VerifyOutcome.ALL_DONE)

    @classmethod
    def failed(cls, exercise: Exercise) -> 'VerifyState':
        return cls(outcome=VerifyOutcome.FAILED, exercise=exercise)

    @property
    def is_done(self) -> bool:
        return self.outcome == VerifyOutcome.ALL_DONE


def progress_bar(done: int, total: int, width: int = PROGRESS_BAR_WIDTH) -> str:
    """Render e.g. 'Progress: [#####>-----] 3/10 (30.0 %)'"""
    ratio = done / total if total else 1.0
    filled = int(ratio * width)
    if filled < width:
        bar = '#' * filled + '>' + '-' * (width - filled - 1)
    else:
        bar = '#' * width
    return f"Progress: [{bar}] {done}/{total} ({ratio * 100:.1f} %)"


def verify(
    exercises: Iterable[Exercise],
    progress: Tuple[int, int],
    runner,
    console: Console = None,
) -> VerifyState:
    """
    Check exercises in the given order until one fails.

    Later exercises are not attempted once one fails; they usually build
    on the earlier ones.

    Args:
        exercises: Exercises to check, in catalog order
        progress: (done, total) counts shown in the progress bar
        runner: Object with check(exercise) -> RunResult
        console: Where status output goes

    Returns:
        VerifyState.failed(exercise) for the first failure, otherwise all done
    """
    console = console or Console()
    done, total = progress

    console.print(Text(progress_bar(done, total)))

    for exercise in exercises:
        console.print(f"[dim]Checking {exercise.name}...[/dim]")
        result = runner.check(exercise)

        if not result.success:
            logger.debug("%s failed (returncode=%s)", exercise.name, result.returncode)
            _report_failure(console, exercise, result)
            return VerifyState.failed(exercise)

        done += 1
        console.print(f"[green]Successfully verified {exercise.name}[/green]")
        console.print(Text(progress_bar(done, total)))

    return VerifyState.all_exercises_done()


def _report_failure(console: Console, exercise: Exercise, result) -> None:
    """Show why an exercise did not pass"""
    if result.marked_not_done:
        message = (
            f"[green]{exercise.name} passes![/green]\n\n"
            f"You can keep working on this exercise,\n"
            f"or jump into the next one by removing the [cyan]{NOT_DONE_MARKER}[/cyan] comment."
        )
        if result.output:
            console.print(Panel(Text(result.output), title="Output", border_style="dim"))
        console.print(Panel(message, title=f"[green]{exercise.path}[/green]", border_style="green"))
        return

    console.print(Panel(
        Text(result.output or "(no output)"),
        title=f"[red]{exercise.path}[/red]",
        border_style="red",
    ))
    console.print(f"[yellow]{exercise.name} does not pass yet. Fix it and save to try again.[/yellow]")
