#!/usr/bin/env python3
"""
Tests for verification and the exercise runner.
"""

import io
import sys
import subprocess
from unittest.mock import patch

from rich.console import Console

from pylings.exercise import Exercise, ExerciseMode
from pylings.runner import ExerciseRunner, RunResult
from pylings.verify import VerifyOutcome, VerifyState, progress_bar, verify


class FakeRunner:
    """Passes every exercise except the named ones"""

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.checked = []

    def check(self, exercise):
        self.checked.append(exercise.name)
        return RunResult(success=exercise.name not in self.failing, output=f"output of {exercise.name}")


def quiet_console():
    return Console(file=io.StringIO(), width=120)


def make_exercises(tmp_path, names):
    exercises = []
    for name in names:
        path = tmp_path / f'{name}.py'
        path.write_text('print("ok")\n')
        exercises.append(Exercise(name=name, path=path, mode=ExerciseMode.RUN, hint=f'hint for {name}'))
    return exercises


class TestVerify:
    """Tests for verify()"""

    def test_all_pass(self, tmp_path):
        exercises = make_exercises(tmp_path, ['a', 'b', 'c'])
        runner = FakeRunner()

        state = verify(exercises, (0, 3), runner, console=quiet_console())

        assert state.is_done
        assert state.outcome == VerifyOutcome.ALL_DONE
        assert state.exercise is None
        assert runner.checked == ['a', 'b', 'c']

    def test_stops_at_first_failure(self, tmp_path):
        exercises = make_exercises(tmp_path, ['a', 'b', 'c', 'd'])
        runner = FakeRunner(failing={'b', 'd'})

        state = verify(exercises, (0, 4), runner, console=quiet_console())

        assert state == VerifyState.failed(exercises[1])
        assert not state.is_done
        # Nothing after the first failure is attempted
        assert runner.checked == ['a', 'b']

    def test_subsequence_reports_first_failure_in_order(self, tmp_path):
        exercises = make_exercises(tmp_path, ['a', 'b', 'c', 'd'])
        runner = FakeRunner(failing={'a', 'd'})
        pending = [exercises[2], exercises[3]]

        state = verify(pending, (2, 4), runner, console=quiet_console())

        assert state.exercise is exercises[3]
        assert runner.checked == ['c', 'd']

    def test_empty_sequence_is_all_done(self):
        runner = FakeRunner()
        state = verify([], (5, 5), runner, console=quiet_console())
        assert state.is_done
        assert runner.checked == []

    def test_progress_is_reported_before_result(self, tmp_path):
        exercises = make_exercises(tmp_path, ['a', 'b'])
        console = quiet_console()

        verify(exercises, (3, 5), FakeRunner(failing={'b'}), console=console)

        output = console.file.getvalue()
        assert '3/5' in output
        assert '4/5' in output
        assert 'Successfully verified a' in output
        assert 'output of b' in output
        assert '5/5' not in output

    def test_marked_not_done_message(self, tmp_path):
        exercises = make_exercises(tmp_path, ['a'])
        console = quiet_console()

        class MarkedRunner:
            def check(self, exercise):
                return RunResult(success=False, output='hello', marked_not_done=True)

        state = verify(exercises, (0, 1), MarkedRunner(), console=console)

        assert state.exercise is exercises[0]
        assert 'I AM NOT DONE' in console.file.getvalue()


class TestProgressBar:
    """Tests for the progress bar text"""

    def test_partial(self):
        bar = progress_bar(1, 4, width=8)
        assert bar == 'Progress: [##>-----] 1/4 (25.0 %)'

    def test_complete(self):
        assert progress_bar(4, 4, width=4) == 'Progress: [####] 4/4 (100.0 %)'

    def test_empty(self):
        assert progress_bar(0, 2, width=4) == 'Progress: [>---] 0/2 (0.0 %)'

    def test_no_exercises(self):
        assert progress_bar(0, 0, width=2) == 'Progress: [##] 0/0 (100.0 %)'


class TestExerciseRunner:
    """Tests for ExerciseRunner"""

    def test_commands_per_mode(self, tmp_path):
        runner = ExerciseRunner(python='python3')
        path = tmp_path / 'ex.py'

        compile_cmd = runner.command_for(Exercise('c', path, ExerciseMode.COMPILE))
        run_cmd = runner.command_for(Exercise('r', path, ExerciseMode.RUN))
        test_cmd = runner.command_for(Exercise('t', path, ExerciseMode.TEST))

        assert compile_cmd[:2] == ['python3', '-c']
        assert compile_cmd[-1] == str(path)
        assert run_cmd == ['python3', str(path)]
        assert test_cmd[:3] == ['python3', '-m', 'pytest']
        assert test_cmd[-1] == str(path)

    def test_run_success(self, tmp_path):
        path = tmp_path / 'ok.py'
        path.write_text('print("hello from exercise")\n')
        runner = ExerciseRunner(python=sys.executable)

        result = runner.run(Exercise('ok', path, ExerciseMode.RUN))

        assert result.success
        assert result.returncode == 0
        assert 'hello from exercise' in result.output

    def test_run_failure_captures_stderr(self, tmp_path):
        path = tmp_path / 'broken.py'
        path.write_text('raise ValueError("nope")\n')
        runner = ExerciseRunner(python=sys.executable)

        result = runner.run(Exercise('broken', path, ExerciseMode.RUN))

        assert not result.success
        assert result.returncode != 0
        assert 'ValueError' in result.output

    def test_compile_mode_catches_syntax_errors(self, tmp_path):
        path = tmp_path / 'syntax.py'
        path.write_text('def f(:\n')
        runner = ExerciseRunner(python=sys.executable)

        result = runner.run(Exercise('syntax', path, ExerciseMode.COMPILE))

        assert not result.success

    def test_compile_mode_writes_no_bytecode(self, tmp_path):
        path = tmp_path / 'compiles.py'
        path.write_text('x = 1\n')
        runner = ExerciseRunner(python=sys.executable)

        result = runner.run(Exercise('compiles', path, ExerciseMode.COMPILE))

        assert result.success
        assert not list(tmp_path.rglob('__pycache__'))
        assert not list(tmp_path.rglob('*.pyc'))

    def test_test_mode_runs_solved_exercise(self, tmp_path):
        path = tmp_path / 'functions1.py'
        path.write_text(
            'def square(n):\n'
            '    return n * n\n'
            '\n'
            '\n'
            'def test_square():\n'
            '    assert square(3) == 9\n'
        )
        runner = ExerciseRunner(python=sys.executable)

        result = runner.check(Exercise('functions1', path, ExerciseMode.TEST))

        assert result.success, result.output
        assert '1 passed' in result.output

    def test_test_mode_reports_failing_assertion(self, tmp_path):
        path = tmp_path / 'functions2.py'
        path.write_text(
            'def square(n):\n'
            '    return n + n\n'
            '\n'
            '\n'
            'def test_square():\n'
            '    assert square(3) == 9\n'
        )
        runner = ExerciseRunner(python=sys.executable)

        result = runner.check(Exercise('functions2', path, ExerciseMode.TEST))

        assert not result.success
        assert '1 failed' in result.output

    def test_timeout_is_a_failure(self, tmp_path):
        exercise = Exercise('slow', tmp_path / 'slow.py', ExerciseMode.RUN)
        runner = ExerciseRunner(python='python3', timeout=0.5)

        with patch('pylings.runner.subprocess.run',
                   side_effect=subprocess.TimeoutExpired(cmd='python3', timeout=0.5)):
            result = runner.run(exercise)

        assert not result.success
        assert 'timed out' in result.output

    def test_missing_interpreter_is_a_failure(self, tmp_path):
        exercise = Exercise('x', tmp_path / 'x.py', ExerciseMode.RUN)
        runner = ExerciseRunner(python=str(tmp_path / 'no-such-python'))

        result = runner.run(exercise)

        assert not result.success
        assert 'Failed to start' in result.output

    def test_check_requires_marker_removed(self, tmp_path):
        path = tmp_path / 'marked.py'
        path.write_text('# I AM NOT DONE\nprint("works")\n')
        exercise = Exercise('marked', path, ExerciseMode.RUN)
        runner = ExerciseRunner(python=sys.executable)

        result = runner.check(exercise)
        assert not result.success
        assert result.marked_not_done

        path.write_text('print("works")\n')
        result = runner.check(exercise)
        assert result.success
        assert not result.marked_not_done

    def test_check_failure_keeps_marker_flag_off(self, tmp_path):
        path = tmp_path / 'broken.py'
        path.write_text('# I AM NOT DONE\nraise SystemExit(3)\n')
        runner = ExerciseRunner(python=sys.executable)

        result = runner.check(Exercise('broken', path, ExerciseMode.RUN))

        assert not result.success
        assert result.returncode == 3
        assert not result.marked_not_done
