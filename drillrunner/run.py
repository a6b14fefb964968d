"""Running a single exercise and resetting it."""

from __future__ import annotations

import subprocess

from drillrunner.exercise import CompileError, Exercise, Mode, RunError
from drillrunner.ui import success, warn
from drillrunner.verify import ExerciseFailed, test

from rich.console import Console


def run(exercise: Exercise, verbose: bool = False) -> None:
    """Compile and run (or test) one exercise; raise ExerciseFailed on failure."""
    if exercise.mode in (Mode.TEST, Mode.BUILD_SCRIPT):
        test(exercise, verbose)
    else:
        _compile_and_run(exercise)


def reset(exercise: Exercise) -> None:
    """Discard local changes to the exercise with git stash."""
    try:
        subprocess.Popen(["git", "stash", "--", str(exercise.path)])
    except OSError as exc:
        raise ExerciseFailed(exercise) from exc


def _compile_and_run(exercise: Exercise) -> None:
    console = Console(highlight=False, soft_wrap=True, emoji=False)
    with console.status(f"Compiling {exercise}...") as status:
        try:
            compiled = exercise.compile()
        except CompileError as exc:
            compile_failure = exc
        else:
            compile_failure = None
            status.update(f"Running {exercise}...")
            with compiled:
                try:
                    output = compiled.run()
                except RunError as exc:
                    run_failure = exc
                else:
                    run_failure = None

    if compile_failure is not None:
        warn(f"Compilation of {exercise} failed!, Compiler error message:\n")
        print(compile_failure.output.stderr)
        raise ExerciseFailed(exercise) from compile_failure

    if run_failure is not None:
        print(run_failure.output.stdout)
        print(run_failure.output.stderr)
        warn(f"Ran {exercise} with errors")
        raise ExerciseFailed(exercise) from run_failure

    print(output.stdout)
    success(f"Successfully ran {exercise}")