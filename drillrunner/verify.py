"""Checking exercises: compile, run or test them and report the outcome."""

from __future__ import annotations

import contextlib
import enum
import os
from collections.abc import Iterable, Iterator

from rich.console import Console
from rich.status import Status
from rich.text import Text

from drillrunner.exercise import (
    CompiledExercise,
    CompileError,
    Exercise,
    Mode,
    RunError,
)
from drillrunner.ui import success, warn

_BAR_WIDTH = 60
_SEPARATOR = "===================="


class RunMode(enum.Enum):
    """Whether a passing exercise should prompt the learner to move on."""

    INTERACTIVE = "interactive"
    NON_INTERACTIVE = "noninteractive"


class ExerciseFailed(Exception):
    """An exercise failed to compile, run or pass its tests."""

    def __init__(self, exercise: Exercise) -> None:
        super().__init__(f"{exercise} failed")
        self.exercise = exercise


class VerificationFailed(Exception):
    """Verification stopped at an exercise that is failing or still pending."""

    def __init__(self, exercise: Exercise) -> None:
        super().__init__(f"verification stopped at {exercise}")
        self.exercise = exercise


def _console() -> Console:
    return Console(highlight=False, soft_wrap=True, emoji=False)


@contextlib.contextmanager
def _spinner(message: str) -> Iterator[Status]:
    with _console().status(message) as status:
        yield status


def _show_progress(position: int, total: int, percentage: float) -> None:
    filled = min(_BAR_WIDTH, position * _BAR_WIDTH // total) if total else 0
    if filled >= _BAR_WIDTH:
        done, head, rest = "#" * _BAR_WIDTH, "", ""
    else:
        done, head, rest = "#" * filled, ">", "-" * (_BAR_WIDTH - filled - 1)
    line = Text.assemble(
        "Progress: [",
        (done + head, "green"),
        (rest, "red"),
        f"] {position}/{total} ({percentage:.1f} %)",
    )
    _console().print(line)


def verify(
    exercises: Iterable[Exercise],
    progress: tuple[int, int],
    verbose: bool = False,
    success_hints: bool = False,
) -> None:
    """Check each exercise in turn; raise VerificationFailed at the first one not passing."""
    num_done, total = progress
    percentage = num_done / total * 100.0 if total else 0.0
    position = num_done
    _show_progress(position, total, percentage)

    for exercise in exercises:
        try:
            if exercise.mode in (Mode.TEST, Mode.BUILD_SCRIPT):
                passed = _compile_and_test(
                    exercise, RunMode.INTERACTIVE, verbose, success_hints
                )
            elif exercise.mode is Mode.COMPILE:
                passed = _compile_and_run_interactively(exercise, success_hints)
            else:
                passed = _compile_only(exercise, success_hints)
        except ExerciseFailed as exc:
            raise VerificationFailed(exercise) from exc
        if not passed:
            raise VerificationFailed(exercise)
        if total:
            percentage += 100.0 / total
        position += 1
        _show_progress(position, total, percentage)


def test(exercise: Exercise, verbose: bool = False) -> None:
    """Compile and run the exercise's test harness; raise ExerciseFailed on failure."""
    _compile_and_test(exercise, RunMode.NON_INTERACTIVE, verbose, False)


def _compile(exercise: Exercise) -> CompiledExercise:
    try:
        return exercise.compile()
    except CompileError as exc:
        warn(f"Compiling of {exercise} failed! Please try again. Here's the output:")
        print(exc.output.stderr)
        raise ExerciseFailed(exercise) from exc


def _compile_only(exercise: Exercise, success_hints: bool) -> bool:
    with _spinner(f"Compiling {exercise}..."):
        compiled = _compile(exercise)
    compiled.close()
    return prompt_for_completion(exercise, None, success_hints)


def _compile_and_run_interactively(exercise: Exercise, success_hints: bool) -> bool:
    with _spinner(f"Compiling {exercise}...") as status:
        with _compile(exercise) as compiled:
            status.update(f"Running {exercise}...")
            try:
                output = compiled.run()
            except RunError as exc:
                failure = exc
            else:
                failure = None

    if failure is not None:
        warn(f"Ran {exercise} with errors")
        print(failure.output.stdout)
        print(failure.output.stderr)
        raise ExerciseFailed(exercise) from failure

    return prompt_for_completion(exercise, output.stdout, success_hints)


def _compile_and_test(
    exercise: Exercise, run_mode: RunMode, verbose: bool, success_hints: bool
) -> bool:
    with _spinner(f"Testing {exercise}..."):
        with _compile(exercise) as compiled:
            try:
                output = compiled.run()
            except RunError as exc:
                failure = exc
            else:
                failure = None

    if failure is not None:
        warn(f"Testing of {exercise} failed! Please try again. Here's the output:")
        print(failure.output.stdout)
        raise ExerciseFailed(exercise) from failure

    if verbose:
        print(output.stdout)
    if run_mode is RunMode.INTERACTIVE:
        return prompt_for_completion(exercise, None, success_hints)
    return True


def prompt_for_completion(
    exercise: Exercise, prompt_output: str | None, success_hints: bool
) -> bool:
    """Return True if the exercise is done; otherwise congratulate and show the marker."""
    state = exercise.state()
    if state.is_done():
        return True

    if exercise.mode is Mode.COMPILE:
        success(f"Successfully ran {exercise}!")
    elif exercise.mode is Mode.TEST:
        success(f"Successfully tested {exercise}!")
    else:
        success(f"Successfully compiled {exercise}!")

    no_emoji = "NO_EMOJI" in os.environ
    clippy_message = (
        "The code is compiling, and Clippy is happy!"
        if no_emoji
        else "The code is compiling, and 📎 Clippy 📎 is happy!"
    )
    success_message = {
        Mode.COMPILE: "The code is compiling!",
        Mode.TEST: "The code is compiling, and the tests pass!",
        Mode.CLIPPY: clippy_message,
        Mode.BUILD_SCRIPT: "Build script works!",
    }[exercise.mode]

    console = _console()
    console.print()
    if no_emoji:
        console.print(f"~*~ {success_message} ~*~", markup=False)
    else:
        console.print(f"🎉 🎉  {success_message} 🎉 🎉", markup=False)
    console.print()

    separator = Text(_SEPARATOR, style="bold")
    if prompt_output is not None:
        console.print("Output:", markup=False)
        console.print(separator)
        console.print(prompt_output, markup=False)
        console.print(separator)
        console.print()
    if success_hints:
        console.print("Hints:", markup=False)
        console.print(separator)
        console.print(exercise.hint, markup=False)
        console.print(separator)
        console.print()

    console.print("You can keep working on this exercise,", markup=False)
    console.print(
        Text.assemble(
            "or jump into the next one by removing the ",
            ("`I AM NOT DONE`", "bold"),
            " comment:",
        )
    )
    console.print()
    for context_line in state.context:
        console.print(
            Text.assemble(
                (f"{context_line.number:>2}", "bold blue"),
                " ",
                ("|", "blue"),
                "  ",
                (context_line.line, "bold" if context_line.important else ""),
            )
        )

    return False