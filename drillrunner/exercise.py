"""Exercise descriptions, compilation, running and completion state."""

from __future__ import annotations

import contextlib
import enum
import os
import re
import subprocess
import threading
import tomllib
from dataclasses import dataclass
from pathlib import Path

RUSTC_COLOR_ARGS = ("--color", "always")
RUSTC_EDITION_ARGS = ("--edition", "2021")
I_AM_DONE_REGEX = re.compile(r"^\s*///?\s*I\s+AM\s+NOT\s+DONE", re.MULTILINE)
CONTEXT = 2
CLIPPY_CARGO_TOML_PATH = "./exercises/clippy/Cargo.toml"
BUILD_SCRIPT_CARGO_TOML_PATH = "./exercises/tests/Cargo.toml"


def temp_file() -> str:
    """Return a temporary binary name unique to this process and thread."""
    thread_id = "".join(c for c in f"ThreadId{threading.get_ident()}" if c.isalnum())
    return f"./temp_{os.getpid()}_{thread_id}"


def _clean() -> None:
    with contextlib.suppress(OSError):
        os.remove(temp_file())


def _lines(text: str) -> list[str]:
    parts = text.split("\n")
    if parts[-1] == "":
        parts.pop()
    return [part[:-1] if part.endswith("\r") else part for part in parts]


def _cargo_toml(name: str) -> str:
    return (
        "[package]\n"
        f'name = "{name}"\n'
        'version = "0.0.1"\n'
        'edition = "2021"\n'
        "[[bin]]\n"
        f'name = "{name}"\n'
        f'path = "{name}.rs"'
    )


def _write_cargo_toml(path: str, name: str) -> None:
    message = (
        "Failed to write Clippy Cargo.toml file."
        if "NO_EMOJI" in os.environ
        else "Failed to write 📎 Clippy 📎 Cargo.toml file."
    )
    try:
        Path(path).write_text(_cargo_toml(name), encoding="utf-8")
    except OSError as exc:
        raise OSError(message) from exc


def _execute(args: list[str]) -> subprocess.CompletedProcess:
    return subprocess.run(args, capture_output=True, check=False)


class Mode(enum.Enum):
    """How an exercise is checked."""

    COMPILE = "compile"
    TEST = "test"
    CLIPPY = "clippy"
    BUILD_SCRIPT = "buildscript"


@dataclass(frozen=True)
class ContextLine:
    """A source line shown around the pending marker."""

    line: str
    number: int
    important: bool


@dataclass(frozen=True)
class State:
    """Completion state: done when there is no pending context."""

    context: tuple[ContextLine, ...] = ()

    def is_done(self) -> bool:
        return not self.context


@dataclass(frozen=True)
class ExerciseOutput:
    """Captured standard output and error of a finished process."""

    stdout: str
    stderr: str

    @classmethod
    def from_process(cls, result: subprocess.CompletedProcess) -> ExerciseOutput:
        return cls(
            stdout=(result.stdout or b"").decode("utf-8", errors="replace"),
            stderr=(result.stderr or b"").decode("utf-8", errors="replace"),
        )


class CompileError(Exception):
    """Compiling an exercise failed."""

    def __init__(self, output: ExerciseOutput) -> None:
        super().__init__("compilation failed")
        self.output = output


class RunError(Exception):
    """Running a compiled exercise failed."""

    def __init__(self, output: ExerciseOutput) -> None:
        super().__init__("run failed")
        self.output = output


@dataclass
class Exercise:
    """One exercise as listed in info.toml."""

    name: str
    path: Path
    mode: Mode
    hint: str

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        self.mode = Mode(self.mode)

    def __str__(self) -> str:
        return str(self.path)

    def compile(self) -> CompiledExercise:
        """Build the exercise; raise CompileError with the output on failure."""
        binary = temp_file()
        source = str(self.path)
        if self.mode is Mode.COMPILE:
            result = _execute(
                ["rustc", source, "-o", binary, *RUSTC_COLOR_ARGS, *RUSTC_EDITION_ARGS]
            )
        elif self.mode is Mode.TEST:
            result = _execute(
                ["rustc", "--test", source, "-o", binary,
                 *RUSTC_COLOR_ARGS, *RUSTC_EDITION_ARGS]
            )
        elif self.mode is Mode.CLIPPY:
            _write_cargo_toml(CLIPPY_CARGO_TOML_PATH, self.name)
            # The binary is built too, so that the exercise can also be run.
            _execute(["rustc", source, "-o", binary, *RUSTC_COLOR_ARGS, *RUSTC_EDITION_ARGS])
            _execute(["cargo", "clean", "--manifest-path", CLIPPY_CARGO_TOML_PATH,
                      *RUSTC_COLOR_ARGS])
            result = _execute(
                ["cargo", "clippy", "--manifest-path", CLIPPY_CARGO_TOML_PATH,
                 *RUSTC_COLOR_ARGS, "--", "-D", "warnings", "-D", "clippy::float_cmp"]
            )
        else:
            _write_cargo_toml(BUILD_SCRIPT_CARGO_TOML_PATH, self.name)
            result = _execute(["cargo", "test", "--manifest-path", BUILD_SCRIPT_CARGO_TOML_PATH])

        if result.returncode == 0:
            return CompiledExercise(self)
        _clean()
        raise CompileError(ExerciseOutput.from_process(result))

    def _run(self) -> ExerciseOutput:
        if self.mode is Mode.BUILD_SCRIPT:
            return ExerciseOutput(stdout="", stderr="")
        arg = "--show-output" if self.mode is Mode.TEST else ""
        result = _execute([temp_file(), arg])
        output = ExerciseOutput.from_process(result)
        if result.returncode != 0:
            raise RunError(output)
        return output

    def state(self) -> State:
        """Report whether the pending marker is still present, with context."""
        source = self.path.read_text(encoding="utf-8")
        if not I_AM_DONE_REGEX.search(source):
            return State()
        lines = _lines(source)
        matched = next(
            (i for i, line in enumerate(lines) if I_AM_DONE_REGEX.search(line)), None
        )
        if matched is None:
            raise RuntimeError("pending marker found but no line holds it")
        low = max(matched - CONTEXT, 0)
        high = matched + CONTEXT
        return State(
            tuple(
                ContextLine(line=line, number=i + 1, important=i == matched)
                for i, line in enumerate(lines)
                if low <= i <= high
            )
        )

    def looks_done(self) -> bool:
        """True when the pending marker has been removed."""
        return self.state().is_done()


class CompiledExercise:
    """A successfully built exercise; closing it removes the binary."""

    def __init__(self, exercise: Exercise) -> None:
        self.exercise = exercise

    def run(self) -> ExerciseOutput:
        """Run the built binary; raise RunError with the output on failure."""
        return self.exercise._run()

    def close(self) -> None:
        _clean()

    def __enter__(self) -> CompiledExercise:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def load_exercises(path: str | os.PathLike = "info.toml") -> list[Exercise]:
    """Read the exercise list from an info.toml file."""
    with open(path, "rb") as handle:
        data = tomllib.load(handle)
    return [
        Exercise(name=entry["name"], path=Path(entry["path"]),
                 mode=Mode(entry["mode"]), hint=entry["hint"])
        for entry in data["exercises"]
    ]