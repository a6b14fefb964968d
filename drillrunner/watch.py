"""Watch mode: re-verify exercises whenever their files change."""

from __future__ import annotations

import enum
import os
import queue
import subprocess
import sys
import threading
import time
from collections.abc import Iterable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from drillrunner.exercise import Exercise
from drillrunner.verify import VerificationFailed, verify

_POLL_SECONDS = 0.2
_DEBOUNCE_SECONDS = 1.0

_HELP = """Commands available to you in watch mode:
  hint   - prints the current exercise's hint
  clear  - clears the screen
  quit   - quits watch mode
  !<cmd> - executes a command, like `!rustc --explain E0381`
  help   - displays this help message

Watch mode automatically re-evaluates the current exercise
when you edit a file's contents."""


class WatchStatus(enum.Enum):
    """How watch mode ended."""

    FINISHED = "finished"
    UNFINISHED = "unfinished"


def handle_command(line: str, hint: str | None) -> bool:
    """Carry out one watch-shell command; return True when it asks to quit."""
    command = line.strip()
    if command == "hint":
        if hint is not None:
            print(hint)
    elif command == "clear":
        print("\x1b[2J\x1b[1;1H")
    elif command == "quit":
        print("Bye!")
        return True
    elif command == "help":
        print(_HELP)
    elif command.startswith("!"):
        cmd = command[1:]
        parts = cmd.split()
        if not parts:
            print("no command provided")
        else:
            try:
                subprocess.run(parts, check=False)
            except OSError as exc:
                print(f"failed to execute command `{cmd}`: {exc}")
    else:
        print(f"unknown command: {command}")
    return False


class _Shell:
    """Reads commands from standard input on a background thread."""

    def __init__(self, hint: str) -> None:
        self._lock = threading.Lock()
        self._hint: str | None = hint
        self.should_quit = threading.Event()

    @property
    def hint(self) -> str | None:
        with self._lock:
            return self._hint

    @hint.setter
    def hint(self, value: str | None) -> None:
        with self._lock:
            self._hint = value

    def start(self) -> None:
        print(
            "Welcome to watch mode! You can type 'help' to get an overview "
            "of the commands you can use here."
        )
        threading.Thread(target=self._loop, daemon=True).start()

    def _loop(self) -> None:
        while not self.should_quit.is_set():
            try:
                line = sys.stdin.readline()
            except (OSError, ValueError) as exc:
                print(f"error reading command: {exc}")
                return
            if not line:
                return
            if handle_command(line, self.hint):
                self.should_quit.set()


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, events: queue.Queue[str]) -> None:
        super().__init__()
        self._events = events

    def on_created(self, event: FileSystemEvent) -> None:
        self._push(event)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._push(event)

    def _push(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._events.put(os.fsdecode(event.src_path))


def _clear_screen() -> None:
    print("\x1bc")


def _ends_with(path: Path, suffix: Path) -> bool:
    parts = Path(suffix).parts
    return 0 < len(parts) <= len(path.parts) and path.parts[-len(parts):] == parts


def _recheck(
    changed: str,
    exercises: list[Exercise],
    shell: _Shell,
    verbose: bool,
    success_hints: bool,
) -> bool:
    """Re-verify after a change; return True when everything is done."""
    candidate = Path(changed)
    if candidate.suffix != ".rs" or not candidate.exists():
        return False
    filepath = candidate.resolve()
    touched = next((e for e in exercises if _ends_with(filepath, e.path)), None)
    pending = ([touched] if touched is not None else []) + [
        e for e in exercises if not e.looks_done() and not _ends_with(filepath, e.path)
    ]
    num_done = sum(1 for e in exercises if e.looks_done())
    _clear_screen()
    try:
        verify(pending, (num_done, len(exercises)), verbose, success_hints)
    except VerificationFailed as exc:
        shell.hint = exc.exercise.hint
        return False
    return True


def watch(
    exercises: Iterable[Exercise],
    verbose: bool = False,
    success_hints: bool = False,
) -> WatchStatus:
    """Verify exercises, then keep re-verifying as files under ./exercises change."""
    exercises = list(exercises)
    events: queue.Queue[str] = queue.Queue()
    observer = Observer()
    observer.schedule(_ChangeHandler(events), "./exercises", recursive=True)
    observer.start()
    try:
        _clear_screen()
        try:
            verify(exercises, (0, len(exercises)), verbose, success_hints)
        except VerificationFailed as exc:
            shell = _Shell(exc.exercise.hint)
        else:
            return WatchStatus.FINISHED

        shell.start()
        changed: dict[str, None] = {}
        last_event = 0.0
        while not shell.should_quit.is_set():
            try:
                path = events.get(timeout=_POLL_SECONDS)
            except queue.Empty:
                pass
            else:
                changed[path] = None
                last_event = time.monotonic()
                continue
            if changed and time.monotonic() - last_event >= _DEBOUNCE_SECONDS:
                paths = list(changed)
                changed.clear()
                for path in paths:
                    if _recheck(path, exercises, shell, verbose, success_hints):
                        return WatchStatus.FINISHED
        return WatchStatus.UNFINISHED
    finally:
        observer.stop()
        observer.join()