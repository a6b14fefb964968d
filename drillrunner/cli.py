"""Command-line entry point: parse arguments and dispatch to the subcommands."""

from __future__ import annotations

import argparse
import math
import os
import subprocess
import sys
from collections.abc import Sequence
from pathlib import Path

from drillrunner.exercise import Exercise, load_exercises
from drillrunner.project import RustAnalyzerProject
from drillrunner.report import cicv_verify
from drillrunner.run import reset, run
from drillrunner.verify import ExerciseFailed, VerificationFailed, verify
from drillrunner.watch import WatchStatus, watch

VERSION = "5.5.1"
INFO_FILE = "info.toml"

WELCOME = r"""       welcome to...
      _      _ _ _
   __| |_ __(_) | |_ __ _   _ _ __  _ __   ___ _ __
  / _` | '__| | | | '__| | | | '_ \| '_ \ / _ \ '__|
 | (_| | |  | | | | |  | |_| | | | | | | |  __/ |
  \__,_|_|  |_|_|_|_|   \__,_|_| |_|_| |_|\___|_|"""

DEFAULT_OUT = """Thanks for installing drillrunner!

Is this your first time? Don't worry, these exercises are made for beginners! We are
going to teach you a lot of things about Rust, but before we can get
started, here's a couple of notes about how it all works:

1. The central concept is that you solve exercises. These exercises usually
   have some sort of syntax error in them, which will cause them to fail
   compilation or testing. Sometimes there's a logic error instead of a syntax
   error. No matter what error, it's your job to find it and fix it!
   You'll know when you fixed it because then, the exercise will compile and
   you will be able to move on to the next exercise.
2. If you run in watch mode (which we recommend), it'll automatically start
   with the first exercise. Don't get confused by an error message popping
   up as soon as you start! This is part of the exercise that you're
   supposed to solve, so open the exercise file in an editor and start your
   detective work!
3. If you're stuck on an exercise, there is a helpful hint you can view by typing
   'hint' (in watch mode), or running `drillrunner hint exercise_name`.
4. If an exercise doesn't make sense to you, feel free to open an issue in the
   project's tracker. Every issue is read, and sometimes other learners help too!
5. If you want to use `rust-analyzer` with exercises, which provides features like
   autocompletion, run the command `drillrunner lsp`.

Got all that? Great! To get started, run `drillrunner watch` in order to get the first
exercise. Make sure to have your editor open!"""

FINISH_LINE = r"""+----------------------------------------------------+
|          You made it to the Fe-nish line!          |
+--------------------------  ------------------------+
                          \\/
     ▒▒          ▒▒▒▒▒▒▒▒      ▒▒▒▒▒▒▒▒          ▒▒
   ▒▒▒▒  ▒▒    ▒▒        ▒▒  ▒▒        ▒▒    ▒▒  ▒▒▒▒
   ▒▒▒▒  ▒▒  ▒▒            ▒▒            ▒▒  ▒▒  ▒▒▒▒
 ░░▒▒▒▒░░▒▒  ▒▒            ▒▒            ▒▒  ▒▒░░▒▒▒▒
   ▓▓▓▓▓▓▓▓  ▓▓      ▓▓██  ▓▓  ▓▓██      ▓▓  ▓▓▓▓▓▓▓▓
     ▒▒▒▒    ▒▒      ████  ▒▒  ████      ▒▒░░  ▒▒▒▒
       ▒▒  ▒▒▒▒▒▒        ▒▒▒▒▒▒        ▒▒▒▒▒▒  ▒▒
         ▒▒▒▒▒▒▒▒▒▒▓▓▓▓▓▓▒▒▒▒▒▒▒▒▓▓▒▒▓▓▒▒▒▒▒▒▒▒
           ▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒
             ▒▒▒▒▒▒▒▒▒▒██▒▒▒▒▒▒██▒▒▒▒▒▒▒▒▒▒
           ▒▒  ▒▒▒▒▒▒▒▒▒▒██████▒▒▒▒▒▒▒▒▒▒  ▒▒
         ▒▒    ▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒    ▒▒
       ▒▒    ▒▒    ▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒    ▒▒    ▒▒
       ▒▒  ▒▒    ▒▒                  ▒▒    ▒▒  ▒▒
           ▒▒  ▒▒                      ▒▒  ▒▒

We hope you enjoyed learning about the various aspects of Rust!
If you noticed any issues, please don't hesitate to report them.
You can also contribute your own exercises to help the greater community!"""


class _Parser(argparse.ArgumentParser):
    """Argument parser that exits with status 1 on usage errors."""

    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    """Build the parser for the global options and all subcommands."""
    parser = _Parser(
        prog="drillrunner",
        description="A collection of small exercises to get you used to "
        "writing and reading Rust code",
    )
    parser.add_argument("--nocapture", action="store_true",
                        help="show outputs from the test exercises")
    parser.add_argument("-v", "--version", action="store_true",
                        help="show the executable version")
    commands = parser.add_subparsers(dest="command")

    commands.add_parser("verify", help="verifies all exercises according to the recommended order")

    watch_parser = commands.add_parser("watch", help="reruns `verify` when files were edited")
    watch_parser.add_argument("--success-hints", action="store_true",
                              help="show hints on success")

    for name, text in (
        ("run", "runs/tests a single exercise"),
        ("reset", 'resets a single exercise using "git stash -- <filename>"'),
        ("hint", "returns a hint for the given exercise"),
    ):
        sub = commands.add_parser(name, help=text)
        sub.add_argument("name", help="the name of the exercise")

    list_parser = commands.add_parser("list", help="lists the available exercises")
    list_parser.add_argument("-p", "--paths", action="store_true",
                             help="show only the paths of the exercises")
    list_parser.add_argument("-n", "--names", action="store_true",
                             help="show only the names of the exercises")
    list_parser.add_argument("-f", "--filter", default=None,
                             help="comma separated patterns to match exercise names")
    list_parser.add_argument("-u", "--unsolved", action="store_true",
                             help="display only exercises not yet solved")
    list_parser.add_argument("-s", "--solved", action="store_true",
                             help="display only exercises that have been solved")

    commands.add_parser("lsp", help="enable rust-analyzer for exercises")
    commands.add_parser("cicvverify", help="grade every exercise and write a JSON report")
    return parser


def find_exercise(name: str, exercises: Sequence[Exercise]) -> Exercise:
    """Find an exercise by name, or the first pending one for "next".

    Raises LookupError with a printable message when nothing matches.
    """
    if name == "next":
        found = next((e for e in exercises if not e.looks_done()), None)
        if found is None:
            raise LookupError(
                "🎉 Congratulations! You have done all the exercises!\n"
                "🔚 There are no more exercises to do next!"
            )
        return found
    found = next((e for e in exercises if e.name == name), None)
    if found is None:
        raise LookupError(f"No exercise found for '{name}'!")
    return found


def list_exercises(
    exercises: Sequence[Exercise],
    paths: bool = False,
    names: bool = False,
    filter: str | None = None,
    unsolved: bool = False,
    solved: bool = False,
) -> list[str]:
    """Return the lines of the exercise listing, ending with a progress line."""
    lines: list[str] = []
    if not paths and not names:
        lines.append(f"{'Name':<17}\t{'Path':<46}\t{'Status':<7}")
    patterns = [p for p in (filter or "").lower().split(",") if p.strip()]
    done_count = 0
    for exercise in exercises:
        fname = str(exercise.path)
        matches = any(p in exercise.name or p in fname for p in patterns)
        done = exercise.looks_done()
        if done:
            done_count += 1
        status = "Done" if done else "Pending"
        wanted = (done and solved) or (not done and unsolved) or (not solved and not unsolved)
        if wanted and (matches or filter is None):
            if paths:
                lines.append(fname)
            elif names:
                lines.append(exercise.name)
            else:
                lines.append(f"{exercise.name:<17}\t{fname:<46}\t{status:<7}")
    total = len(exercises)
    percentage = f"{done_count / total * 100.0:.1f}" if total else "NaN"
    if total and math.isnan(done_count / total):
        percentage = "NaN"
    lines.append(
        f"Progress: You completed {done_count} / {total} exercises ({percentage} %)."
    )
    return lines


def rustc_exists() -> bool:
    """True if `rustc --version` can be run successfully."""
    try:
        result = subprocess.run(
            ["rustc", "--version"], stdout=subprocess.DEVNULL, check=False
        )
    except OSError:
        return False
    return result.returncode == 0


def _write_lines(lines: list[str]) -> int:
    try:
        for line in lines:
            sys.stdout.write(line + "\n")
        sys.stdout.flush()
    except BrokenPipeError:
        return 0
    except OSError:
        return 1
    return 0


def _lsp() -> int:
    project = RustAnalyzerProject()
    try:
        project.get_sysroot_src()
    except OSError:
        print("Couldn't find toolchain path, do you have `rustc` installed?", file=sys.stderr)
        return 1
    project.exercises_to_json()
    if not project.crates:
        print("Failed find any exercises, make sure you're in the exercises folder")
        return 0
    try:
        project.write_to_disk()
    except OSError:
        print("Failed to write rust-project.json to disk for rust-analyzer")
        return 0
    print("Successfully generated rust-project.json")
    print("rust-analyzer will now parse exercises, restart your language server or editor")
    return 0


def _watch(exercises: list[Exercise], verbose: bool, success_hints: bool) -> int:
    try:
        status = watch(exercises, verbose, success_hints)
    except OSError as exc:
        print(f"Error: Could not watch your progress. Error message was {exc!r}.")
        print("Most likely you've run out of disk space or your 'inotify limit' has been reached.")
        return 1
    if status is WatchStatus.FINISHED:
        emoji = "★" if "NO_EMOJI" in os.environ else "🎉"
        print(f"{emoji} All exercises completed! {emoji}")
        print(f"\n{FINISH_LINE}\n")
    else:
        print("We hope you're enjoying learning about Rust!")
        print("If you want to continue working on the exercises at a later point, "
              "you can simply run `drillrunner watch` again")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line; return the process exit status."""
    try:
        args = build_parser().parse_args(argv)
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 1

    if args.version:
        print(f"v{VERSION}")
        return 0

    if args.command is None:
        print(f"\n{WELCOME}\n")

    if not Path(INFO_FILE).exists():
        print(f"{sys.argv[0]} must be run from the exercises directory")
        print("Try `cd` into the directory holding info.toml first!")
        return 1

    if not rustc_exists():
        print("We cannot find `rustc`.")
        print("Try running `rustc --version` to diagnose your problem.")
        print("For instructions on how to install Rust, check the README.")
        return 1

    exercises = load_exercises(INFO_FILE)
    verbose = args.nocapture

    if args.command is None:
        print(f"{DEFAULT_OUT}\n")
        return 0

    try:
        if args.command == "list":
            return _write_lines(list_exercises(
                exercises, args.paths, args.names, args.filter, args.unsolved, args.solved
            ))
        if args.command == "run":
            run(find_exercise(args.name, exercises), verbose)
        elif args.command == "reset":
            reset(find_exercise(args.name, exercises))
        elif args.command == "hint":
            print(find_exercise(args.name, exercises).hint)
        elif args.command == "verify":
            verify(exercises, (0, len(exercises)), verbose, False)
        elif args.command == "cicvverify":
            cicv_verify(exercises, verbose)
        elif args.command == "lsp":
            return _lsp()
        elif args.command == "watch":
            return _watch(exercises, verbose, args.success_hints)
    except LookupError as exc:
        print(exc)
        return 1
    except (ExerciseFailed, VerificationFailed):
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())