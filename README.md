# drillrunner

A terminal companion for working through a set of small Rust exercises.
It compiles each exercise with `rustc` (or `cargo clippy` and `cargo test`
for some kinds of exercise), runs it, and tells you whether it passes. It
also keeps track of which exercises still carry an `I AM NOT DONE` marker.

## Requirements

- Python 3.11 or later
- A working Rust toolchain: `rustc` on your `PATH`, and `cargo` for clippy
  and build-script exercises
- `git`, for the `reset` command

## Installation

```
pip install .
```

## Usage

Run every command from the exercise directory, the one that holds
`info.toml`. That file lists the exercises in order, each with a `name`,
a `path`, a `mode` (`compile`, `test`, `clippy` or `buildscript`) and a
`hint`. Apart from `--version`, every command stops with exit status 1 if
`info.toml` is missing or `rustc --version` cannot be run.

```
drillrunner                  # welcome text and first steps
drillrunner --version        # print the version
drillrunner watch            # re-verify whenever an exercise file changes
drillrunner verify           # verify all exercises in order
drillrunner run NAME         # compile and run one exercise ("next" picks the first unfinished one)
drillrunner hint NAME        # print the hint for an exercise
drillrunner reset NAME       # run "git stash -- <path>" for an exercise
drillrunner list             # table of exercises with Done / Pending status
drillrunner lsp              # write rust-project.json for rust-analyzer
drillrunner cicvverify       # grade every exercise and write a JSON report
```

Add `--nocapture` before the subcommand to see the output of test
exercises. `run` and `verify` exit with status 1 when an exercise fails,
as does any command given an unknown exercise name or bad arguments.

### Modes

- `compile`: built with `rustc`, then run.
- `test`: built with `rustc --test`, then run with `--show-output`.
- `clippy`: writes `exercises/clippy/Cargo.toml`, builds the binary, then
  runs `cargo clippy` with warnings denied.
- `buildscript`: writes `exercises/tests/Cargo.toml` and runs `cargo test`.

The built binary is a temporary file in the current directory and is
removed after each check.

### Listing

`drillrunner list` accepts:

- `-p`, `--paths`: show only exercise paths
- `-n`, `--names`: show only exercise names
- `-f`, `--filter PATTERNS`: comma-separated substrings matched against
  names and paths
- `-u`, `--unsolved`: only exercises not yet solved
- `-s`, `--solved`: only exercises already solved

The listing ends with a progress line counting the finished exercises.

### Watch mode

`drillrunner watch` verifies exercises in order and stops at the first one
that fails or is still marked `I AM NOT DONE`. Creating or saving any `.rs`
file under `exercises/` re-runs the check, starting with the changed
exercise. While watching, type:

- `hint` to print the hint for the current exercise
- `clear` to clear the screen
- `!<cmd>` to run a command, such as `!rustc --explain E0381`
- `help` to list these commands
- `quit` to leave watch mode

Pass `--success-hints` to show the hint of each exercise once it passes.

### rust-analyzer support

`drillrunner lsp` adds every `.rs` file under `exercises/` as a crate and
writes `rust-project.json`. The standard library path is taken from the
`RUST_SRC_PATH` environment variable, or else from `rustc --print sysroot`.

### Grading report

`drillrunner cicvverify` runs every exercise one after another, printing
progress as it goes, and writes the results, with success and failure
counts and the total time taken in seconds, as JSON to
`.github/result/check_result.json`. The directory must already exist.

### Finishing an exercise

Once an exercise compiles and passes, remove its `// I AM NOT DONE` comment
to move on to the next one.

Set the `NO_EMOJI` environment variable to use plain-text symbols in the
output instead of emoji.

## Using it from Python

The same pieces are available as a library:

- `drillrunner.exercise.load_exercises(path)` reads `info.toml` into
  `Exercise` objects; `Exercise.state()` and `Exercise.looks_done()`
  report the `I AM NOT DONE` marker and the lines around it.
- `drillrunner.run.run(exercise, verbose)` and
  `drillrunner.verify.verify(exercises, progress, verbose, success_hints)`
  raise `ExerciseFailed` and `VerificationFailed` on failure.
- `drillrunner.report.cicv_verify(exercises, verbose, output_path)` returns
  the `ExerciseCheckList` it writes.
- `drillrunner.cli.main(argv)` runs the command line and returns its exit
  status.

## What it does not do

It does not ship any exercises or an `info.toml`; you need an exercise
directory to point it at. It does not install or manage a Rust toolchain.