import subprocess

import pytest

from drillrunner.exercise import Exercise, Mode
from drillrunner.run import reset, run
from drillrunner.verify import ExerciseFailed

PENDING = "// I AM NOT DONE\n\n#[test]\nfn it_works() {}\n"
FINISHED = "fn main() {\n}\n"


class FakeToolchain:
    def __init__(self, compile_rc=0, run_rc=0, run_stdout=b"", compile_stderr=b""):
        self.compile_rc = compile_rc
        self.run_rc = run_rc
        self.run_stdout = run_stdout
        self.compile_stderr = compile_stderr
        self.calls = []

    def __call__(self, args, **kwargs):
        self.calls.append(list(args))
        if args[0] in ("rustc", "cargo"):
            return subprocess.CompletedProcess(args, self.compile_rc, b"", self.compile_stderr)
        return subprocess.CompletedProcess(args, self.run_rc, self.run_stdout, b"run stderr")


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("NO_EMOJI", raising=False)
    return tmp_path


def make_exercise(directory, name, text, mode=Mode.COMPILE):
    path = directory / f"{name}.rs"
    path.write_text(text, encoding="utf-8")
    return Exercise(name=name, path=path, mode=mode, hint="")


def test_run_compile_success_prints_output(workdir, monkeypatch, capsys):
    monkeypatch.setattr(subprocess, "run", FakeToolchain(run_stdout=b"Hello world!"))
    exercise = make_exercise(workdir, "compSuccess", FINISHED)
    run(exercise, False)
    out = capsys.readouterr().out
    assert "Hello world!" in out
    assert f"Successfully ran {exercise}" in out


def test_run_compile_failure(workdir, monkeypatch, capsys):
    monkeypatch.setattr(
        subprocess, "run", FakeToolchain(compile_rc=1, compile_stderr=b"expected pattern")
    )
    exercise = make_exercise(workdir, "compFailure", "fn main() {\n    let\n}\n")
    with pytest.raises(ExerciseFailed) as info:
        run(exercise, False)
    assert info.value.exercise is exercise
    out = capsys.readouterr().out
    assert f"Compilation of {exercise} failed!" in out
    assert "expected pattern" in out


def test_run_binary_failure(workdir, monkeypatch, capsys):
    monkeypatch.setattr(subprocess, "run", FakeToolchain(run_rc=101, run_stdout=b"partial"))
    exercise = make_exercise(workdir, "crash", FINISHED)
    with pytest.raises(ExerciseFailed):
        run(exercise, False)
    out = capsys.readouterr().out
    assert "partial" in out
    assert "run stderr" in out
    assert f"Ran {exercise} with errors" in out


def test_run_pending_compile_exercise_does_not_prompt(workdir, monkeypatch, capsys):
    monkeypatch.setattr(subprocess, "run", FakeToolchain())
    exercise = make_exercise(workdir, "pending_exercise", "// I AM NOT DONE\nfn main() {}\n")
    run(exercise, False)
    assert "I AM NOT DONE" not in capsys.readouterr().out


def test_run_pending_test_exercise_does_not_prompt(workdir, monkeypatch, capsys):
    monkeypatch.setattr(subprocess, "run", FakeToolchain())
    exercise = make_exercise(workdir, "pending_test_exercise", PENDING, mode=Mode.TEST)
    run(exercise, False)
    assert "I AM NOT DONE" not in capsys.readouterr().out


def test_run_test_with_and_without_output(workdir, monkeypatch, capsys):
    monkeypatch.setattr(
        subprocess, "run", FakeToolchain(run_stdout=b"THIS TEST TOO SHALL PASS")
    )
    exercise = make_exercise(workdir, "testSuccess", FINISHED, mode=Mode.TEST)
    run(exercise, True)
    assert "THIS TEST TOO SHALL PASS" in capsys.readouterr().out
    run(exercise, False)
    assert "THIS TEST TOO SHALL PASS" not in capsys.readouterr().out


def test_run_test_failure(workdir, monkeypatch):
    monkeypatch.setattr(subprocess, "run", FakeToolchain(run_rc=101))
    exercise = make_exercise(workdir, "testNotPassed", FINISHED, mode=Mode.TEST)
    with pytest.raises(ExerciseFailed):
        run(exercise, False)


def test_run_build_script_skips_binary(workdir, monkeypatch):
    (workdir / "exercises" / "tests").mkdir(parents=True)
    toolchain = FakeToolchain()
    monkeypatch.setattr(subprocess, "run", toolchain)
    exercise = make_exercise(workdir, "build1", FINISHED, mode=Mode.BUILD_SCRIPT)
    run(exercise, False)
    assert [call[:2] for call in toolchain.calls] == [["cargo", "test"]]
    manifest = (workdir / "exercises" / "tests" / "Cargo.toml").read_text(encoding="utf-8")
    assert 'name = "build1"' in manifest
    assert 'path = "build1.rs"' in manifest


def test_reset_stashes_exercise_path(workdir, monkeypatch):
    spawned = []

    def fake_popen(args, **kwargs):
        spawned.append(list(args))
        return None

    monkeypatch.setattr(subprocess, "Popen", fake_popen)
    exercise = make_exercise(workdir, "intro1", FINISHED)
    reset(exercise)
    assert spawned == [["git", "stash", "--", str(exercise.path)]]


def test_reset_failure_raises(workdir, monkeypatch):
    def failing_popen(args, **kwargs):
        raise FileNotFoundError("git")

    monkeypatch.setattr(subprocess, "Popen", failing_popen)
    exercise = make_exercise(workdir, "intro1", FINISHED)
    with pytest.raises(ExerciseFailed) as info:
        reset(exercise)
    assert info.value.exercise is exercise