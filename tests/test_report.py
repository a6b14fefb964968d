import json
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from drillrunner.exercise import Exercise, Mode
from drillrunner.report import (
    ExerciseCheckList,
    ExerciseResult,
    ExerciseStatistics,
    cicv_verify,
)


def _fake_run(args, **kwargs):
    failing = args[0] == "rustc" and any("broken" in str(a) for a in args)
    code = 1 if failing else 0
    return subprocess.CompletedProcess(
        args, code, stdout=b"ran\n", stderr=b"error: nope\n" if failing else b""
    )


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "exercises").mkdir()
    for name in ("good", "broken", "tested"):
        (tmp_path / "exercises" / f"{name}.rs").write_text("fn main() {}\n")
    return tmp_path


def _exercises():
    return [
        Exercise(name="good", path=Path("exercises/good.rs"), mode=Mode.COMPILE, hint=""),
        Exercise(name="broken", path=Path("exercises/broken.rs"), mode=Mode.COMPILE, hint=""),
        Exercise(name="tested", path=Path("exercises/tested.rs"), mode=Mode.TEST, hint=""),
    ]


def test_empty_checklist_json_layout():
    data = json.loads(ExerciseCheckList().to_json())
    assert list(data) == ["exercises", "user_name", "statistics"]
    assert data["user_name"] is None
    assert data["statistics"] == {
        "total_exercations": 0,
        "total_succeeds": 0,
        "total_failures": 0,
        "total_time": 0,
    }


def test_checklist_json_is_indented():
    text = ExerciseCheckList().to_json()
    assert '\n  "user_name": null' in text


def test_checklist_json_round_trip():
    checklist = ExerciseCheckList(
        exercises=[ExerciseResult("a", True), ExerciseResult("b", False)],
        user_name="learner",
        statistics=ExerciseStatistics(2, 1, 1, 5),
    )
    data = json.loads(checklist.to_json())
    assert data["exercises"] == [
        {"name": "a", "result": True},
        {"name": "b", "result": False},
    ]
    assert data["user_name"] == "learner"
    assert data["statistics"]["total_time"] == 5


@patch("subprocess.run", side_effect=_fake_run)
def test_cicvverify_grades_and_writes_report(mock_run, workspace):
    out = workspace / "check_result.json"
    checklist = cicv_verify(_exercises(), True, out)
    assert [(r.name, r.result) for r in checklist.exercises] == [
        ("good", True),
        ("broken", False),
        ("tested", True),
    ]
    assert checklist.statistics.total_exercations == 3
    assert checklist.statistics.total_succeeds == 2
    assert checklist.statistics.total_failures == 1
    assert checklist.statistics.total_time >= 0
    assert out.read_text(encoding="utf-8") == checklist.to_json()


@patch("subprocess.run", side_effect=_fake_run)
def test_cicvverify_prints_progress(mock_run, workspace, capsys):
    cicv_verify(_exercises()[:2], True, workspace / "r.json")
    text = capsys.readouterr().out
    assert "good执行成功" in text
    assert "broken执行失败" in text
    assert "总的题目数: 2" in text
    assert "试卷批改完成" in text


@patch("subprocess.run", side_effect=_fake_run)
def test_cicvverify_missing_directory_raises(mock_run, workspace):
    with pytest.raises(FileNotFoundError):
        cicv_verify(_exercises()[:1], True, workspace / "missing" / "r.json")