import pytest

from drillrunner.ui import success, warn


@pytest.fixture
def plain(monkeypatch):
    monkeypatch.delenv("FORCE_COLOR", raising=False)
    monkeypatch.setenv("NO_COLOR", "1")


def test_warn_without_emoji(plain, monkeypatch, capsys):
    monkeypatch.setenv("NO_EMOJI", "1")
    warn("Ran exercises/intro/intro1.rs with errors")
    assert capsys.readouterr().out == "! Ran exercises/intro/intro1.rs with errors\n"


def test_success_without_emoji(plain, monkeypatch, capsys):
    monkeypatch.setenv("NO_EMOJI", "1")
    success("Successfully ran exercises/intro/intro1.rs")
    assert capsys.readouterr().out == "✓ Successfully ran exercises/intro/intro1.rs\n"


def test_warn_with_emoji(plain, monkeypatch, capsys):
    monkeypatch.delenv("NO_EMOJI", raising=False)
    warn("broken")
    out = capsys.readouterr().out
    assert out.startswith("⚠")
    assert out.endswith(" broken\n")


def test_success_with_emoji(plain, monkeypatch, capsys):
    monkeypatch.delenv("NO_EMOJI", raising=False)
    success("fine")
    assert capsys.readouterr().out == "✅ fine\n"


def test_brackets_are_not_markup(plain, monkeypatch, capsys):
    monkeypatch.setenv("NO_EMOJI", "1")
    warn("[bold]x[/bold]")
    assert "[bold]x[/bold]" in capsys.readouterr().out