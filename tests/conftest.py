"""Shared test fixtures for devloop."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from devloop.dsl import gated, loop, sh
from devloop.model import LoopConfig, Step
from devloop.ui.console import Console, set_console


def py(code: str) -> list[str]:
    """argv running a python snippet with the current interpreter."""
    return [sys.executable, "-c", code]


def appender(log: Path, word: str, exit_code: int = 0) -> list[str]:
    """argv that appends `word` to `log`, then exits with `exit_code`."""
    return py(
        f"import sys; open({str(log)!r}, 'a').write({word + chr(10)!r}); sys.exit({exit_code})"
    )


class RecordingRunner:
    """Stand-in for runner.run_step: records calls, returns scripted codes."""

    def __init__(self, codes: dict[str, int] | None = None):
        self.codes = codes or {}
        self.calls: list[str] = []

    def __call__(self, step: Step, root: Path) -> int:
        self.calls.append(step.name)
        return self.codes.get(step.name, 0)


@pytest.fixture(autouse=True)
def console() -> Console:
    """Fresh global console per test."""
    c = Console(debug=False)
    set_console(c)
    return c


@pytest.fixture
def config(tmp_path: Path) -> LoopConfig:
    """fmt / lint / build loop watching tmp_path/src, without screen clearing."""
    (tmp_path / "src").mkdir()
    return loop(
        sh("fmt", ["fmt"]),
        sh("lint", ["lint"]),
        gated("build", ["build"]),
        watch=["src"],
        clear_screen=False,
    )
