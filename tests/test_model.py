"""Unit tests for the loop configuration model and DSL helpers."""

from __future__ import annotations

from dataclasses import FrozenInstanceError

import pytest

from devloop.dsl import cargo_loop, gated, loop, sh
from devloop.model import SEPARATOR, LoopConfig


class TestStep:
    def test_sh_is_best_effort(self):
        step = sh("fmt", ["cargo", "fmt"])
        assert step.gated is False
        assert step.run == ["cargo", "fmt"]

    def test_gated_helper(self):
        step = gated("build", ["cargo", "build"], env={"RUST_BACKTRACE": "1"})
        assert step.gated is True
        assert step.env == {"RUST_BACKTRACE": "1"}

    def test_display_and_tool_for_argv(self):
        step = sh("build", ["cargo", "build", "--release"])
        assert step.display == "cargo build --release"
        assert step.tool == "cargo"

    def test_display_and_tool_for_shell_string(self):
        step = sh("lint", "cargo clippy -- -D warnings")
        assert step.display == "cargo clippy -- -D warnings"
        assert step.tool == "cargo"

    def test_step_is_frozen(self):
        step = sh("fmt", ["cargo", "fmt"])
        with pytest.raises(FrozenInstanceError):
            step.name = "other"  # type: ignore[misc]


class TestLoopConfig:
    def test_defaults(self):
        cfg = loop(sh("a", ["a"]), watch=["src"])
        assert cfg.clear_screen is True
        assert cfg.separator == SEPARATOR
        assert len(cfg.separator) == 80
        assert cfg.restart == "exec"

    def test_requires_steps(self):
        with pytest.raises(ValueError, match="at least one step"):
            LoopConfig(steps=[], watch=["src"])

    def test_requires_watch(self):
        with pytest.raises(ValueError, match="watch at least one path"):
            loop(sh("a", ["a"]))

    def test_rejects_duplicate_step_names(self):
        with pytest.raises(ValueError, match="Duplicate step name"):
            loop(sh("a", ["a"]), sh("a", ["b"]), watch=["src"])

    @pytest.mark.parametrize("run", [[], [""], ["  "], "", "   "])
    def test_rejects_empty_command(self, run):
        with pytest.raises(ValueError, match="empty command"):
            loop(sh("fmt", run), sh("lint", ["true"]), watch=["src"])

    def test_rejects_gated_first_step(self):
        with pytest.raises(ValueError, match="cannot be gated"):
            loop(gated("build", ["cargo", "build"]), watch=["src"])

    def test_rejects_unknown_restart_mode(self):
        with pytest.raises(ValueError, match="restart"):
            loop(sh("a", ["a"]), watch=["src"], restart="fork")

    def test_watched_paths_include_source_once(self):
        cfg = loop(sh("a", ["a"]), watch=["src", "Cargo.toml", "src"])
        cfg.source = "/work/devloop_config.py"
        assert cfg.watched_paths == ["src", "Cargo.toml", "/work/devloop_config.py"]


class TestCargoLoop:
    def test_default_pipeline(self):
        cfg = cargo_loop()
        assert [s.name for s in cfg.steps] == ["fmt", "clippy", "build"]
        assert [s.gated for s in cfg.steps] == [False, False, True]
        assert cfg.steps[2].run == ["cargo", "build"]
        assert cfg.watch == ["src", "Cargo.toml"]

    def test_default_sets_no_environment(self):
        cfg = cargo_loop()
        assert all(s.env == {} for s in cfg.steps)
