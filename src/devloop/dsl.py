# src/devloop/dsl.py
from __future__ import annotations

from typing import Dict, List, Optional, Union

from .model import SEPARATOR, LoopConfig, Step


# ---------------------------------------------------------------------
# Step helpers
# ---------------------------------------------------------------------

def sh(
    name: str,
    cmd: Union[List[str], str],
    *,
    cwd: str | None = None,
    env: Optional[Dict[str, str]] = None,
    gated: bool = False,
) -> Step:
    """Create a best-effort step (or a gated one with gated=True)."""
    if isinstance(cmd, (list, tuple)):
        cmd = [str(c) for c in cmd]
    return Step(name=name, run=cmd, cwd=cwd, env=dict(env or {}), gated=gated)


def gated(name: str, cmd: Union[List[str], str], **kwargs) -> Step:
    """Create a step that only runs if the previous step succeeded."""
    return sh(name, cmd, gated=True, **kwargs)


# ---------------------------------------------------------------------
# Loop helper (single-file story)
# ---------------------------------------------------------------------

def loop(
    *steps: Step,
    watch: Optional[List[str]] = None,
    clear_screen: bool = True,
    separator: str = SEPARATOR,
    restart: str = "exec",
) -> LoopConfig:
    """
    Loop definition helper.

    Users can write, in devloop_config.py:
        from devloop import loop, sh, gated

        def workflow():
            return loop(
                sh("fmt", ["ruff", "format", "."]),
                sh("lint", ["ruff", "check", "."]),
                gated("test", ["pytest", "-q"]),
                watch=["src", "pyproject.toml"],
            )

    Or use LOOP directly:
        LOOP = loop(...)
    """
    return LoopConfig(
        steps=list(steps),
        watch=list(watch or []),
        clear_screen=clear_screen,
        separator=separator,
        restart=restart,
    )


def cargo_loop(*, src: str = "src", manifest: str = "Cargo.toml") -> LoopConfig:
    """Default loop: cargo fmt, cargo clippy && cargo build."""
    return loop(
        sh("fmt", ["cargo", "fmt"]),
        sh("clippy", ["cargo", "clippy"]),
        gated("build", ["cargo", "build"]),
        watch=[src, manifest],
    )
