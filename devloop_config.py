# devloop_config.py
# Loop for working on devloop itself: format, lint, then tests when lint passes
from __future__ import annotations
from devloop import loop, sh, gated


def workflow():
    return loop(
        # Best-effort: rewrite formatting, never blocks the loop
        sh("format", ["ruff", "format", "src", "tests"]),

        # Lint result gates the test run
        sh("lint", ["ruff", "check", "src", "tests"]),
        gated("test", ["pytest", "-q"]),

        watch=["src", "tests", "pyproject.toml"],
    )
