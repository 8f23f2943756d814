# engine.py
from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Callable, List, Optional

from .model import LoopConfig
from .runner import IterationResult, run_iteration
from .ui.console import Console, get_console
from .watcher import wait_for_change

# RUNNING: steps 1-5 (run_iteration)
# WAITING: step 6 (wait_for_change), unbounded
# WAITING -> RUNNING replaces the process image in "exec" mode.


def relaunch_argv() -> List[str]:
    """Command line for a fresh image of this same invocation."""
    return [sys.executable, "-m", "devloop", *sys.argv[1:]]


def relaunch() -> None:
    """Replace the current process with a fresh devloop. Does not return."""
    sys.stdout.flush()
    sys.stderr.flush()
    argv = relaunch_argv()
    os.execv(argv[0], argv)


def run_once(
    config: LoopConfig,
    root: str | Path = ".",
    console: Console | None = None,
) -> IterationResult:
    """Steps 1-5 only."""
    return run_iteration(config, root, console)


def run_forever(
    config: LoopConfig,
    root: str | Path = ".",
    console: Console | None = None,
    *,
    restart: Optional[str] = None,
    wait: Callable[[List[str], Path], Optional[str]] = wait_for_change,
    replace: Callable[[], None] = relaunch,
) -> None:
    """
    The watch-rebuild loop. Never returns on its own: in "exec" mode the
    process is replaced after the first change, in "loop" mode it iterates
    until interrupted.
    """
    console = console or get_console()
    root_p = Path(root).resolve()
    mode = restart or config.restart

    while True:
        run_iteration(config, root_p, console)

        changed = wait(config.watched_paths, root_p)
        console.print_change(str(changed))

        if mode == "exec":
            replace()
            return
