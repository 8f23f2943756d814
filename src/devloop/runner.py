# runner.py
from __future__ import annotations

import os
import runpy
import subprocess
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .model import LoopConfig, Step
from .ui.console import Console, get_console


# ----------------------------------------------------------------------
# Errors
# ----------------------------------------------------------------------

@dataclass
class DevloopError(Exception):
    """
    Structured loop error with enough context for:
      - clean CLI output
      - debugging without full tracebacks
    """
    kind: str
    message: str
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        lines = [f"{self.kind}: {self.message}"]
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)


class ConfigError(DevloopError):
    pass


class WatchError(DevloopError):
    pass


@dataclass
class StepFailure(Exception):
    step: str
    cmd: str
    exit_code: int

    def __str__(self) -> str:
        return f"step '{self.step}' failed (exit={self.exit_code}): {self.cmd}"


TOOL_HINTS = {
    "cargo": "Install Rust via rustup (https://rustup.rs) or fix PATH.",
    "rustfmt": "Install rustfmt (rustup component add rustfmt).",
    "ruff": "Install ruff (e.g., pip install ruff).",
    "black": "Install black (e.g., pip install black).",
    "pytest": "Install pytest (e.g., pip install pytest).",
    "npm": "Install Node.js (includes npm) or fix PATH.",
    "make": "Install make or fix PATH.",
}

# Exit codes for a tool that could not be launched (shell convention)
EXIT_NOT_EXECUTABLE = 126
EXIT_NOT_FOUND = 127


# ----------------------------------------------------------------------
# Config loading (local file)
# ----------------------------------------------------------------------

DEFAULT_CONFIG_NAME = "devloop_config.py"


def find_config(root: str | Path = ".") -> Optional[Path]:
    """Return root/devloop_config.py if present."""
    candidate = Path(root) / DEFAULT_CONFIG_NAME
    return candidate if candidate.exists() else None


def load_config(path: str | Path) -> LoopConfig:
    """
    Load a loop config from a python file path.

    The file must define either:
      - workflow() -> LoopConfig
      - LOOP = LoopConfig(...)

    The returned config also watches the file itself.
    """
    cfg_path = Path(path).expanduser().resolve()
    if not cfg_path.exists():
        raise ConfigError(
            kind="config_not_found",
            message=f"Config file not found: {cfg_path}",
        )
    if cfg_path.suffix != ".py":
        raise ConfigError(
            kind="config_invalid",
            message=f"Config must be a .py file, got: {cfg_path.name}",
        )

    module_name = f"devloop_config_{cfg_path.stem}"
    globals_dict = runpy.run_path(str(cfg_path), run_name=module_name)

    config = None
    if "workflow" in globals_dict and callable(globals_dict["workflow"]):
        config = globals_dict["workflow"]()
    elif "LOOP" in globals_dict:
        config = globals_dict["LOOP"]

    if not isinstance(config, LoopConfig):
        raise ConfigError(
            kind="config_invalid",
            message="Config must return/define a LoopConfig.",
            details={"file": str(cfg_path), "hint": "Define workflow() -> LoopConfig or LOOP = loop(...)"},
        )

    config.source = str(cfg_path)
    return config


# ----------------------------------------------------------------------
# Execution primitives
# ----------------------------------------------------------------------

def run_step(step: Step, root: Path, *, console: Console | None = None) -> int:
    """
    Run one step to completion and return its exit code.

    Output is not captured: the tool writes straight to the terminal.
    A tool that cannot be launched counts as a failed step, with the exit
    code a shell would give: EXIT_NOT_EXECUTABLE for a permission error,
    EXIT_NOT_FOUND otherwise.
    """
    console = console or get_console()
    cwd = (root / (step.cwd or ".")).resolve()
    if not cwd.exists():
        raise FileNotFoundError(f"step '{step.name}' cwd not found: {cwd}")

    env = os.environ.copy()
    env.update(step.env or {})

    hint = TOOL_HINTS.get(step.tool, f"Install {step.tool} or fix PATH.")
    try:
        proc = subprocess.run(
            step.run,
            shell=isinstance(step.run, str),
            cwd=str(cwd),
            env=env,
        )
    except FileNotFoundError:
        console.print_tool_missing(step.name, step.tool, hint)
        return EXIT_NOT_FOUND
    except PermissionError:
        console.print_tool_missing(
            step.name, step.tool, f"Make {step.tool} executable (chmod +x).", reason="Permission denied"
        )
        return EXIT_NOT_EXECUTABLE
    except OSError as e:
        console.print_tool_missing(step.name, step.tool, hint, reason=f"Cannot execute ({e.strerror or e})")
        return EXIT_NOT_FOUND

    return proc.returncode


@dataclass
class IterationResult:
    """Outcome of steps 1-5 of a single iteration."""
    statuses: Dict[str, str] = field(default_factory=dict)   # name -> ok|failed|skipped
    exit_codes: Dict[str, int] = field(default_factory=dict)

    @property
    def ran(self) -> List[str]:
        return [name for name, status in self.statuses.items() if status != "skipped"]

    @property
    def failed(self) -> bool:
        return any(status == "failed" for status in self.statuses.values())

    def failures(self, config: LoopConfig) -> List[StepFailure]:
        by_name = {s.name: s for s in config.steps}
        return [
            StepFailure(step=name, cmd=by_name[name].display, exit_code=self.exit_codes[name])
            for name, status in self.statuses.items()
            if status == "failed"
        ]


def run_iteration(
    config: LoopConfig,
    root: str | Path = ".",
    console: Console | None = None,
    *,
    run: Optional[Callable[[Step, Path], int]] = None,
) -> IterationResult:
    """
    Steps 1-5: clear, run every step in order honoring gating, print separator.

    A gated step runs only if the step right before it ran and exited 0.
    The separator is printed exactly once, even if a step raised.
    """
    console = console or get_console()
    run = run or partial(run_step, console=console)
    root_p = Path(root).resolve()
    result = IterationResult()

    try:
        if config.clear_screen:
            console.clear()

        prev_ok = True
        for step in config.steps:
            if step.gated and not prev_ok:
                result.statuses[step.name] = "skipped"
                console.print_skipped(step.name)
                continue

            console.print_debug(f"running {step.name}: {step.display}")
            code = run(step, root_p)
            result.exit_codes[step.name] = code
            result.statuses[step.name] = "ok" if code == 0 else "failed"
            prev_ok = code == 0
    finally:
        console.print_separator(config.separator)

    return result
