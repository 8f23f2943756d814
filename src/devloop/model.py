# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

SEPARATOR = "-" * 80

RESTART_MODES = ("exec", "loop")


@dataclass(frozen=True)
class Step:
    """
    A single tool invocation inside one loop iteration.

    `run` is either an argv list (executed directly) or a string (executed
    through the shell). A gated step only runs when the step right before it
    ran and exited 0.
    """
    name: str
    run: Union[List[str], str]
    cwd: str | None = None
    env: Dict[str, str] = field(default_factory=dict)
    gated: bool = False

    @property
    def display(self) -> str:
        if isinstance(self.run, str):
            return self.run
        return " ".join(self.run)

    @property
    def tool(self) -> str:
        """Executable name, used for install hints."""
        if isinstance(self.run, str):
            return self.run.split()[0] if self.run.strip() else ""
        return self.run[0] if self.run else ""


@dataclass
class LoopConfig:
    """
    The fixed configuration of the watch-rebuild loop.

    Nothing here changes at runtime; each iteration reads it as-is.
    """
    steps: list[Step]
    watch: list[str]

    clear_screen: bool = True
    separator: str = SEPARATOR
    restart: str = "exec"

    # Path of the config file this came from (watched as well), if any
    source: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.steps:
            raise ValueError("loop must have at least one step")
        if not self.watch:
            raise ValueError("loop must watch at least one path")

        seen: set[str] = set()
        for s in self.steps:
            if s.name in seen:
                raise ValueError(f"Duplicate step name: {s.name}")
            seen.add(s.name)
            if not s.tool.strip():
                raise ValueError(f"Step '{s.name}' has an empty command")

        if self.steps[0].gated:
            raise ValueError(f"First step '{self.steps[0].name}' cannot be gated (no previous step)")

        if self.restart not in RESTART_MODES:
            raise ValueError(f"restart must be one of {RESTART_MODES}, got: {self.restart!r}")

    @property
    def watched_paths(self) -> list[str]:
        """Watched paths plus the config file itself, without duplicates."""
        paths = list(dict.fromkeys(self.watch))
        if self.source and self.source not in paths:
            paths.append(self.source)
        return paths
