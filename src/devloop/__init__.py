from .dsl import sh, gated, loop, cargo_loop
from .engine import run_forever, run_once
from .model import LoopConfig, Step

__all__ = ["sh", "gated", "loop", "cargo_loop", "run_forever", "run_once", "LoopConfig", "Step"]
