# cli.py
from __future__ import annotations

import os
import sys
from pathlib import Path

import click

from devloop.dsl import cargo_loop
from devloop.engine import run_forever, run_once
from devloop.model import RESTART_MODES, LoopConfig
from devloop.runner import ConfigError, WatchError, find_config, load_config
from devloop.ui.console import Console, get_console, set_console


def resolve_config(config_arg: str | None) -> LoopConfig:
    """
    Load the loop config from an explicit path, ./devloop_config.py, or
    fall back to the cargo defaults.

    Raises:
        SystemExit: If the config cannot be loaded
    """
    console = get_console()

    path = Path(config_arg) if config_arg else find_config(".")
    if path is None:
        console.print_debug("no devloop_config.py found, using cargo defaults")
        return cargo_loop()

    try:
        return load_config(path)
    except ConfigError as e:
        console.print_error(
            "Failed to load config",
            e.message,
            details=[f"{k}: {v}" for k, v in e.details.items()] or None,
            suggestion="Create a config file:\n  devloop_config.py\n\nOr run without one to use the cargo defaults.",
        )
        sys.exit(1)
    except ValueError as e:
        console.print_error(
            "Invalid config",
            f"{path}: {e}",
        )
        sys.exit(1)


def _run_loop(ctx) -> None:
    console = get_console()
    config = resolve_config(ctx.obj["config"])

    try:
        run_forever(config, ".", console, restart=ctx.obj["restart"])
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except WatchError as e:
        console.print_error(
            "File watcher failed",
            e.message,
            details=[f"{k}: {v}" for k, v in e.details.items()] or None,
            suggestion="Check that every watched path exists, or adjust watch=[...] in devloop_config.py.",
        )
        if ctx.obj.get("debug", False):
            import traceback
            traceback.print_exc()
        sys.exit(1)
    except Exception as e:
        console.print_exception(e)
        sys.exit(1)


@click.group(invoke_without_command=True)
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    envvar="DEVLOOP_DEBUG",
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.option(
    "--config",
    default=None,
    help="Config file path (defaults to devloop_config.py if present)",
)
@click.option(
    "--restart",
    type=click.Choice(RESTART_MODES),
    default=None,
    help="exec: replace the process after each change; loop: iterate in-process",
)
@click.pass_context
def cli(ctx, debug, config, restart):
    """devloop — format, lint, build, wait for a change, repeat."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["config"] = config
    ctx.obj["restart"] = restart

    if ctx.invoked_subcommand is None:
        _run_loop(ctx)


@cli.command()
@click.pass_context
def once(ctx):
    """Run format, lint and build once, then exit (1 if any step failed)."""
    console = get_console()
    config = resolve_config(ctx.obj["config"])

    try:
        result = run_once(config, ".", console)
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        console.print_exception(e)
        sys.exit(1)

    console.print_results(result.statuses)
    for failure in result.failures(config):
        console.print_debug(str(failure))

    if result.failed:
        sys.exit(1)


@cli.command()
@click.pass_context
def plan(ctx):
    """Show the configured steps and watched paths."""
    console = get_console()
    config = resolve_config(ctx.obj["config"])
    restart = ctx.obj["restart"] or config.restart
    console.print_plan(config.steps, config.watched_paths, restart)
    console.print_debug(f"cwd: {os.getcwd()}")


if __name__ == "__main__":
    cli()
