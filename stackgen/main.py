"""
stackgen — CLI entrypoint.

Usage:
    python -m stackgen.main --help
    python -m stackgen.main generate
    python -m stackgen.main check --json
"""

from __future__ import annotations

import os
from pathlib import Path

import click

from stackgen import __version__
from stackgen.core.observability.logging_config import (
    ENV_LOG_FILE,
    ENV_LOG_FILE_LEVEL,
    resolve_level,
    setup_logging,
)


@click.group()
@click.version_option(version=__version__, prog_name="stackgen")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--root",
    "root",
    type=click.Path(file_okay=False),
    default=None,
    help="Project root (default: nearest stackgen.yml with a 'project' section).",
)
@click.option(
    "--chdir",
    "-C",
    "working_dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Working dir: only stacks inside it are processed (default: cwd).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    root: str | None,
    working_dir: str | None,
) -> None:
    """stackgen — generate and check code of Terraform stacks."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["root"] = Path(root).resolve() if root else None
    ctx.obj["working_dir"] = Path(working_dir).resolve() if working_dir else Path.cwd().resolve()

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(ENV_LOG_FILE),
        log_file_level=os.environ.get(ENV_LOG_FILE_LEVEL),
    )


# ── Register commands from stackgen/ui/cli/ ─────────────────────

from stackgen.ui.cli.codegen import check, generate, list_stacks_cmd  # noqa: E402

cli.add_command(generate)
cli.add_command(check)
cli.add_command(list_stacks_cmd)


if __name__ == "__main__":
    cli()
