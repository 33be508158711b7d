"""
CLI commands for code generation.

Thin wrappers over ``stackgen.core.services.codegen_ops`` and
``stackgen.core.services.codegen_check``.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click


def _resolve_project_root(ctx: click.Context) -> Path:
    """Resolve the project root from --root or by walking up from the working dir."""
    root: Path | None = ctx.obj.get("root")
    if root is None:
        from stackgen.core.config.loader import find_project_root

        root = find_project_root(ctx.obj["working_dir"])
    if root is None:
        click.secho(
            "❌ No stackgen.yml with a 'project' section found. "
            "Create one at the project root, or pass --root.",
            fg="red",
        )
        sys.exit(1)
    return root


# ── Generate ────────────────────────────────────────────────────


@click.command("generate")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def generate(ctx: click.Context, as_json: bool) -> None:
    """Generate code for every stack inside the working dir."""
    from stackgen.core.services.codegen_ops import generate as generate_code

    root = _resolve_project_root(ctx)
    report = generate_code(root, ctx.obj["working_dir"])

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        color = "red" if report.has_failures() else None
        click.secho(report.full(), fg=color)

    if report.has_failures():
        sys.exit(1)


# ── Check ───────────────────────────────────────────────────────


@click.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def check(ctx: click.Context, as_json: bool) -> None:
    """List outdated generated files, without changing anything.

    Exits with 1 when any stack is outdated or fails to be checked.
    """
    from stackgen.core.services.codegen_check import check_stacks

    root = _resolve_project_root(ctx)
    report = check_stacks(root, ctx.obj["working_dir"])

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        if report.has_failures() or report.has_outdated():
            sys.exit(1)
        return

    if report.bootstrap_error is not None:
        click.secho(f"❌ {report.bootstrap_error}", fg="red")
        sys.exit(1)

    for stack_path, files in report.outdated.items():
        if not files:
            continue
        click.secho(f"⚠️  {stack_path}", fg="yellow", bold=True)
        for name in files:
            click.echo(f"   • {name}")

    for stack_path, err in report.errors.items():
        click.secho(f"❌ {stack_path}", fg="red", bold=True)
        click.echo(f"   {err}")

    if report.has_failures() or report.has_outdated():
        sys.exit(1)

    if not ctx.obj.get("quiet"):
        click.secho("✅ Generated code is up to date", fg="green")


# ── Stacks ──────────────────────────────────────────────────────


@click.command("list-stacks")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_stacks_cmd(ctx: click.Context, as_json: bool) -> None:
    """List the stacks inside the working dir, in generation order."""
    from stackgen.core.services.codegen_common import BootstrapError
    from stackgen.core.services.codegen_ops import select_stacks

    root = _resolve_project_root(ctx)

    try:
        stacks = select_stacks(root, ctx.obj["working_dir"])
    except BootstrapError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps([s.metadata() for s in stacks], indent=2))
        return

    for stack in stacks:
        click.echo(stack.path)
