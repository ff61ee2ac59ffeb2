# cli.py
from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Tuple

import click

from . import settings
from .errors import BuildError, CommandFailure
from .executor import PoolExecutor
from .graph import DependencyGraph
from .model import Unit
from .runner import make_command_runner
from .scheduler import run_schedule
from .sources import build_graph, discover_projects, load_plan
from .ui.console import Console, get_console, set_console


def load_units(plan: str | None, project: str | None) -> Tuple[DependencyGraph, Dict[str, Unit]]:
    """
    Resolve the graph source: an explicit --plan file wins, otherwise the
    TypeScript project at --project (default ./tsconfig.json).
    """
    units: List[Unit]
    if plan:
        units = load_plan(plan)
    else:
        units = discover_projects(project or Path.cwd() / "tsconfig.json")
    return build_graph(units)


def _fail(ctx: click.Context, exc: BuildError) -> None:
    console = get_console()
    details = [f"{k}: {v}" for k, v in exc.details.items()]
    if isinstance(exc.__cause__, CommandFailure) and exc.__cause__.output:
        details.append(exc.__cause__.output)
    message = exc.message
    if exc.unit and exc.unit not in message:
        message = f"{message} ({exc.unit})"
    console.print_error(exc.kind, message, details=details)
    if exc.__cause__ is not None:
        console.print_debug(f"caused by: {exc.__cause__!r}")
        if console.debug:
            console.print_exception(exc.__cause__)
    ctx.exit(1)


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.pass_context
def cli(ctx, debug):
    """parabuild: build interdependent units in parallel."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@click.option("--plan", "plan_path", default=None, help="Plan file (.py or .json) listing units")
@click.option("--project", default=None, help="Root tsconfig.json (defaults to ./tsconfig.json)")
@click.option(
    "--workers",
    default=None,
    show_default="PARABUILD_WORKERS or CPU count",
    type=click.IntRange(min=1),
    help="Maximum number of units built at once",
)
@click.option("--dry-run", is_flag=True, default=False, help="Print the build flow and exit")
@click.pass_context
def build(ctx, plan_path, project, workers, dry_run):
    """Build every unit, running independent ones in parallel."""
    console = get_console()

    try:
        graph, payloads = load_units(plan_path, project)
        if workers is None and not dry_run:
            workers = settings.default_workers()
    except BuildError as e:
        _fail(ctx, e)
        return

    if dry_run:
        try:
            console.print_build_flow(graph.simulate_schedule())
        except BuildError as e:
            _fail(ctx, e)
        return

    try:
        work_fn = make_command_runner(Path.cwd())
    except BuildError as e:
        _fail(ctx, e)
        return

    executor = PoolExecutor(work_fn, max_workers=workers)
    try:
        run_schedule(graph, executor, payloads, console=console)
    except KeyboardInterrupt:
        executor.shutdown(wait=False, cancel_pending=True)
        console.print_info("\nInterrupted by user")
        ctx.exit(130)
    except BuildError as e:
        # report first; running siblings finish in the background
        executor.shutdown(wait=False, cancel_pending=True)
        _fail(ctx, e)
    else:
        executor.shutdown()


@cli.command("plan")
@click.option("--plan", "plan_path", default=None, help="Plan file (.py or .json) listing units")
@click.option("--project", default=None, help="Root tsconfig.json (defaults to ./tsconfig.json)")
@click.pass_context
def show_plan(ctx, plan_path, project):
    """Print every planned wave and the units in it."""
    console = get_console()
    try:
        graph, _payloads = load_units(plan_path, project)
        waves = graph.plan_waves()
    except BuildError as e:
        _fail(ctx, e)
        return

    console.print_build_flow([len(w) for w in waves])
    console.print_waves(waves)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
