"""``patch-planner`` command line interface.

Commands:
- ``patch-planner include`` -- compute the patch closure of a selection
- ``patch-planner variants`` -- list build variants and their tasks
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table
from typing_extensions import Annotated

from patch_planner.closure import DependencyIncluder
from patch_planner.config import PlannerConfig, PlannerConfigError, load_planner_config
from patch_planner.project import Project, ProjectDefinitionError, TVPair, load_project_file
from patch_planner.selection import SelectionError, group_by_variant, select_pairs

from .report import ClosureReport

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="patch-planner",
    help="Compute dependency-closed task selections for patch builds",
    no_args_is_help=True,
    add_completion=False,
)

console = Console()


def _configure_logging(level: int) -> None:
    # no-op when the host already configured the root logger
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger("patch_planner").setLevel(level)


def _load_config() -> PlannerConfig:
    try:
        return load_planner_config(Path.cwd())
    except PlannerConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def _load_project(project_file: Optional[Path], config: PlannerConfig) -> Project:
    path = project_file or Path(config.project_file)
    try:
        return load_project_file(path)
    except ProjectDefinitionError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def _initial_pairs(
    project: Project,
    pairs: list[str],
    variants: list[str],
    tasks: list[str],
) -> list[TVPair]:
    initial: list[TVPair] = []
    try:
        for value in pairs:
            initial.append(TVPair.parse(value))
        if variants or tasks:
            if not (variants and tasks):
                raise SelectionError("--variant and --task must be given together")
            initial.extend(select_pairs(project, variants, tasks))
    except (ValueError, SelectionError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if not initial:
        console.print(
            "[red]Error:[/red] Nothing selected. Pass task@variant pairs "
            "or --variant/--task."
        )
        raise typer.Exit(1)
    return initial


@app.command()
def include(
    pairs: Annotated[Optional[List[str]], typer.Argument(help="Pairs to include, as task@variant")] = None,
    variant: Annotated[Optional[List[str]], typer.Option("--variant", "-v", help="Build variant to select ('all' for every variant)")] = None,
    task: Annotated[Optional[List[str]], typer.Option("--task", "-t", help="Task or task group to select ('all' for every task)")] = None,
    project_file: Annotated[Optional[Path], typer.Option("--project", "-p", help="Project definition YAML (defaults to configured project_file)")] = None,
    show_exclusions: Annotated[bool, typer.Option("--show-exclusions", help="List dropped pairs and why")] = False,
    json_output: Annotated[bool, typer.Option("--json", help="Machine-readable JSON output")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", help="Enable debug logging")] = False,
) -> None:
    """Expand a task selection into its dependency-closed patch set.

    Examples:
        patch-planner include compile@linux
        patch-planner include -v all -t integration --show-exclusions
    """
    config = _load_config()
    _configure_logging(logging.DEBUG if verbose else config.log_level_value)

    project = _load_project(project_file, config)
    initial = _initial_pairs(project, pairs or [], variant or [], task or [])

    includer = DependencyIncluder(project)
    closure = sorted(includer.include(initial), key=TVPair.sort_key)
    exclusions = list(includer.exclusions.values())
    logger.info(
        "Closure for %s: %d requested, %d included, %d excluded",
        project.identifier,
        len(initial),
        len(closure),
        len(exclusions),
    )

    if json_output:
        report = ClosureReport.build(project.identifier, initial, closure, exclusions)
        print(report.model_dump_json(indent=2))
        return

    if not closure:
        console.print("[yellow]No tasks can be patched for this selection.[/yellow]")
    else:
        table = Table(title=f"Patch closure for {project.identifier}")
        table.add_column("Variant", style="cyan")
        table.add_column("Tasks")
        for variant_name, task_names in group_by_variant(closure).items():
            table.add_row(variant_name, ", ".join(task_names))
        console.print(table)

    if (show_exclusions or config.show_exclusions) and exclusions:
        dropped = Table(title="Excluded")
        dropped.add_column("Pair", style="bold")
        dropped.add_column("Reason", style="magenta")
        dropped.add_column("Blocked by")
        for exclusion in sorted(exclusions, key=lambda e: e.pair.sort_key()):
            dropped.add_row(
                str(exclusion.pair),
                str(exclusion.reason),
                str(exclusion.blocked_by) if exclusion.blocked_by else "",
            )
        console.print(dropped)


@app.command()
def variants(
    project_file: Annotated[Optional[Path], typer.Option("--project", "-p", help="Project definition YAML (defaults to configured project_file)")] = None,
) -> None:
    """List build variants and the tasks they run."""
    config = _load_config()
    _configure_logging(config.log_level_value)
    project = _load_project(project_file, config)

    table = Table(title=f"Build variants for {project.identifier}")
    table.add_column("Variant", style="cyan")
    table.add_column("Display name")
    table.add_column("Tasks")
    for bv in project.build_variants:
        table.add_row(
            bv.name,
            bv.display_name,
            ", ".join(project.find_tasks_for_variant(bv.name)),
        )
    console.print(table)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
