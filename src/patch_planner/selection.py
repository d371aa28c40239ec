"""Turn a user's variant/task selection into initial pairs.

``"all"`` in either list selects everything on that axis.
"""

from __future__ import annotations

from typing import Iterable

from patch_planner.project.models import Project, TVPair

SELECT_ALL = "all"


class SelectionError(RuntimeError):
    """Raised when a selection names something the project does not have."""


def select_pairs(
    project: Project,
    variants: Iterable[str],
    tasks: Iterable[str],
) -> list[TVPair]:
    """Return the pairs matching the selected variants and tasks.

    Task group names in ``tasks`` select the group's members. Variants keep
    project order; tasks keep variant order.
    """
    variant_names = [v.strip() for v in variants if v.strip()]
    task_names = [t.strip() for t in tasks if t.strip()]

    if SELECT_ALL in variant_names:
        selected_variants = project.find_all_variants()
    else:
        known = set(project.find_all_variants())
        unknown = sorted(set(variant_names) - known)
        if unknown:
            raise SelectionError(f"Unknown build variant(s): {', '.join(unknown)}")
        selected_variants = list(dict.fromkeys(variant_names))

    all_tasks = SELECT_ALL in task_names
    if not all_tasks:
        known_tasks = {task.name for task in project.tasks}
        known_tasks.update(group.name for group in project.task_groups)
        for variant in project.find_all_variants():
            known_tasks.update(project.find_tasks_for_variant(variant))
        unknown = sorted(set(task_names) - known_tasks)
        if unknown:
            raise SelectionError(f"Unknown task(s): {', '.join(unknown)}")

    wanted: set[str] = set()
    for name in task_names:
        group = project.find_task_group(name)
        if group is not None:
            wanted.update(group.tasks)
        else:
            wanted.add(name)

    pairs: list[TVPair] = []
    for variant in selected_variants:
        for task_name in project.find_tasks_for_variant(variant):
            if all_tasks or task_name in wanted:
                pairs.append(TVPair(task_name=task_name, variant=variant))
    return pairs


def group_by_variant(pairs: Iterable[TVPair]) -> dict[str, list[str]]:
    """Group pairs as ``{variant: [task, ...]}`` with sorted keys and values."""
    grouped: dict[str, set[str]] = {}
    for pair in pairs:
        grouped.setdefault(pair.variant, set()).add(pair.task_name)
    return {variant: sorted(grouped[variant]) for variant in sorted(grouped)}
