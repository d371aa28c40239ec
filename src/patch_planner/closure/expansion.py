"""Expansion of requirements and dependencies into prerequisite pairs.

Wildcards never make a pair its own prerequisite: an all-variants
requirement skips the requiring variant, and wildcard dependencies skip
the depending pair itself.
"""

from __future__ import annotations

from enum import StrEnum

from patch_planner.project.models import (
    ALL_DEPENDENCIES,
    ALL_VARIANTS,
    ProjectGraph,
    TaskUnitDependency,
    TaskUnitRequirement,
    TVPair,
)


class DependencyScope(StrEnum):
    """Which pairs a single dependency declaration refers to."""

    EXACT = "exact"  # task = n, variant = v
    ALL_VARIANTS = "all_variants"  # task = n, variant = *
    ALL_TASKS = "all_tasks"  # task = *, variant = v
    ALL = "all"  # task = *, variant = *


def dependency_scope(dep: TaskUnitDependency) -> DependencyScope:
    all_tasks = dep.name == ALL_DEPENDENCIES
    all_variants = dep.variant == ALL_VARIANTS
    if all_tasks and all_variants:
        return DependencyScope.ALL
    if all_variants:
        return DependencyScope.ALL_VARIANTS
    if all_tasks:
        return DependencyScope.ALL_TASKS
    return DependencyScope.EXACT


def expand_requirements(
    project: ProjectGraph,
    pair: TVPair,
    requires: list[TaskUnitRequirement],
) -> list[TVPair]:
    """Return every pair the given pair requires."""
    deps: list[TVPair] = []
    for req in requires:
        if req.variant == ALL_VARIANTS:
            for variant in project.find_variants_with_task(req.name):
                if variant != pair.variant:
                    deps.append(TVPair(task_name=req.name, variant=variant))
        else:
            deps.append(TVPair(task_name=req.name, variant=req.variant or pair.variant))
    return deps


def expand_dependencies(
    project: ProjectGraph,
    pair: TVPair,
    depends_on: list[TaskUnitDependency],
) -> list[TVPair]:
    """Return every pair the given pair depends on.

    Patch-optional dependencies are skipped entirely.
    """
    deps: list[TVPair] = []
    for dep in depends_on:
        if dep.patch_optional:
            continue

        scope = dependency_scope(dep)
        if scope is DependencyScope.ALL:
            candidates = [
                TVPair(task_name=task_name, variant=variant)
                for variant in project.find_all_variants()
                for task_name in project.find_tasks_for_variant(variant)
            ]
        elif scope is DependencyScope.ALL_VARIANTS:
            candidates = [
                TVPair(task_name=dep.name, variant=variant)
                for variant in project.find_variants_with_task(dep.name)
            ]
        elif scope is DependencyScope.ALL_TASKS:
            variant = dep.variant or pair.variant
            candidates = [
                TVPair(task_name=task_name, variant=variant)
                for task_name in project.find_tasks_for_variant(variant)
            ]
        elif scope is DependencyScope.EXACT:
            deps.append(TVPair(task_name=dep.name, variant=dep.variant or pair.variant))
            continue
        else:  # pragma: no cover - exhaustive over DependencyScope
            raise ValueError(f"Unhandled dependency scope: {scope}")

        deps.extend(candidate for candidate in candidates if candidate != pair)
    return deps
