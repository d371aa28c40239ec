"""Load a project definition from YAML.

The loader builds the read-only :class:`Project` graph consumed by the
closure builder. It validates structure only; it does not check that
dependency targets exist, since a missing target is a legitimate outcome
the closure builder reports on its own.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .models import (
    BuildVariant,
    BuildVariantTaskUnit,
    Project,
    ProjectTask,
    TaskGroup,
    TaskUnitDependency,
    TaskUnitRequirement,
)

logger = logging.getLogger(__name__)


class ProjectDefinitionError(RuntimeError):
    """Raised when a project definition cannot be read or is malformed."""


def _as_name(value: Any, *, field_name: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    raise ProjectDefinitionError(
        f"Invalid project definition: '{field_name}' must be a non-empty string"
    )


def _as_list(value: Any, *, field_name: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ProjectDefinitionError(
            f"Invalid project definition: '{field_name}' must be a list"
        )
    return list(value)


def _as_patchable(value: Any, *, field_name: str) -> bool | None:
    if value is None or isinstance(value, bool):
        return value
    raise ProjectDefinitionError(
        f"Invalid project definition: '{field_name}' must be true or false"
    )


def _as_variant(value: Any, *, field_name: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ProjectDefinitionError(
            f"Invalid project definition: '{field_name}' must be a string"
        )
    return value.strip()


def _parse_requirements(value: Any, *, field_name: str) -> list[TaskUnitRequirement]:
    requirements: list[TaskUnitRequirement] = []
    for idx, raw in enumerate(_as_list(value, field_name=field_name)):
        entry_name = f"{field_name}[{idx}]"
        if isinstance(raw, str):
            requirements.append(TaskUnitRequirement(name=_as_name(raw, field_name=entry_name)))
            continue
        if not isinstance(raw, dict):
            raise ProjectDefinitionError(
                f"Invalid project definition: '{entry_name}' must be a mapping or a task name"
            )
        requirements.append(
            TaskUnitRequirement(
                name=_as_name(raw.get("name"), field_name=f"{entry_name}.name"),
                variant=_as_variant(raw.get("variant"), field_name=f"{entry_name}.variant"),
            )
        )
    return requirements


def _parse_dependencies(value: Any, *, field_name: str) -> list[TaskUnitDependency]:
    dependencies: list[TaskUnitDependency] = []
    for idx, raw in enumerate(_as_list(value, field_name=field_name)):
        entry_name = f"{field_name}[{idx}]"
        if isinstance(raw, str):
            dependencies.append(TaskUnitDependency(name=_as_name(raw, field_name=entry_name)))
            continue
        if not isinstance(raw, dict):
            raise ProjectDefinitionError(
                f"Invalid project definition: '{entry_name}' must be a mapping or a task name"
            )
        patch_optional = raw.get("patch_optional", False)
        if not isinstance(patch_optional, bool):
            raise ProjectDefinitionError(
                f"Invalid project definition: '{entry_name}.patch_optional' must be true or false"
            )
        dependencies.append(
            TaskUnitDependency(
                name=_as_name(raw.get("name"), field_name=f"{entry_name}.name"),
                variant=_as_variant(raw.get("variant"), field_name=f"{entry_name}.variant"),
                patch_optional=patch_optional,
            )
        )
    return dependencies


def _require_mapping(raw: Any, *, field_name: str) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise ProjectDefinitionError(
            f"Invalid project definition: '{field_name}' must be a mapping"
        )
    return raw


def _check_unique(names: list[str], *, kind: str) -> None:
    seen: set[str] = set()
    for name in names:
        if name in seen:
            raise ProjectDefinitionError(
                f"Invalid project definition: duplicate {kind} '{name}'"
            )
        seen.add(name)


def load_project(data: dict[str, Any], identifier: str) -> Project:
    """Build a :class:`Project` from an already-parsed definition mapping."""
    if not isinstance(data, dict):
        raise ProjectDefinitionError("Invalid project definition: root must be a mapping")

    tasks: list[ProjectTask] = []
    for idx, raw in enumerate(_as_list(data.get("tasks"), field_name="tasks")):
        raw = _require_mapping(raw, field_name=f"tasks[{idx}]")
        tasks.append(
            ProjectTask(
                name=_as_name(raw.get("name"), field_name=f"tasks[{idx}].name"),
                patchable=_as_patchable(raw.get("patchable"), field_name=f"tasks[{idx}].patchable"),
                requires=_parse_requirements(raw.get("requires"), field_name=f"tasks[{idx}].requires"),
                depends_on=_parse_dependencies(raw.get("depends_on"), field_name=f"tasks[{idx}].depends_on"),
            )
        )
    _check_unique([t.name for t in tasks], kind="task")

    groups: list[TaskGroup] = []
    for idx, raw in enumerate(_as_list(data.get("task_groups"), field_name="task_groups")):
        raw = _require_mapping(raw, field_name=f"task_groups[{idx}]")
        members = [
            _as_name(member, field_name=f"task_groups[{idx}].tasks[{pos}]")
            for pos, member in enumerate(
                _as_list(raw.get("tasks"), field_name=f"task_groups[{idx}].tasks")
            )
        ]
        groups.append(
            TaskGroup(
                name=_as_name(raw.get("name"), field_name=f"task_groups[{idx}].name"),
                tasks=members,
            )
        )
    _check_unique([g.name for g in groups] + [t.name for t in tasks], kind="task or task group")

    known = {t.name for t in tasks} | {g.name for g in groups}
    variants: list[BuildVariant] = []
    for idx, raw in enumerate(_as_list(data.get("buildvariants"), field_name="buildvariants")):
        raw = _require_mapping(raw, field_name=f"buildvariants[{idx}]")
        bv_name = _as_name(raw.get("name"), field_name=f"buildvariants[{idx}].name")
        units: list[BuildVariantTaskUnit] = []
        for pos, unit_raw in enumerate(
            _as_list(raw.get("tasks"), field_name=f"buildvariants[{idx}].tasks")
        ):
            field_name = f"buildvariants[{idx}].tasks[{pos}]"
            if isinstance(unit_raw, str):
                unit_raw = {"name": unit_raw}
            unit_raw = _require_mapping(unit_raw, field_name=field_name)
            unit_name = _as_name(unit_raw.get("name"), field_name=f"{field_name}.name")
            if unit_name not in known:
                raise ProjectDefinitionError(
                    f"Invalid project definition: build variant '{bv_name}' lists "
                    f"unknown task '{unit_name}'"
                )
            units.append(
                BuildVariantTaskUnit(
                    name=unit_name,
                    variant=bv_name,
                    patchable=_as_patchable(unit_raw.get("patchable"), field_name=f"{field_name}.patchable"),
                    requires=_parse_requirements(unit_raw.get("requires"), field_name=f"{field_name}.requires"),
                    depends_on=_parse_dependencies(unit_raw.get("depends_on"), field_name=f"{field_name}.depends_on"),
                )
            )
        variants.append(
            BuildVariant(
                name=bv_name,
                display_name=str(raw.get("display_name") or bv_name),
                tasks=units,
            )
        )
    _check_unique([bv.name for bv in variants], kind="build variant")

    project_id = data.get("identifier")
    if project_id is not None:
        identifier = _as_name(project_id, field_name="identifier")

    logger.debug(
        "Loaded project %s: %d tasks, %d task groups, %d build variants",
        identifier,
        len(tasks),
        len(groups),
        len(variants),
    )
    return Project(
        identifier=identifier,
        tasks=tasks,
        build_variants=variants,
        task_groups=groups,
    )


def load_project_file(path: Path | str, identifier: str | None = None) -> Project:
    """Load a project definition from a YAML file.

    The project identifier comes from ``identifier``, then the file's own
    ``identifier`` key, then the file stem.
    """
    project_path = Path(path)
    yaml = YAML(typ="safe")
    try:
        with project_path.open("r", encoding="utf-8") as fh:
            raw = yaml.load(fh) or {}
    except OSError as exc:
        raise ProjectDefinitionError(f"Unable to read project definition: {project_path}") from exc
    except YAMLError as exc:
        raise ProjectDefinitionError(f"Invalid YAML in project definition: {project_path}") from exc

    project = load_project(raw, identifier=project_path.stem)
    if identifier:
        project.identifier = identifier
    return project
