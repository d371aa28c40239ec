"""Read-only project graph for patch planning.

Defines the (task, variant) pair identity, the requirement and dependency
records attached to a build-variant task unit, task groups, and the
``Project`` container that answers the lookups the closure builder needs.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Protocol

ALL_VARIANTS = "*"
ALL_DEPENDENCIES = "*"

PAIR_SEPARATOR = "@"


@dataclass(frozen=True)
class TVPair:
    """A (task name, build variant name) pair, the unit of inclusion."""

    task_name: str
    variant: str

    def __str__(self) -> str:
        return f"{self.task_name}{PAIR_SEPARATOR}{self.variant}"

    @classmethod
    def parse(cls, value: str) -> TVPair:
        """Parse ``task@variant`` into a pair.

        Raises ValueError when either side is missing.
        """
        task_name, sep, variant = value.strip().rpartition(PAIR_SEPARATOR)
        if not sep or not task_name or not variant:
            raise ValueError(
                f"Invalid task/variant pair '{value}': expected 'task{PAIR_SEPARATOR}variant'"
            )
        return cls(task_name=task_name, variant=variant)

    def sort_key(self) -> tuple[str, str]:
        return (self.variant, self.task_name)


@dataclass(frozen=True)
class TaskUnitRequirement:
    """A task that must also run when the requiring task runs.

    An empty ``variant`` means the requiring pair's own variant.
    """

    name: str
    variant: str = ""


@dataclass(frozen=True)
class TaskUnitDependency:
    """A task the owning task depends on.

    ``name`` and ``variant`` may each be a wildcard. Patch-optional
    dependencies are ignored when computing a patch closure.
    """

    name: str
    variant: str = ""
    patch_optional: bool = False


@dataclass(frozen=True)
class TaskGroup:
    """Named, ordered collection of tasks."""

    name: str
    tasks: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ProjectTask:
    """Project-level task definition supplying defaults to variant units."""

    name: str
    patchable: bool | None = None
    requires: list[TaskUnitRequirement] = field(default_factory=list)
    depends_on: list[TaskUnitDependency] = field(default_factory=list)


@dataclass(frozen=True)
class BuildVariantTaskUnit:
    """Concrete specification of one task on one build variant."""

    name: str
    variant: str = ""
    patchable: bool | None = None  # None: unset
    requires: list[TaskUnitRequirement] = field(default_factory=list)
    depends_on: list[TaskUnitDependency] = field(default_factory=list)

    def populate(self, task: ProjectTask) -> BuildVariantTaskUnit:
        """Fill fields left unset on the variant from the project task."""
        return replace(
            self,
            patchable=self.patchable if self.patchable is not None else task.patchable,
            requires=list(self.requires) or list(task.requires),
            depends_on=list(self.depends_on) or list(task.depends_on),
        )


@dataclass(frozen=True)
class BuildVariant:
    name: str
    display_name: str = ""
    tasks: list[BuildVariantTaskUnit] = field(default_factory=list)


class ProjectGraph(Protocol):
    """Lookups the closure builder performs against a project definition."""

    identifier: str

    def find_task_group(self, name: str) -> TaskGroup | None: ...

    def find_task_for_variant(
        self, task_name: str, variant: str
    ) -> BuildVariantTaskUnit | None: ...

    def find_variants_with_task(self, task_name: str) -> list[str]: ...

    def find_tasks_for_variant(self, variant: str) -> list[str]: ...

    def find_all_variants(self) -> list[str]: ...


@dataclass
class Project:
    """In-memory project definition.

    Treated as immutable once built; lookups never modify it, so a single
    instance can be read from several closure computations at once.
    """

    identifier: str
    tasks: list[ProjectTask] = field(default_factory=list)
    build_variants: list[BuildVariant] = field(default_factory=list)
    task_groups: list[TaskGroup] = field(default_factory=list)

    def find_project_task(self, name: str) -> ProjectTask | None:
        for task in self.tasks:
            if task.name == name:
                return task
        return None

    def find_task_group(self, name: str) -> TaskGroup | None:
        for group in self.task_groups:
            if group.name == name:
                return group
        return None

    def find_build_variant(self, name: str) -> BuildVariant | None:
        for bv in self.build_variants:
            if bv.name == name:
                return bv
        return None

    def find_task_for_variant(
        self, task_name: str, variant: str
    ) -> BuildVariantTaskUnit | None:
        """Return the populated unit for ``task_name`` on ``variant``.

        The task may be listed on the variant directly or through a task
        group. Returns None when the variant does not run the task.
        """
        bv = self.find_build_variant(variant)
        if bv is None:
            return None

        for bvt in bv.tasks:
            if bvt.name == task_name:
                unit = replace(bvt, variant=bv.name)
                break
            group = self.find_task_group(bvt.name)
            if group is not None and task_name in group.tasks:
                # group-level settings apply to each member
                unit = replace(bvt, name=task_name, variant=bv.name)
                break
        else:
            return None

        task = self.find_project_task(task_name)
        if task is not None:
            unit = unit.populate(task)
        return unit

    def find_variants_with_task(self, task_name: str) -> list[str]:
        return [
            bv.name
            for bv in self.build_variants
            if task_name in self._variant_task_names(bv)
        ]

    def find_tasks_for_variant(self, variant: str) -> list[str]:
        bv = self.find_build_variant(variant)
        if bv is None:
            return []
        return self._variant_task_names(bv)

    def find_all_variants(self) -> list[str]:
        return [bv.name for bv in self.build_variants]

    def _variant_task_names(self, bv: BuildVariant) -> list[str]:
        names: list[str] = []
        for bvt in bv.tasks:
            group = self.find_task_group(bvt.name)
            members = group.tasks if group is not None else [bvt.name]
            for name in members:
                if name not in names:
                    names.append(name)
        return names
