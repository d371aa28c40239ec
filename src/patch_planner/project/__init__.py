"""Project definition graph and its YAML loader."""

from .loader import ProjectDefinitionError, load_project, load_project_file
from .models import (
    ALL_DEPENDENCIES,
    ALL_VARIANTS,
    BuildVariant,
    BuildVariantTaskUnit,
    Project,
    ProjectGraph,
    ProjectTask,
    TaskGroup,
    TaskUnitDependency,
    TaskUnitRequirement,
    TVPair,
)

__all__ = [
    "ALL_DEPENDENCIES",
    "ALL_VARIANTS",
    "BuildVariant",
    "BuildVariantTaskUnit",
    "Project",
    "ProjectDefinitionError",
    "ProjectGraph",
    "ProjectTask",
    "TVPair",
    "TaskGroup",
    "TaskUnitDependency",
    "TaskUnitRequirement",
    "load_project",
    "load_project_file",
]
