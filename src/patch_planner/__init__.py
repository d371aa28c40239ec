"""Patch planner: dependency closure of (task, build variant) selections.

Public API surface -- consumers import from this package.
"""

from patch_planner.closure import (
    DependencyIncluder,
    Exclusion,
    ExclusionReason,
    include_patch_dependencies,
)
from patch_planner.project import (
    Project,
    ProjectDefinitionError,
    TVPair,
    load_project,
    load_project_file,
)
from patch_planner.selection import SelectionError, group_by_variant, select_pairs

__version__ = "0.1.0"

__all__ = [
    "DependencyIncluder",
    "Exclusion",
    "ExclusionReason",
    "Project",
    "ProjectDefinitionError",
    "SelectionError",
    "TVPair",
    "group_by_variant",
    "include_patch_dependencies",
    "load_project",
    "load_project_file",
    "select_pairs",
]
