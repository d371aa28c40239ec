"""Patch closure computation.

Public API surface -- consumers import from this package.
"""

from .expansion import (
    DependencyScope,
    dependency_scope,
    expand_dependencies,
    expand_requirements,
)
from .includer import (
    DependencyIncluder,
    Exclusion,
    ExclusionReason,
    include_patch_dependencies,
)

__all__ = [
    "DependencyIncluder",
    "DependencyScope",
    "Exclusion",
    "ExclusionReason",
    "dependency_scope",
    "expand_dependencies",
    "expand_requirements",
    "include_patch_dependencies",
]
