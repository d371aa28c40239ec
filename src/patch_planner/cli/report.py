"""Serializable closure report for ``--json`` output."""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from patch_planner.closure import Exclusion
from patch_planner.project.models import TVPair
from patch_planner.selection import group_by_variant


class ExclusionItem(BaseModel):
    """One pair dropped from the closure."""

    pair: str = Field(..., description="Dropped pair as 'task@variant'")
    reason: str = Field(
        ..., description="'not_found' | 'unpatchable' | 'unsatisfied_prerequisite'"
    )
    blocked_by: Optional[str] = Field(
        None, description="Prerequisite or group member that caused the drop"
    )


class ClosureReport(BaseModel):
    """Result of a patch closure computation."""

    project: str = Field(..., description="Project identifier")
    requested: List[str] = Field(
        default_factory=list, description="Initial pairs as 'task@variant'"
    )
    pairs: List[str] = Field(
        default_factory=list, description="Closure pairs, sorted by variant then task"
    )
    variants: Dict[str, List[str]] = Field(
        default_factory=dict, description="Closure grouped as variant -> tasks"
    )
    exclusions: List[ExclusionItem] = Field(default_factory=list)

    @classmethod
    def build(
        cls,
        project: str,
        requested: list[TVPair],
        closure: list[TVPair],
        exclusions: list[Exclusion],
    ) -> "ClosureReport":
        ordered = sorted(exclusions, key=lambda e: e.pair.sort_key())
        return cls(
            project=project,
            requested=[str(pair) for pair in requested],
            pairs=[str(pair) for pair in closure],
            variants=group_by_variant(closure),
            exclusions=[ExclusionItem(**e.to_dict()) for e in ordered],
        )
