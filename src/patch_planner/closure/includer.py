"""Dependency closure for patch builds.

Given the (task, variant) pairs a user selected for a patch, the includer
adds every pair they require or depend on and prunes every pair that
depends, directly or transitively, on a task that cannot be patched.

A pair is marked included *before* its prerequisites are visited. That
mark is what stops recursion on cyclic graphs; the cost is that a cycle
member resolved while the cycle is still open is treated as includable
even if an unpatchable task is discovered later in the cycle.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Iterable

from patch_planner.project.models import ProjectGraph, TVPair

from .expansion import expand_dependencies, expand_requirements

logger = logging.getLogger(__name__)


class ExclusionReason(StrEnum):
    NOT_FOUND = "not_found"
    UNPATCHABLE = "unpatchable"
    UNSATISFIED_PREREQUISITE = "unsatisfied_prerequisite"


@dataclass(frozen=True)
class Exclusion:
    """Why a pair was dropped from the closure."""

    pair: TVPair
    reason: ExclusionReason
    blocked_by: TVPair | None = None

    def to_dict(self) -> dict[str, str | None]:
        return {
            "pair": str(self.pair),
            "reason": str(self.reason),
            "blocked_by": str(self.blocked_by) if self.blocked_by else None,
        }


class DependencyIncluder:
    """Computes the patch closure of a set of pairs against one project.

    Memo state lives on the instance and is reset by every :meth:`include`
    call. Use one includer per thread; the project itself may be shared.
    """

    def __init__(self, project: ProjectGraph) -> None:
        self.project = project
        self._included: dict[TVPair, bool] = {}
        self._exclusions: dict[TVPair, Exclusion] = {}
        self._open_groups: set[TVPair] = set()

    @property
    def exclusions(self) -> dict[TVPair, Exclusion]:
        """Pairs dropped by the last :meth:`include` call, with reasons."""
        return {
            pair: exclusion
            for pair, exclusion in self._exclusions.items()
            if self._included.get(pair) is False
        }

    def include(self, initial_pairs: Iterable[TVPair]) -> set[TVPair]:
        """Return the dependency-closed, patchable set for ``initial_pairs``.

        Task-group pairs are expanded to their members and never appear in
        the result themselves. Pairs that cannot be included are dropped
        silently (see :attr:`exclusions`).
        """
        self._included = {}
        self._exclusions = {}
        self._open_groups = set()

        for pair in initial_pairs:
            self._resolve(pair)

        return {pair for pair, included in self._included.items() if included}

    def _exclude(
        self,
        pair: TVPair,
        reason: ExclusionReason,
        blocked_by: TVPair | None = None,
    ) -> bool:
        self._included[pair] = False
        self._exclusions[pair] = Exclusion(pair=pair, reason=reason, blocked_by=blocked_by)
        return False

    def _resolve(self, pair: TVPair) -> bool:
        """Decide whether ``pair`` and all its prerequisites can be patched."""
        if pair in self._included:
            return self._included[pair]

        group = self.project.find_task_group(pair.task_name)
        if group is not None:
            if pair in self._open_groups:
                # a group reached again through its own members
                return True
            return self._resolve_group(pair, group.tasks)

        bvt = self.project.find_task_for_variant(pair.task_name, pair.variant)
        if bvt is None:
            logger.error(
                "task %s does not exist in project %s on variant %s",
                pair.task_name,
                self.project.identifier,
                pair.variant,
            )
            return self._exclude(pair, ExclusionReason.NOT_FOUND)

        if bvt.patchable is False:
            logger.debug("%s is not patchable", pair)
            return self._exclude(pair, ExclusionReason.UNPATCHABLE)

        self._included[pair] = True

        prerequisites = expand_requirements(self.project, pair, bvt.requires)
        prerequisites += expand_dependencies(self.project, pair, bvt.depends_on)
        for prerequisite in prerequisites:
            if not self._resolve(prerequisite):
                logger.debug("%s dropped: prerequisite %s excluded", pair, prerequisite)
                return self._exclude(
                    pair, ExclusionReason.UNSATISFIED_PREREQUISITE, prerequisite
                )

        return True

    def _resolve_group(self, pair: TVPair, members: list[str]) -> bool:
        """Resolve a task group pair through its members.

        Members are resolved against a trial copy of the memo. If every
        member is includable the trial is kept; otherwise only its
        exclusions are kept, so a failed group admits none of its members.
        The group pair itself is never marked included.
        """
        committed = self._included
        self._included = dict(committed)
        failed: TVPair | None = None
        self._open_groups.add(pair)
        try:
            for member in members:
                member_pair = TVPair(task_name=member, variant=pair.variant)
                if not self._resolve(member_pair):
                    failed = member_pair
                    break
        finally:
            self._open_groups.discard(pair)
            trial = self._included
            self._included = committed

        if failed is None:
            self._included = trial
            return True

        # False decisions never rest on optimistic marks, so they stay valid
        committed.update({p: d for p, d in trial.items() if d is False})
        logger.debug("Task group %s dropped: member %s excluded", pair, failed)
        return self._exclude(pair, ExclusionReason.UNSATISFIED_PREREQUISITE, failed)


def include_patch_dependencies(
    project: ProjectGraph, pairs: Iterable[TVPair]
) -> list[TVPair]:
    """Compute the patch closure of ``pairs``, sorted by variant then task."""
    includer = DependencyIncluder(project)
    return sorted(includer.include(pairs), key=TVPair.sort_key)
