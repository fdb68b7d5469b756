from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Sequence

from .portfolio_models import CrossProjectDependency, DependencyType, MilestoneDependency, Project

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

LIVE_STATUSES = frozenset({"active", "planning"})

_TYPE_NAMES: dict[str, DependencyType] = {
    "FS": "finish-to-start",
    "SS": "start-to-start",
    "FF": "finish-to-finish",
    "SF": "start-to-finish",
}


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def detect_cross_project_dependencies(
    projects: Sequence[Project], clock: Clock | None = None
) -> list[CrossProjectDependency]:
    """
    Build the dependency edge set for the portfolio.

    - Only active and planning projects take part, as either endpoint.
    - Declared milestone dependencies come first; the declaring project is the
      target (successor) and the referenced project the source (predecessor).
    - Pairs of projects sharing a resource get an inferred finish-to-start edge
      unless a declared dependency already links the pair in either direction.
    - References to unknown or inactive projects are skipped; missing milestones
      yield None names.
    """

    now = clock or _utc_now
    live = [p for p in projects if p.status in LIVE_STATUSES]
    by_id = {p.id: p for p in live}

    dependencies: list[CrossProjectDependency] = []
    for project in live:
        for declared in project.milestone_dependencies:
            predecessor = by_id.get(declared.target_project_id)
            if predecessor is None:
                logger.debug(
                    "Skipping dependency %s of %s: unknown project %s",
                    declared.id,
                    project.id,
                    declared.target_project_id,
                )
                continue
            dependencies.append(_manual_dependency(project, predecessor, declared, now()))

    linked = {frozenset((d.source_project_id, d.target_project_id)) for d in dependencies}
    manual_count = len(dependencies)

    for i, first in enumerate(live):
        for second in live[i + 1 :]:
            shared = shared_resources(first, second)
            if not shared:
                continue
            if frozenset((first.id, second.id)) in linked:
                continue
            dependencies.append(
                CrossProjectDependency(
                    id=f"auto-res-{first.id}-{second.id}",
                    source_project_id=first.id,
                    source_project_name=first.name,
                    target_project_id=second.id,
                    target_project_name=second.name,
                    dependency_type="finish-to-start",
                    description=f"Shared resource conflict: {', '.join(shared)}",
                    created_date=now(),
                )
            )

    logger.debug(
        "Detected %d dependencies (%d declared, %d inferred) across %d live projects",
        len(dependencies),
        manual_count,
        len(dependencies) - manual_count,
        len(live),
    )
    return dependencies


def shared_resources(first: Project, second: Project) -> list[str]:
    """Resource ids required by both projects, in first-seen order of `first`."""

    others = {req.resource_id for req in second.resource_requirements}
    shared: list[str] = []
    for req in first.resource_requirements:
        if req.resource_id in others and req.resource_id not in shared:
            shared.append(req.resource_id)
    return shared


def _manual_dependency(
    successor: Project, predecessor: Project, declared: MilestoneDependency, created: datetime
) -> CrossProjectDependency:
    successor_milestone = successor.find_milestone(declared.source_milestone_id)
    predecessor_milestone = predecessor.find_milestone(declared.target_milestone_id)

    description = declared.description
    if not description:
        milestone_name = predecessor_milestone.name if predecessor_milestone else "milestone"
        description = f"{predecessor.name} milestone {milestone_name} blocks this project"

    return CrossProjectDependency(
        id=declared.id,
        source_project_id=predecessor.id,
        source_project_name=predecessor.name,
        source_milestone_id=declared.target_milestone_id,
        source_milestone_name=predecessor_milestone.name if predecessor_milestone else None,
        target_project_id=successor.id,
        target_project_name=successor.name,
        target_milestone_id=declared.source_milestone_id,
        target_milestone_name=successor_milestone.name if successor_milestone else None,
        dependency_type=_TYPE_NAMES.get(declared.type, "finish-to-start"),
        description=description,
        lag_days=declared.lag,
        created_date=created,
    )
