from __future__ import annotations

import logging
from collections import deque
from datetime import timedelta
from typing import Sequence

from .portfolio_models import (
    CircuitBreakerAdvice,
    CrossProjectDependency,
    DependencyImpactAssessment,
    ImpactEntry,
    Project,
    RiskLevel,
)

logger = logging.getLogger(__name__)

HIGH_RISK_DELAY_DAYS = 30
MEDIUM_RISK_DELAY_DAYS = 14
WAITING_COST_PER_DAY = 5000
SUSPEND_COST_THRESHOLD = 50000


def simulate_delay_impact(
    project_id: str,
    delay_days: int,
    projects: Sequence[Project],
    dependencies: Sequence[CrossProjectDependency],
) -> list[ImpactEntry]:
    """
    Push a delay of `project_id` forward to everything downstream of it.

    The same delay is applied to every transitive dependent (no decay, no
    compounding). Each project is reported once, for the first path that reaches
    it in breadth-first order; the delayed project itself is not reported.
    """

    dependents: dict[str, list[str]] = {}
    for dep in dependencies:
        dependents.setdefault(dep.source_project_id, []).append(dep.target_project_id)
    by_id = {p.id: p for p in projects}

    impacts: list[ImpactEntry] = []
    queue: deque[tuple[str, int]] = deque([(project_id, delay_days)])
    visited: set[str] = set()

    while queue:
        current, accumulated = queue.popleft()
        if current in visited:
            continue
        visited.add(current)

        project = by_id.get(current)
        if project is None:
            logger.debug("Delay simulation skipped unknown project %s", current)
            continue

        if current != project_id:
            impacts.append(
                ImpactEntry(
                    project_id=current,
                    project_name=project.name,
                    original_end_date=project.end_date,
                    new_end_date=project.end_date + timedelta(days=accumulated),
                    delay_days=accumulated,
                )
            )

        for child in dependents.get(current, []):
            queue.append((child, accumulated))

    return impacts


def assess_dependency_impact(
    project_id: str,
    delay_days: int,
    projects: Sequence[Project],
    dependencies: Sequence[CrossProjectDependency],
    critical_path: Sequence[str] = (),
) -> list[DependencyImpactAssessment]:
    """Rate the risk a delay poses to each project directly waiting on `project_id`."""

    by_id = {p.id: p for p in projects}
    critical_edges = set(zip(critical_path, critical_path[1:]))
    assessments: list[DependencyImpactAssessment] = []

    for dep in dependencies:
        if dep.source_project_id != project_id:
            continue
        affected = by_id.get(dep.target_project_id)
        if affected is None:
            continue

        on_critical_path = (dep.source_project_id, dep.target_project_id) in critical_edges
        risk = _risk_level(delay_days, on_critical_path)
        assessments.append(
            DependencyImpactAssessment(
                affected_project_id=affected.id,
                affected_project_name=affected.name,
                delay_days=delay_days,
                risk_level=risk,
                recommendation=_recommendation(risk, affected.name),
            )
        )

    return assessments


def recommend_circuit_breaker(
    delayed_project: Project,
    assessment: DependencyImpactAssessment,
    waiting_cost_per_day: int = WAITING_COST_PER_DAY,
) -> CircuitBreakerAdvice:
    """
    Decide whether the waiting project should be suspended.

    Suspension is advised only for high-risk waits whose idle cost exceeds
    SUSPEND_COST_THRESHOLD; the saving is then the whole waiting cost.
    """

    waiting_cost = assessment.delay_days * waiting_cost_per_day
    should_suspend = waiting_cost > SUSPEND_COST_THRESHOLD and assessment.risk_level == "high"

    if should_suspend:
        recommendation = (
            f'Suspend project "{assessment.affected_project_name}" now.\n'
            f"Estimated waiting cost: {waiting_cost:,}\n"
            "Suggested actions:\n"
            f"1. Pause the project and release its resources (saves about {waiting_cost:,})\n"
            "2. Reassign the released resources to other high-priority projects\n"
            f'3. Restart once "{delayed_project.name}" has finished\n'
            f'Risk: overall delivery of "{assessment.affected_project_name}" slips by '
            f"{assessment.delay_days} day(s)."
        )
    else:
        recommendation = (
            f'Keep waiting for "{delayed_project.name}" to finish.\n'
            f"Estimated waiting cost: {waiting_cost:,} (below the suspension threshold)\n"
            "Suggested actions:\n"
            f'1. Monitor progress of "{delayed_project.name}" closely\n'
            "2. Prepare a contingency plan in case of further delay\n"
            "3. Consider temporarily lending out part of the resources"
        )

    return CircuitBreakerAdvice(
        should_suspend=should_suspend,
        estimated_savings=waiting_cost if should_suspend else 0,
        recommendation=recommendation,
    )


def _risk_level(delay_days: int, on_critical_path: bool) -> RiskLevel:
    if on_critical_path or delay_days > HIGH_RISK_DELAY_DAYS:
        return "high"
    if delay_days > MEDIUM_RISK_DELAY_DAYS:
        return "medium"
    return "low"


def _recommendation(risk: RiskLevel, project_name: str) -> str:
    if risk == "high":
        return f'Suspend project "{project_name}" and release its resources instead of idling.'
    if risk == "medium":
        return f'Adjust the schedule of "{project_name}" or look for an alternative.'
    return f'Keep monitoring "{project_name}"; no adjustment needed yet.'
