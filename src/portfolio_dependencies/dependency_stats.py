from __future__ import annotations

from typing import Sequence

from .portfolio_models import CrossProjectDependency, DependencyStatistics, Project, ProjectCount


def get_dependency_statistics(
    projects: Sequence[Project], dependencies: Sequence[CrossProjectDependency]
) -> DependencyStatistics:
    """
    Summarise the dependency set for the portfolio header.

    `critical_dependencies` counts edges flagged `critical_path`; the detector
    never sets that flag, so it stays 0 until edge criticality is tracked.
    Ties for most dependent/blocking go to the project seen first.
    """

    incoming: dict[str, int] = {p.id: 0 for p in projects}
    outgoing: dict[str, int] = {p.id: 0 for p in projects}
    for dep in dependencies:
        outgoing[dep.source_project_id] = outgoing.get(dep.source_project_id, 0) + 1
        incoming[dep.target_project_id] = incoming.get(dep.target_project_id, 0) + 1

    names = {p.id: p.name for p in projects}
    return DependencyStatistics(
        total_dependencies=len(dependencies),
        critical_dependencies=sum(1 for dep in dependencies if dep.critical_path),
        most_dependent_project=_top(incoming, names),
        most_blocking_project=_top(outgoing, names),
    )


def _top(counts: dict[str, int], names: dict[str, str]) -> ProjectCount | None:
    best_id: str | None = None
    best = 0
    for pid, count in counts.items():
        if count > best:
            best_id, best = pid, count
    if best_id is None:
        return None
    return ProjectCount(id=best_id, name=names.get(best_id, ""), count=best)
