from __future__ import annotations

from dataclasses import asdict
from typing import Any, Sequence

from .portfolio_models import (
    CircuitBreakerAdvice,
    CrossProjectDependency,
    DependencyImpactAssessment,
    DependencyStatistics,
    ImpactEntry,
    ProjectCount,
)


def build_report(
    dependencies: Sequence[CrossProjectDependency],
    layers: dict[str, int],
    critical_path: Sequence[str],
    statistics: DependencyStatistics,
    cycles: Sequence[Sequence[str]] = (),
    delay: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Flatten engine results into plain mappings suitable for `yaml.safe_dump`.

    Dates become ISO strings; optional fields that are unset are left out of
    each dependency entry. `delay` is the output of `delay_section`.
    """

    report: dict[str, Any] = {
        "statistics": {
            "total_dependencies": statistics.total_dependencies,
            "critical_dependencies": statistics.critical_dependencies,
            "most_dependent_project": _count(statistics.most_dependent_project),
            "most_blocking_project": _count(statistics.most_blocking_project),
        },
        "critical_path": list(critical_path),
        "layers": dict(layers),
        "cycles": [list(cycle) for cycle in cycles],
        "dependencies": [_dependency(dep) for dep in dependencies],
    }
    if delay is not None:
        report["delay"] = delay
    return report


def delay_section(
    project_id: str,
    delay_days: int,
    impacts: Sequence[ImpactEntry],
    assessments: Sequence[DependencyImpactAssessment],
    advice: Sequence[CircuitBreakerAdvice],
) -> dict[str, Any]:
    """Describe one delay scenario; `advice` pairs up with `assessments` by position."""

    return {
        "project_id": project_id,
        "delay_days": delay_days,
        "impacted_projects": [
            {
                "project_id": entry.project_id,
                "project_name": entry.project_name,
                "original_end_date": entry.original_end_date.isoformat(),
                "new_end_date": entry.new_end_date.isoformat(),
                "delay_days": entry.delay_days,
            }
            for entry in impacts
        ],
        "direct_dependents": [
            {**asdict(assessment), "circuit_breaker": asdict(item)}
            for assessment, item in zip(assessments, advice)
        ],
    }


def _dependency(dep: CrossProjectDependency) -> dict[str, Any]:
    entry: dict[str, Any] = {}
    for key, value in asdict(dep).items():
        if value is None:
            continue
        if key == "created_date":
            value = value.isoformat()
        entry[key] = value
    return entry


def _count(item: ProjectCount | None) -> dict[str, Any] | None:
    return asdict(item) if item is not None else None
