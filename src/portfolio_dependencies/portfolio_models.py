from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Literal


ProjectStatus = Literal["planning", "active", "on-hold", "completed"]
"""Lifecycle states a portfolio project can be in."""

DependencyType = Literal["finish-to-start", "start-to-start", "finish-to-finish", "start-to-finish"]
"""Canonical dependency types emitted by the detector."""

RiskLevel = Literal["low", "medium", "high"]

PROJECT_STATUSES: tuple[str, ...] = ("planning", "active", "on-hold", "completed")


@dataclass
class ResourceRequirement:
    """Planned demand for a shared resource (people, machine, bay, ...)."""

    resource_id: str
    count: int = 1
    duration: int | None = None
    unit: str | None = None


@dataclass
class Milestone:
    """Checkpoint inside a project that other projects can depend on."""

    id: str
    name: str
    date: date
    completed: bool = False
    description: str | None = None


@dataclass
class MilestoneDependency:
    """
    User-declared link from a milestone of the declaring project to a milestone
    of another project.

    The project that declares the link is the successor; `target_project_id`
    names the predecessor it waits on.
    """

    id: str
    source_milestone_id: str
    target_project_id: str
    target_milestone_id: str
    type: str = "FS"
    lag: int | None = None
    description: str | None = None


@dataclass
class Project:
    """Portfolio project record as handed over by the project store."""

    id: str
    name: str
    status: ProjectStatus
    start_date: date
    end_date: date
    resource_requirements: list[ResourceRequirement] = field(default_factory=list)
    milestones: list[Milestone] = field(default_factory=list)
    milestone_dependencies: list[MilestoneDependency] = field(default_factory=list)

    def find_milestone(self, milestone_id: str | None) -> Milestone | None:
        """Best-effort milestone lookup; None for unknown ids."""
        if milestone_id is None:
            return None
        for milestone in self.milestones:
            if milestone.id == milestone_id:
                return milestone
        return None


@dataclass(frozen=True)
class CrossProjectDependency:
    """
    Derived edge between two projects.

    Source is the predecessor (must finish/start first), target is the blocked
    successor. `critical_path` is never set by the detector.
    """

    id: str
    source_project_id: str
    source_project_name: str
    target_project_id: str
    target_project_name: str
    dependency_type: DependencyType
    description: str
    created_date: datetime
    source_milestone_id: str | None = None
    source_milestone_name: str | None = None
    target_milestone_id: str | None = None
    target_milestone_name: str | None = None
    lag_days: int | None = None
    critical_path: bool = False
    status: Literal["active", "resolved", "broken"] = "active"


@dataclass(frozen=True)
class ImpactEntry:
    """Recomputed end date of one downstream project after a delay."""

    project_id: str
    project_name: str
    original_end_date: date
    new_end_date: date
    delay_days: int


@dataclass(frozen=True)
class ProjectCount:
    id: str
    name: str
    count: int


@dataclass(frozen=True)
class DependencyStatistics:
    total_dependencies: int
    critical_dependencies: int
    most_dependent_project: ProjectCount | None
    most_blocking_project: ProjectCount | None


@dataclass(frozen=True)
class LayoutNode:
    """Project box position in the layered network (top-left corner)."""

    id: str
    name: str
    level: int
    x: float
    y: float


Point = tuple[float, float]


@dataclass(frozen=True)
class LayoutEdge:
    """Cubic Bézier connector from source node's right edge to target's left edge."""

    id: str
    source_project_id: str
    target_project_id: str
    start: Point
    control_1: Point
    control_2: Point
    end: Point


@dataclass(frozen=True)
class DependencyImpactAssessment:
    affected_project_id: str
    affected_project_name: str
    delay_days: int
    risk_level: RiskLevel
    recommendation: str


@dataclass(frozen=True)
class CircuitBreakerAdvice:
    """Whether to suspend a waiting project instead of paying for idle time."""

    should_suspend: bool
    estimated_savings: int
    recommendation: str
