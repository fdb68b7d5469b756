from __future__ import annotations

import logging
import math
from collections import deque
from datetime import timedelta
from typing import Sequence

from .graph import build_adjacency
from .portfolio_models import CrossProjectDependency, Project

logger = logging.getLogger(__name__)

_DAY = timedelta(days=1)


def project_duration_days(project: Project) -> int:
    """Whole days between start and end, rounded up."""
    return math.ceil((project.end_date - project.start_date) / _DAY)


def calculate_critical_path(
    projects: Sequence[Project], dependencies: Sequence[CrossProjectDependency]
) -> list[str]:
    """
    Return the longest chain of project ids, weighted by project duration.

    Longest-path over the dependency DAG in topological (Kahn) order: a
    project's distance is the summed duration of everything upstream of it on
    its heaviest chain. The path ends at the first project, in input order, with
    the strictly largest distance among projects the queue released. Projects
    on a cycle are never released and cannot end the path. An empty list means
    there is no chain with positive length.
    """

    dependents, indegree = build_adjacency(projects, dependencies)
    durations = {p.id: project_duration_days(p) for p in projects}
    distance = {p.id: 0 for p in projects}
    predecessor: dict[str, str | None] = {p.id: None for p in projects}

    queue = deque(pid for pid, degree in indegree.items() if degree == 0)
    released: set[str] = set()
    while queue:
        current = queue.popleft()
        released.add(current)
        for neighbor in dependents[current]:
            candidate = distance[current] + durations[current]
            if candidate > distance[neighbor]:
                distance[neighbor] = candidate
                predecessor[neighbor] = current
            indegree[neighbor] -= 1
            if indegree[neighbor] == 0:
                queue.append(neighbor)

    end: str | None = None
    longest = 0
    for pid, value in distance.items():
        if pid in released and value > longest:
            longest = value
            end = pid

    path: list[str] = []
    while end is not None:
        path.append(end)
        end = predecessor[end]
    path.reverse()

    logger.debug("Critical path %s spans %d day(s) before its last project", path, longest)
    return path
