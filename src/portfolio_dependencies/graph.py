from __future__ import annotations

import logging
from collections import deque
from typing import Sequence

from .portfolio_models import CrossProjectDependency, LayoutEdge, LayoutNode, Project

logger = logging.getLogger(__name__)

# Layout tuning knobs (canvas units).
NODE_WIDTH = 220
NODE_HEIGHT = 100
LEVEL_SPACING = 350
NODE_SPACING_Y = 150
CANVAS_MARGIN = 50
CANVAS_HEIGHT = 800


def build_adjacency(
    projects: Sequence[Project], dependencies: Sequence[CrossProjectDependency]
) -> tuple[dict[str, list[str]], dict[str, int]]:
    """
    Return (dependents, indegree) keyed by project id in project order.

    Edges touching ids outside the snapshot are dropped. Parallel edges are
    kept, each counting towards the target's indegree.
    """

    dependents: dict[str, list[str]] = {p.id: [] for p in projects}
    indegree: dict[str, int] = {p.id: 0 for p in projects}
    for dep in dependencies:
        if dep.source_project_id not in dependents or dep.target_project_id not in indegree:
            continue
        dependents[dep.source_project_id].append(dep.target_project_id)
        indegree[dep.target_project_id] += 1
    return dependents, indegree


def compute_layers(
    projects: Sequence[Project], dependencies: Sequence[CrossProjectDependency]
) -> dict[str, int]:
    """
    Assign every project a 0-based layer using Kahn's algorithm.

    Each full round of the queue forms one layer. Projects caught in a cycle
    are never released by the queue and fall back to layer 0.
    """

    dependents, indegree = build_adjacency(projects, dependencies)
    queue = deque(pid for pid, degree in indegree.items() if degree == 0)
    layers: dict[str, int] = {}
    level = 0

    while queue:
        for _ in range(len(queue)):
            current = queue.popleft()
            layers[current] = level
            for child in dependents[current]:
                indegree[child] -= 1
                if indegree[child] == 0:
                    queue.append(child)
        level += 1

    unplaced = [p.id for p in projects if p.id not in layers]
    if unplaced:
        logger.debug("Projects left on a cycle, placed on layer 0: %s", unplaced)
    for pid in unplaced:
        layers[pid] = 0
    return layers


def layout_network(
    projects: Sequence[Project],
    dependencies: Sequence[CrossProjectDependency],
    canvas_height: float = CANVAS_HEIGHT,
) -> tuple[list[LayoutNode], list[LayoutEdge]]:
    """
    Place projects in columns by layer and connect them with Bézier edges.

    Columns are centred vertically on `canvas_height`; within a column nodes keep
    the order in which layering reached them.
    """

    if not projects:
        return [], []

    names = {p.id: p.name for p in projects}
    groups: dict[int, list[str]] = {}
    for pid, level in compute_layers(projects, dependencies).items():
        groups.setdefault(level, []).append(pid)

    nodes: list[LayoutNode] = []
    for level in sorted(groups):
        ids = groups[level]
        start_y = (canvas_height - len(ids) * NODE_SPACING_Y) / 2
        for index, pid in enumerate(ids):
            nodes.append(
                LayoutNode(
                    id=pid,
                    name=names[pid],
                    level=level,
                    x=level * LEVEL_SPACING + CANVAS_MARGIN,
                    y=start_y + index * NODE_SPACING_Y + CANVAS_MARGIN,
                )
            )

    placed = {node.id: node for node in nodes}
    edges: list[LayoutEdge] = []
    for dep in dependencies:
        source = placed.get(dep.source_project_id)
        target = placed.get(dep.target_project_id)
        if source is None or target is None:
            continue
        x1, y1 = source.x + NODE_WIDTH, source.y + NODE_HEIGHT / 2
        x2, y2 = target.x, target.y + NODE_HEIGHT / 2
        mid_x = x1 + (x2 - x1) / 2
        edges.append(
            LayoutEdge(
                id=dep.id,
                source_project_id=dep.source_project_id,
                target_project_id=dep.target_project_id,
                start=(x1, y1),
                control_1=(mid_x, y1),
                control_2=(mid_x, y2),
                end=(x2, y2),
            )
        )

    return nodes, edges


def find_cycles(dependencies: Sequence[CrossProjectDependency]) -> list[list[str]]:
    """
    Report dependency cycles as closed paths, e.g. ["A", "B", "A"].

    Every back edge found by a depth-first walk yields one cycle, so a project
    can appear in several reported cycles.
    """

    graph: dict[str, list[str]] = {}
    for dep in dependencies:
        graph.setdefault(dep.source_project_id, []).append(dep.target_project_id)

    cycles: list[list[str]] = []
    visited: set[str] = set()
    on_stack: set[str] = set()
    stack: list[str] = []

    def dfs(node: str) -> None:
        visited.add(node)
        on_stack.add(node)
        stack.append(node)

        for neighbor in graph.get(node, []):
            if neighbor not in visited:
                dfs(neighbor)
            elif neighbor in on_stack:
                start = stack.index(neighbor)
                cycles.append(stack[start:] + [neighbor])

        stack.pop()
        on_stack.discard(node)

    for node in list(graph):
        if node not in visited:
            dfs(node)

    if cycles:
        logger.debug("Found %d dependency cycle(s)", len(cycles))
    return cycles
