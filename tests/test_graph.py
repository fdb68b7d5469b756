import datetime as dt

from portfolio_dependencies.graph import (
    CANVAS_MARGIN,
    LEVEL_SPACING,
    NODE_HEIGHT,
    NODE_SPACING_Y,
    NODE_WIDTH,
    compute_layers,
    find_cycles,
    layout_network,
)
from portfolio_dependencies.portfolio_models import CrossProjectDependency, Project

CREATED = dt.datetime(2026, 1, 1, tzinfo=dt.timezone.utc)


def _project(pid):
    return Project(
        id=pid,
        name=pid.upper(),
        status="active",
        start_date=dt.date(2026, 1, 1),
        end_date=dt.date(2026, 1, 11),
    )


def _dep(source, target):
    return CrossProjectDependency(
        id=f"{source}-{target}",
        source_project_id=source,
        source_project_name=source.upper(),
        target_project_id=target,
        target_project_name=target.upper(),
        dependency_type="finish-to-start",
        description="",
        created_date=CREATED,
    )


def test_layers_follow_longest_chain_of_predecessors():
    projects = [_project(p) for p in "abcd"]
    deps = [_dep("a", "b"), _dep("b", "c"), _dep("a", "c")]

    layers = compute_layers(projects, deps)

    assert layers == {"a": 0, "d": 0, "b": 1, "c": 2}


def test_cycle_members_fall_back_to_layer_zero():
    projects = [_project(p) for p in "abc"]
    deps = [_dep("a", "b"), _dep("b", "a"), _dep("c", "a")]

    layers = compute_layers(projects, deps)

    assert layers == {"c": 0, "a": 0, "b": 0}


def test_layers_ignore_edges_to_unknown_projects():
    projects = [_project("a")]

    assert compute_layers(projects, [_dep("ghost", "a"), _dep("a", "ghost")]) == {"a": 0}


def test_layout_places_columns_by_layer():
    projects = [_project(p) for p in "abc"]
    deps = [_dep("a", "b"), _dep("a", "c")]

    nodes, edges = layout_network(projects, deps, canvas_height=800)

    by_id = {node.id: node for node in nodes}
    assert by_id["a"].level == 0
    assert by_id["a"].x == CANVAS_MARGIN
    assert by_id["a"].y == (800 - NODE_SPACING_Y) / 2 + CANVAS_MARGIN
    assert by_id["b"].x == LEVEL_SPACING + CANVAS_MARGIN
    assert by_id["c"].y - by_id["b"].y == NODE_SPACING_Y

    edge = edges[0]
    assert edge.id == "a-b"
    assert edge.start == (by_id["a"].x + NODE_WIDTH, by_id["a"].y + NODE_HEIGHT / 2)
    assert edge.end == (by_id["b"].x, by_id["b"].y + NODE_HEIGHT / 2)
    assert edge.control_1[0] == edge.control_2[0] == (edge.start[0] + edge.end[0]) / 2


def test_layout_of_empty_portfolio_is_empty():
    assert layout_network([], []) == ([], [])


def test_find_cycles_reports_closed_paths():
    deps = [_dep("a", "b"), _dep("b", "c"), _dep("c", "a"), _dep("c", "d")]

    assert find_cycles(deps) == [["a", "b", "c", "a"]]


def test_find_cycles_on_dag_is_empty():
    assert find_cycles([_dep("a", "b"), _dep("a", "c"), _dep("b", "c")]) == []
