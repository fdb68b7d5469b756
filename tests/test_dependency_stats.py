import datetime as dt

from portfolio_dependencies.dependency_stats import get_dependency_statistics
from portfolio_dependencies.portfolio_models import (
    CrossProjectDependency,
    DependencyStatistics,
    Project,
    ProjectCount,
)

CREATED = dt.datetime(2026, 1, 1, tzinfo=dt.timezone.utc)


def _project(pid):
    return Project(
        id=pid,
        name=f"Project {pid}",
        status="active",
        start_date=dt.date(2026, 1, 1),
        end_date=dt.date(2026, 2, 1),
    )


def _dep(source, target):
    return CrossProjectDependency(
        id=f"{source}-{target}",
        source_project_id=source,
        source_project_name=source,
        target_project_id=target,
        target_project_name=target,
        dependency_type="finish-to-start",
        description="",
        created_date=CREATED,
    )


def test_empty_portfolio_statistics():
    assert get_dependency_statistics([], []) == DependencyStatistics(
        total_dependencies=0,
        critical_dependencies=0,
        most_dependent_project=None,
        most_blocking_project=None,
    )


def test_projects_without_dependencies_have_no_leaders():
    stats = get_dependency_statistics([_project("A"), _project("B")], [])

    assert stats.most_dependent_project is None
    assert stats.most_blocking_project is None


def test_fan_out_project_is_most_blocking():
    projects = [_project("A"), _project("B"), _project("C")]

    stats = get_dependency_statistics(projects, [_dep("A", "B"), _dep("A", "C")])

    assert stats.total_dependencies == 2
    assert stats.critical_dependencies == 0
    assert stats.most_blocking_project == ProjectCount(id="A", name="Project A", count=2)
    # B and C tie on one incoming edge; B comes first.
    assert stats.most_dependent_project == ProjectCount(id="B", name="Project B", count=1)


def test_flagged_dependencies_are_counted_as_critical():
    projects = [_project("A"), _project("B")]
    flagged = CrossProjectDependency(
        id="x",
        source_project_id="A",
        source_project_name="A",
        target_project_id="B",
        target_project_name="B",
        dependency_type="finish-to-start",
        description="",
        created_date=CREATED,
        critical_path=True,
    )

    stats = get_dependency_statistics(projects, [flagged, _dep("A", "B")])

    assert stats.critical_dependencies == 1


def test_unknown_project_gets_empty_name():
    stats = get_dependency_statistics([_project("A")], [_dep("ghost", "A"), _dep("ghost", "A")])

    assert stats.most_blocking_project == ProjectCount(id="ghost", name="", count=2)
