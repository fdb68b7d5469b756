from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass
from typing import Any

import yaml

from .portfolio_models import (
    PROJECT_STATUSES,
    Milestone,
    MilestoneDependency,
    Project,
    ResourceRequirement,
)


class PortfolioValidationError(Exception):
    """Raised when a portfolio file is malformed (missing fields, bad types, duplicate ids)."""


@dataclass(frozen=True)
class _Path:
    """Helper to produce readable YAML path strings like projects[0].milestones[1]."""

    parts: tuple[str, ...] = ()

    def child(self, segment: str) -> "_Path":
        return _Path(self.parts + (segment,))

    def __str__(self) -> str:  # pragma: no cover - trivial
        return ".".join(self.parts) if self.parts else "root"


def load_portfolio(path: str) -> list[Project]:
    """Load the project list from a YAML file at the given path."""

    with open(path, "r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)

    return parse_portfolio(raw)


def parse_portfolio(data: Any) -> list[Project]:
    """Validate an already-decoded YAML document and build Project records."""

    path = _Path()
    if not isinstance(data, dict):
        raise PortfolioValidationError(f"{path}: expected mapping at top level")
    _assert_allowed_keys(data, {"projects"}, path)

    projects_raw = data.get("projects")
    if projects_raw is None:
        raise PortfolioValidationError(f"{path}: missing required field 'projects'")
    if not isinstance(projects_raw, list):
        raise PortfolioValidationError(f"{path.child('projects')}: expected list")

    ids: set[str] = set()
    projects: list[Project] = []
    for idx, project_raw in enumerate(projects_raw):
        project = _parse_project(project_raw, path.child(f"projects[{idx}]"))
        if project.id in ids:
            raise PortfolioValidationError(f"projects[{idx}].id: duplicate project id '{project.id}'")
        ids.add(project.id)
        projects.append(project)
    return projects


def _parse_project(data: Any, path: _Path) -> Project:
    if not isinstance(data, dict):
        raise PortfolioValidationError(f"{path}: expected mapping for project")

    _assert_allowed_keys(
        data,
        {
            "id",
            "name",
            "status",
            "start_date",
            "end_date",
            "resource_requirements",
            "milestones",
            "milestone_dependencies",
        },
        path,
    )
    project_id = _require_str(data, "id", path)
    name = _require_str(data, "name", path)
    status = _require_str(data, "status", path)
    if status not in PROJECT_STATUSES:
        raise PortfolioValidationError(f"{path.child('status')}: expected one of {list(PROJECT_STATUSES)}")
    start_date = _parse_date(_require_value(data, "start_date", path), path.child("start_date"))
    end_date = _parse_date(_require_value(data, "end_date", path), path.child("end_date"))

    requirements = [
        _parse_requirement(item, item_path)
        for item, item_path in _iter_list(data, "resource_requirements", path)
    ]
    milestones = [_parse_milestone(item, item_path) for item, item_path in _iter_list(data, "milestones", path)]
    links = [
        _parse_milestone_dependency(item, item_path)
        for item, item_path in _iter_list(data, "milestone_dependencies", path)
    ]

    return Project(
        id=project_id,
        name=name,
        status=status,  # type: ignore[arg-type]
        start_date=start_date,
        end_date=end_date,
        resource_requirements=requirements,
        milestones=milestones,
        milestone_dependencies=links,
    )


def _parse_requirement(data: Any, path: _Path) -> ResourceRequirement:
    if not isinstance(data, dict):
        raise PortfolioValidationError(f"{path}: expected mapping for resource requirement")
    _assert_allowed_keys(data, {"resource_id", "count", "duration", "unit"}, path)

    count = data.get("count", 1)
    if not isinstance(count, int):
        raise PortfolioValidationError(f"{path.child('count')}: expected integer")
    duration = data.get("duration")
    if duration is not None and not isinstance(duration, int):
        raise PortfolioValidationError(f"{path.child('duration')}: expected integer")
    unit = data.get("unit")
    if unit is not None and not isinstance(unit, str):
        raise PortfolioValidationError(f"{path.child('unit')}: expected string")

    return ResourceRequirement(
        resource_id=_require_str(data, "resource_id", path),
        count=count,
        duration=duration,
        unit=unit,
    )


def _parse_milestone(data: Any, path: _Path) -> Milestone:
    if not isinstance(data, dict):
        raise PortfolioValidationError(f"{path}: expected mapping for milestone")
    _assert_allowed_keys(data, {"id", "name", "date", "completed", "description"}, path)

    completed = data.get("completed", False)
    if not isinstance(completed, bool):
        raise PortfolioValidationError(f"{path.child('completed')}: expected boolean")

    return Milestone(
        id=_require_str(data, "id", path),
        name=_require_str(data, "name", path),
        date=_parse_date(_require_value(data, "date", path), path.child("date")),
        completed=completed,
        description=_optional_str(data, "description", path),
    )


def _parse_milestone_dependency(data: Any, path: _Path) -> MilestoneDependency:
    if not isinstance(data, dict):
        raise PortfolioValidationError(f"{path}: expected mapping for milestone dependency")
    _assert_allowed_keys(
        data,
        {"id", "source_milestone_id", "target_project_id", "target_milestone_id", "type", "lag", "description"},
        path,
    )

    lag = data.get("lag")
    if lag is not None and not isinstance(lag, int):
        raise PortfolioValidationError(f"{path.child('lag')}: expected integer days")

    return MilestoneDependency(
        id=_require_str(data, "id", path),
        source_milestone_id=_require_str(data, "source_milestone_id", path),
        target_project_id=_require_str(data, "target_project_id", path),
        target_milestone_id=_require_str(data, "target_milestone_id", path),
        type=_optional_str(data, "type", path) or "FS",
        lag=lag,
        description=_optional_str(data, "description", path),
    )


def _iter_list(data: dict[str, Any], key: str, path: _Path) -> list[tuple[Any, _Path]]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise PortfolioValidationError(f"{path.child(key)}: expected list")
    return [(item, path.child(f"{key}[{idx}]")) for idx, item in enumerate(value)]


def _assert_allowed_keys(data: dict[str, Any], allowed: set[str], path: _Path) -> None:
    extras = sorted(set(data.keys()) - allowed)
    if extras:
        raise PortfolioValidationError(f"{path}: unexpected fields {extras}")


def _require_str(data: dict[str, Any], key: str, path: _Path) -> str:
    value = _require_value(data, key, path)
    # YAML reads bare ids like `7` as integers.
    if isinstance(value, int) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str) or not value.strip():
        raise PortfolioValidationError(f"{path.child(key)}: expected non-empty string")
    return value


def _optional_str(data: dict[str, Any], key: str, path: _Path) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise PortfolioValidationError(f"{path.child(key)}: expected string")
    return value


def _require_value(data: dict[str, Any], key: str, path: _Path) -> Any:
    if key not in data:
        raise PortfolioValidationError(f"{path}: missing required field '{key}'")
    return data[key]


def _parse_date(value: Any, path: _Path) -> _dt.date:
    # safe_load already turns unquoted YYYY-MM-DD into date objects.
    if isinstance(value, _dt.datetime):
        return value.date()
    if isinstance(value, _dt.date):
        return value
    if not isinstance(value, str):
        raise PortfolioValidationError(f"{path}: expected YYYY-MM-DD date")
    try:
        return _dt.date.fromisoformat(value)
    except ValueError as exc:
        raise PortfolioValidationError(f"{path}: expected YYYY-MM-DD date") from exc
