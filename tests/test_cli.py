import datetime as dt

import yaml

from portfolio_dependencies.__main__ import main
from portfolio_dependencies.critical_path import calculate_critical_path
from portfolio_dependencies.detection import detect_cross_project_dependencies
from portfolio_dependencies.graph import layout_network
from portfolio_dependencies.portfolio_models import MilestoneDependency, Project, ResourceRequirement
from portfolio_dependencies.render_network import render_network

PORTFOLIO_YAML = """
projects:
  - id: core
    name: Core platform
    status: active
    start_date: 2026-01-01
    end_date: 2026-03-01
    resource_requirements:
      - resource_id: bay-1
  - id: app
    name: Mobile app
    status: planning
    start_date: 2026-03-01
    end_date: 2026-06-01
    milestone_dependencies:
      - id: app-needs-core
        source_milestone_id: app-start
        target_project_id: core
        target_milestone_id: core-ga
  - id: rig
    name: Test rig
    status: active
    start_date: 2026-02-01
    end_date: 2026-04-01
    resource_requirements:
      - resource_id: bay-1
  - id: legacy
    name: Legacy sunset
    status: completed
    start_date: 2025-01-01
    end_date: 2025-06-01
    resource_requirements:
      - resource_id: bay-1
"""


def _write_portfolio(tmp_path, text=PORTFOLIO_YAML):
    path = tmp_path / "portfolio.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_cli_writes_yaml_report(tmp_path):
    portfolio = _write_portfolio(tmp_path)
    report_path = tmp_path / "out" / "report.yaml"

    code = main([str(portfolio), "--report", str(report_path), "--delay", "core:10"])

    assert code == 0
    report = yaml.safe_load(report_path.read_text(encoding="utf-8"))
    assert [d["id"] for d in report["dependencies"]] == ["app-needs-core", "auto-res-core-rig"]
    assert report["critical_path"] == ["core", "app"]
    assert report["statistics"]["total_dependencies"] == 2
    assert report["statistics"]["most_blocking_project"]["id"] == "core"
    assert report["layers"]["core"] == 0
    assert report["cycles"] == []
    impacted = report["delay"]["impacted_projects"]
    assert [entry["project_id"] for entry in impacted] == ["app", "rig"]
    assert impacted[0]["new_end_date"] == "2026-06-11"
    assert report["delay"]["direct_dependents"][0]["risk_level"] == "high"


def test_cli_prints_report_to_stdout(tmp_path, capsys):
    portfolio = _write_portfolio(tmp_path)

    assert main([str(portfolio)]) == 0

    report = yaml.safe_load(capsys.readouterr().out)
    assert "legacy" not in {d["source_project_id"] for d in report["dependencies"]}
    assert "delay" not in report


def test_cli_renders_svg(tmp_path):
    portfolio = _write_portfolio(tmp_path)
    out_file = tmp_path / "network.svg"

    code = main([str(portfolio), "--report", str(tmp_path / "r.yaml"), "--out", str(out_file), "--no-view"])

    assert code == 0
    assert out_file.exists()
    assert out_file.stat().st_size > 0


def test_cli_reports_validation_errors(tmp_path, capsys):
    portfolio = _write_portfolio(tmp_path, "projects: 3\n")

    assert main([str(portfolio)]) == 2
    assert "Error:" in capsys.readouterr().err


def test_cli_rejects_unknown_delay_project(tmp_path):
    portfolio = _write_portfolio(tmp_path)

    assert main([str(portfolio), "--delay", "ghost:3"]) == 2


def test_cli_missing_file(tmp_path):
    assert main([str(tmp_path / "nope.yaml")]) == 1


def test_renderer_produces_svg(tmp_path):
    start = dt.date(2026, 1, 1)
    a = Project(
        id="a",
        name="A",
        status="active",
        start_date=start,
        end_date=start + dt.timedelta(days=20),
        resource_requirements=[ResourceRequirement(resource_id="r1")],
    )
    b = Project(
        id="b",
        name="B",
        status="active",
        start_date=start,
        end_date=start + dt.timedelta(days=5),
        milestone_dependencies=[
            MilestoneDependency(id="d", source_milestone_id="x", target_project_id="a", target_milestone_id="y")
        ],
    )
    deps = detect_cross_project_dependencies([a, b])
    nodes, edges = layout_network([a, b], deps)

    out_file = tmp_path / "chart.svg"
    render_network(nodes, edges, out_path=str(out_file), title="Portfolio", critical_path=calculate_critical_path([a, b], deps))

    assert out_file.exists()
    assert out_file.stat().st_size > 0
