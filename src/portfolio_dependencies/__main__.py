from __future__ import annotations

import argparse
import logging
import sys
import webbrowser
from pathlib import Path

import yaml

from .critical_path import calculate_critical_path
from .dependency_stats import get_dependency_statistics
from .detection import detect_cross_project_dependencies
from .graph import compute_layers, find_cycles, layout_network
from .impact import assess_dependency_impact, recommend_circuit_breaker, simulate_delay_impact
from .parse_portfolio import PortfolioValidationError, load_portfolio
from .portfolio_models import Project
from .render_network import render_network
from .report import build_report, delay_section

logger = logging.getLogger(__name__)


def _parse_delay(value: str) -> tuple[str, int]:
    project_id, sep, days = value.rpartition(":")
    if not sep or not project_id:
        raise argparse.ArgumentTypeError(f"invalid delay '{value}', expected PROJECT_ID:DAYS")
    try:
        delay_days = int(days)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid delay '{value}', DAYS must be an integer") from exc
    if delay_days <= 0:
        raise argparse.ArgumentTypeError(f"invalid delay '{value}', DAYS must be positive")
    return project_id, delay_days


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="portfolio-deps",
        description="Cross-project dependency analysis",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("portfolio", help="Path to portfolio YAML")
    parser.add_argument("--delay", type=_parse_delay, help="Simulate a delay, given as PROJECT_ID:DAYS")
    parser.add_argument("--report", help="Write the YAML report to this path instead of stdout")
    parser.add_argument("--out", help="Render the dependency network to this SVG path")
    parser.add_argument("--title", default="Portfolio dependencies", help="Title of the rendered network")
    parser.add_argument(
        "--view",
        dest="view",
        action="store_true",
        default=True,
        help="Best-effort open the SVG after rendering",
    )
    parser.add_argument(
        "--no-view",
        dest="view",
        action="store_false",
        help="Do not open the SVG after rendering",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")
    portfolio_path = Path(args.portfolio)

    try:
        projects: list[Project] = load_portfolio(str(portfolio_path))
    except (yaml.YAMLError, PortfolioValidationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    except FileNotFoundError:
        print(f"Error: portfolio file not found: {portfolio_path}", file=sys.stderr)
        return 1
    except Exception as exc:  # Unexpected
        print(f"Unexpected error while loading portfolio: {exc}", file=sys.stderr)
        return 1

    if args.delay is not None and args.delay[0] not in {p.id for p in projects}:
        print(f"Error: unknown project '{args.delay[0]}' in --delay", file=sys.stderr)
        return 2

    dependencies = detect_cross_project_dependencies(projects)
    critical_path = calculate_critical_path(projects, dependencies)
    logger.info("%d projects, %d dependencies", len(projects), len(dependencies))

    delay = None
    if args.delay is not None:
        project_id, delay_days = args.delay
        delayed = next(p for p in projects if p.id == project_id)
        assessments = assess_dependency_impact(project_id, delay_days, projects, dependencies, critical_path)
        delay = delay_section(
            project_id,
            delay_days,
            simulate_delay_impact(project_id, delay_days, projects, dependencies),
            assessments,
            [recommend_circuit_breaker(delayed, assessment) for assessment in assessments],
        )

    report = build_report(
        dependencies=dependencies,
        layers=compute_layers(projects, dependencies),
        critical_path=critical_path,
        statistics=get_dependency_statistics(projects, dependencies),
        cycles=find_cycles(dependencies),
        delay=delay,
    )
    text = yaml.safe_dump(report, sort_keys=False, allow_unicode=True)
    if args.report:
        out = Path(args.report)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(text, encoding="utf-8")
    else:
        sys.stdout.write(text)

    if args.out:
        if not projects:
            print("Error: nothing to render, portfolio has no projects", file=sys.stderr)
            return 2
        nodes, edges = layout_network(projects, dependencies)
        try:
            render_network(nodes, edges, out_path=args.out, title=args.title, critical_path=critical_path)
        except Exception as exc:
            print(f"Unexpected error while rendering: {exc}", file=sys.stderr)
            return 1

        if args.view:
            try:
                webbrowser.open(Path(args.out).resolve().as_uri())
            except Exception:
                pass

    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
