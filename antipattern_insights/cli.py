"""
Command line entry point.

    antipattern-insights refresh [--json]
    antipattern-insights chart KIND [--service S ...] [--pattern P ...]
    antipattern-insights report
    antipattern-insights serve [--host H] [--port P]
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence

from antipattern_insights.core.config import InsightsConfig, get_config
from antipattern_insights.core.constants import ChartKind
from antipattern_insights.core.exceptions import InsightPipelineError
from antipattern_insights.core.logging import configure_logging, get_logger
from antipattern_insights.detectors.client import AntiPatternClient
from antipattern_insights.detectors.registry import build_detector_specs
from antipattern_insights.detectors.report import build_report
from antipattern_insights.insights.charts import summarize
from antipattern_insights.insights.pipeline import DashboardState, refresh
from antipattern_insights.insights.severity import SeverityThresholds

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="antipattern-insights",
        description="Anti-pattern insight aggregation for microservice architectures",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--config", type=str, default=None, help="Path to config.json")
    parser.add_argument("--log-json", action="store_true", help="Log one JSON object per line")

    commands = parser.add_subparsers(dest="command", required=True)

    refresh_cmd = commands.add_parser("refresh", help="Fetch every detector and summarize the insights")
    refresh_cmd.add_argument("--json", action="store_true", help="Print the insights as JSON")

    chart_cmd = commands.add_parser("chart", help="Print one chart aggregate as JSON")
    chart_cmd.add_argument("kind", choices=[k.value for k in ChartKind])
    chart_cmd.add_argument("--service", action="append", default=[], help="Restrict to a service (repeatable)")
    chart_cmd.add_argument("--pattern", action="append", default=[], help="Restrict to a pattern (repeatable)")

    commands.add_parser("report", help="Print the anti-pattern report from the aggregate endpoint")

    serve_cmd = commands.add_parser("serve", help="Run the dashboard HTTP API")
    serve_cmd.add_argument("--host", default=None, help="Host to bind to")
    serve_cmd.add_argument("--port", type=int, default=None, help="Port to run on")
    serve_cmd.add_argument("--no-access-log", action="store_true", help="Disable request logging")
    serve_cmd.add_argument("--no-refresh", action="store_true", help="Skip the refresh on startup")

    return parser


def _load_state(config: InsightsConfig, client: AntiPatternClient) -> DashboardState:
    specs = build_detector_specs(client, config.detectors)
    return refresh(
        DashboardState(),
        specs,
        max_workers=config.detectors.max_workers,
        thresholds=SeverityThresholds.from_config(config.severity),
    )


def _print_summary(state: DashboardState) -> None:
    stats = summarize(state.filtered_view())
    print(f"Insights: {stats['total']} (total count {stats['total_count']})")
    print("\nBy severity:")
    for severity, n in stats["by_severity"].items():
        print(f"  {severity:<8} {n:>5}")
    print("\nBy pattern:")
    for pattern, n in stats["by_pattern"].items():
        print(f"  {pattern:<36} {n:>5}")
    if state.failed_detectors:
        print(f"\nFailed detectors: {', '.join(state.failed_detectors)}")


def _cmd_refresh(args: argparse.Namespace, config: InsightsConfig) -> int:
    with AntiPatternClient(config=config.detectors) as client:
        state = _load_state(config, client)
    if state.error:
        print(f"Refresh failed: {state.error}", file=sys.stderr)
        return 1
    if args.json:
        print(json.dumps({
            "insights": [i.to_dict() for i in state.insights],
            "failed_detectors": list(state.failed_detectors),
            "last_refreshed": state.last_refreshed,
        }, indent=2))
    else:
        _print_summary(state)
    return 0


def _cmd_chart(args: argparse.Namespace, config: InsightsConfig) -> int:
    with AntiPatternClient(config=config.detectors) as client:
        state = _load_state(config, client)
    if state.error:
        print(f"Refresh failed: {state.error}", file=sys.stderr)
        return 1
    selection = state.selection
    if args.service:
        selection = selection.with_services(args.service)
    if args.pattern:
        selection = selection.with_patterns(args.pattern)
    aggregate = state.with_selection(selection).chart(args.kind)
    print(aggregate.model_dump_json(indent=2))
    return 0


def _cmd_report(args: argparse.Namespace, config: InsightsConfig) -> int:
    with AntiPatternClient(config=config.detectors) as client:
        aggregate = client.fetch_all()
    if aggregate is None:
        print("Anti-pattern analysis API unavailable", file=sys.stderr)
        return 1
    sections = build_report(aggregate)
    if not sections:
        print("No anti-patterns detected.")
    for section in sections:
        print(f"\n{section.title}\n{'=' * len(section.title)}")
        print(section.description)
        print(" | ".join(section.headers))
        for row in section.rows:
            print(" | ".join(row))
    return 0


def _cmd_serve(args: argparse.Namespace, config: InsightsConfig) -> int:
    import uvicorn

    from antipattern_insights.api.app import create_app

    app = create_app(
        config=config,
        refresh_on_startup=False if args.no_refresh else None,
        access_log=not args.no_access_log,
    )
    host = args.host or config.dashboard.host
    port = args.port or config.dashboard.port
    print(f"\n  Dashboard API: http://{host}:{port}\n  Press Ctrl+C to stop\n")
    uvicorn.run(app, host=host, port=port, log_level="warning", access_log=False)
    return 0


COMMANDS = {
    "refresh": _cmd_refresh,
    "chart": _cmd_chart,
    "report": _cmd_report,
    "serve": _cmd_serve,
}


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(level=logging.WARNING, verbose=args.verbose, json_format=args.log_json)

    try:
        config = InsightsConfig.from_file(args.config) if args.config else get_config()
        return COMMANDS[args.command](args, config)
    except InsightPipelineError as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
