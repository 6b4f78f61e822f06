#!/usr/bin/env python3
"""
Horse recovery CLI.

Rest recommendations from a horse's recent activities.

Usage:
    horse-recovery recommend activities.json --horse-id h1
    horse-recovery recommend activities.json --horse-id h1 --days 14 --json
    horse-recovery thresholds
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from typing import List, Optional

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from .config import RecoveryConfig, get_settings
from .exceptions import HorseRecoveryError
from .models import RecoveryRecommendation, WorkloadLevel
from .service import RecoveryService
from .sources import InMemoryActivitySource, load_activity_rows


console = Console()


def get_level_color(level: WorkloadLevel) -> str:
    """Get rich color for a workload level."""
    colors = {
        WorkloadLevel.NONE: "green",
        WorkloadLevel.LIGHT: "green",
        WorkloadLevel.MODERATE: "yellow",
        WorkloadLevel.INTENSE: "red",
        WorkloadLevel.VERY_INTENSE: "bold red",
    }
    return colors.get(level, "white")


def parse_now(value: Optional[str]) -> Optional[datetime]:
    """Parse the --now option; naive times are rejected."""
    if value is None:
        return None
    try:
        parsed = TypeAdapter(datetime).validate_python(value)
    except PydanticValidationError as e:
        raise argparse.ArgumentTypeError(f"Invalid --now timestamp: {value}") from e
    if parsed.tzinfo is None:
        raise argparse.ArgumentTypeError("--now must include a timezone offset, e.g. 2024-05-01T08:00:00+00:00")
    return parsed


def print_recommendation(horse_id: str, recommendation: RecoveryRecommendation) -> None:
    """Render a recommendation as a rich panel and stats table."""
    color = get_level_color(recommendation.workload_level)
    ride_text = "[green]YES[/green]" if recommendation.can_ride else "[red]NO[/red]"

    summary = f"""
[cyan]Horse:[/cyan]           {horse_id}
[cyan]Workload level:[/cyan]  [{color}]{recommendation.workload_level.value.upper()}[/{color}]
[cyan]Rest:[/cyan]            {recommendation.recommended_rest_hours}h
[cyan]Can ride:[/cyan]        {ride_text}
"""
    if not recommendation.can_ride:
        summary += f"[cyan]Remaining:[/cyan]       {recommendation.remaining_rest_hours}h\n"

    console.print()
    console.print(Panel(summary, title="Recovery Recommendation", box=box.ROUNDED))
    console.print(recommendation.message)

    if recommendation.stats:
        stats = recommendation.stats
        table = Table(title="Last activities", box=box.ROUNDED)
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right")
        table.add_row("Activities", str(stats.activities_count))
        table.add_row("Avg workload", stats.avg_workload)
        table.add_row("Total distance", stats.total_distance_km)
        table.add_row("Total duration", stats.total_duration_formatted)
        table.add_row("Hours since last", stats.hours_since_last_activity)
        console.print()
        console.print(table)
    console.print()


def cmd_recommend(args, config: RecoveryConfig) -> int:
    """Compute a recommendation from an activity file."""
    try:
        now = parse_now(args.now)
        rows = load_activity_rows(args.file)
    except argparse.ArgumentTypeError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1
    except HorseRecoveryError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        return 1

    service = RecoveryService(source=InMemoryActivitySource(rows), config=config)
    payload = {"horse_id": args.horse_id}
    if args.days is not None:
        payload["days"] = args.days

    response = service.handle(payload, now=now)

    if args.json:
        print(json.dumps(response.to_api_dict(), ensure_ascii=False, indent=2))
        return 0 if response.success else 1

    if not response.success:
        console.print(f"[red]Error: {response.error}[/red]")
        return 1

    print_recommendation(args.horse_id, response.data)
    return 0


def cmd_thresholds(args, config: RecoveryConfig) -> int:
    """Show the active threshold table."""
    table = Table(title="Workload thresholds", box=box.ROUNDED)
    table.add_column("Avg workload", justify="right", no_wrap=True)
    table.add_column("Level", no_wrap=True)
    table.add_column("Rest", justify="right", no_wrap=True)
    table.add_column("Message")

    lower = 0.0
    for tier in config.thresholds:
        if tier.max_avg_workload is None:
            bounds = f">= {lower:g}"
        else:
            bounds = f"{lower:g} - <{tier.max_avg_workload:g}"
            lower = tier.max_avg_workload
        color = get_level_color(tier.level)
        table.add_row(bounds, f"[{color}]{tier.level.value}[/{color}]", f"{tier.rest_hours}h", tier.message)

    console.print()
    console.print(table)
    console.print(f"Lookback window: {config.lookback_days} days")
    console.print()
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="horse-recovery",
        description="Rest recommendations from a horse's recent activities",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  horse-recovery recommend activities.json --horse-id h1
  horse-recovery recommend activities.json --horse-id h1 --days 14 --json
  horse-recovery thresholds
        """,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    recommend_p = subparsers.add_parser("recommend", help="Compute a rest recommendation")
    recommend_p.add_argument("file", help="JSON file with activity rows")
    recommend_p.add_argument("--horse-id", required=True, help="Horse to evaluate")
    recommend_p.add_argument(
        "--days", "-d", type=int, default=None, help="Lookback window in days"
    )
    recommend_p.add_argument("--now", default=None, help="Evaluation time (ISO-8601 with offset)")
    recommend_p.add_argument("--json", action="store_true", help="Print the response as JSON")

    subparsers.add_parser("thresholds", help="Show the workload threshold table")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    config = settings.to_recovery_config()

    if args.command == "recommend":
        return cmd_recommend(args, config)
    elif args.command == "thresholds":
        return cmd_thresholds(args, config)
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
