"""Command line interface for browsing and maintaining leads."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Iterable, List, Optional

from .config import AppConfig, ConfigurationError
from .filters import FilterState
from .ingestion import SpreadsheetSource, export_leads, export_summary
from .manager import LeadManager
from .models import DashboardSummary, LabelCount, Lead
from .sorting import SortDirection, SortPreferenceStore
from .stats import summarize
from .store import SheetStore, StoreError

LOGGER = logging.getLogger(__name__)


def build_parser(prog: Optional[str] = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog, description="Browse, filter and summarise sales leads")
    parser.add_argument(
        "--config",
        help="Path to the configuration file (YAML or JSON)",
    )
    parser.add_argument(
        "--input",
        help="Read leads from a spreadsheet export (CSV or XLSX) instead of the remote store",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (e.g. DEBUG, INFO, WARNING)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    summary = commands.add_parser("summary", help="Print the dashboard tiles")
    summary.add_argument("--hour-bucket", type=int, choices=[1, 3, 6, 12], help="Hour grouping for peak times")
    summary.add_argument("--json", action="store_true", help="Print the summary as JSON")
    summary.add_argument("--export", help="Also write the summary to a CSV or XLSX file")
    _add_filter_arguments(summary)

    listing = commands.add_parser("list", help="List leads matching the given filters")
    _add_filter_arguments(listing)
    listing.add_argument("--sort", choices=[d.value for d in SortDirection], help="Sort order (remembered)")

    export = commands.add_parser("export", help="Write matching leads to a CSV or XLSX file")
    export.add_argument("output", help="Destination file")
    _add_filter_arguments(export)
    export.add_argument("--sort", choices=[d.value for d in SortDirection], help="Sort order (remembered)")

    commands.add_parser("groups", help="List the assignment groups")

    add = commands.add_parser("add", help="Create a lead in the remote store")
    add.add_argument("--phone", required=True)
    add.add_argument("--name", default="")
    add.add_argument("--country", default="")
    add.add_argument("--place", default="")
    add.add_argument("--quality", default="")
    add.add_argument("--industry", default="")
    add.add_argument("--notes", default="")
    add.add_argument("--status", default="NEW")
    add.add_argument("--forward-to", default="")
    add.add_argument("--date-time", default="", help="Creation time, defaults to now")

    delete = commands.add_parser("delete", help="Delete a lead from the remote store by uid")
    delete.add_argument("uid")
    return parser


def _add_filter_arguments(parser: argparse.ArgumentParser) -> None:
    group = parser.add_argument_group("filters")
    group.add_argument("--search", help="Case-insensitive text search")
    group.add_argument("--status")
    group.add_argument("--place")
    group.add_argument("--country")
    group.add_argument("--quality")
    group.add_argument("--team", help="Group name, 'forwarded' or 'removed'")
    group.add_argument("--pending", action="store_true", help="Only leads not forwarded yet")
    group.add_argument("--hour", help="Hour range such as '9:00 AM - 10:00 AM'")
    group.add_argument("--date", help="Calendar day in YYYY-MM-DD form")


def filter_state_from_args(args: argparse.Namespace) -> FilterState:
    return FilterState(
        search=args.search,
        status=args.status,
        place=args.place,
        country=args.country,
        quality=args.quality,
        team=args.team,
        pending=bool(args.pending),
        hour=args.hour,
        date=args.date,
    )


def build_manager(args: argparse.Namespace, config: AppConfig) -> LeadManager:
    if args.input:
        source = SpreadsheetSource(args.input)
    else:
        if not config.store.script_url:
            raise ConfigurationError("No store.script_url configured; pass --input to read a spreadsheet instead")
        source = SheetStore(
            config.store.script_url,
            settings_url=config.store.settings_url,
            timeout=config.store.timeout_seconds,
        )
    return LeadManager(source, vocabulary=config.vocabulary, raise_on_error=True)


def _resolve_direction(args: argparse.Namespace, preferences: SortPreferenceStore) -> SortDirection:
    if getattr(args, "sort", None):
        direction = SortDirection.parse(args.sort)
        preferences.save(direction)
        return direction
    return preferences.load()


def _format_ranked(title: str, entries: Iterable[LabelCount]) -> List[str]:
    lines = [f"{title}:"]
    entries = list(entries)
    if not entries:
        lines.append("  (no data)")
    for entry in entries:
        lines.append(f"  {entry.label:<28} {entry.count:>5}")
    return lines


def format_summary(summary: DashboardSummary) -> str:
    lines = [
        f"Total leads:      {summary.total} ({summary.recent} this week)",
        f"Pending:          {summary.pending} ({summary.pending_rate}%)",
        f"Forwarded:        {summary.forwarded} ({summary.forwarded_rate}%)",
        f"Removed/lost:     {summary.removed} ({summary.removed_rate}%)",
        f"Genuine leads:    {summary.genuine}",
        f"Conversion rate:  {summary.conversion_rate}%",
        f"Active pipeline:  {summary.active_pipeline}",
        "Pipeline:",
    ]
    lines.extend(f"  {status:<28} {count:>5}" for status, count in summary.pipeline.items())
    lines.extend(_format_ranked("Top places", summary.top_places))
    lines.extend(_format_ranked("Top countries", summary.top_countries))
    lines.extend(_format_ranked("Lead quality", summary.top_qualities))
    lines.extend(_format_ranked("Top industries", summary.top_industries))
    lines.extend(_format_ranked("Peak hours", summary.peak_hours))
    lines.append("Teams:")
    if not summary.teams:
        lines.append("  (no data)")
    for team in summary.teams:
        lines.append(f"  {team.team:<28} {team.total:>5} leads, {team.won} won ({team.win_rate}%), {team.genuine} genuine")
    busiest = [day for day in summary.daily_trend if day.total]
    lines.append(f"Daily trend (last {len(summary.daily_trend)} days):")
    if not busiest:
        lines.append("  (no data)")
    for day in busiest:
        lines.append(f"  {day.day.isoformat()}  {day.total:>5} total, {day.forwarded} forwarded")
    return "\n".join(lines)


def format_lead_row(lead: Lead) -> str:
    return " | ".join(
        [
            lead.sl_no or "-",
            lead.name or "(no name)",
            lead.phone,
            lead.country or "-",
            lead.current_status.value,
            lead.forwarded_to or "Not assigned",
            lead.date_time or "-",
            lead.uid,
        ]
    )


def _run(args: argparse.Namespace, config: AppConfig) -> int:
    manager = build_manager(args, config)
    preferences = SortPreferenceStore(config.preferences_path)

    if args.command == "groups":
        manager.load()
        for name in manager.group_names:
            print(name)
        return 0

    if args.command in {"add", "delete"} and args.input:
        raise ConfigurationError(f"The {args.command} command requires the remote store")

    if args.command == "delete":
        manager.reload()
        if not manager.delete_lead(args.uid):
            LOGGER.error("No lead with uid %s", args.uid)
            return 1
        print(f"Deleted {args.uid}")
        return 0

    manager.reload()

    if args.command == "add":
        lead = manager.create_lead(
            {
                "phone": args.phone,
                "name": args.name,
                "country": args.country,
                "place": args.place,
                "leadQuality": args.quality,
                "businessIndustry": args.industry,
                "specialNotes": args.notes,
                "currentStatus": args.status,
                "forwardedTo": args.forward_to,
                "dateTime": args.date_time,
            }
        )
        print(f"Created lead {lead.uid} (SL No {lead.sl_no})")
        return 0

    state = filter_state_from_args(args)

    if args.command == "summary":
        summary = summarize(
            manager.view(state),
            hour_width=args.hour_bucket or config.dashboard.hour_bucket,
            trend_days=config.dashboard.trend_days,
        )
        if args.json:
            print(json.dumps(summary.as_dict(), indent=2))
        else:
            print(format_summary(summary))
        if args.export:
            path = export_summary(summary, args.export)
            LOGGER.info("Summary written to %s", path.resolve())
        return 0

    direction = _resolve_direction(args, preferences)
    leads = manager.view(state, direction)

    if args.command == "list":
        for lead in leads:
            print(format_lead_row(lead))
        LOGGER.info("%s of %s leads shown", len(leads), len(manager.leads))
        return 0

    if args.command == "export":
        path = export_leads(leads, args.output)
        LOGGER.info("Exported %s leads to %s", len(leads), Path(path).resolve())
        return 0

    raise ConfigurationError(f"Unknown command {args.command!r}")  # pragma: no cover - argparse guards this


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    try:
        config = AppConfig.load(args.config)
        return _run(args, config)
    except (ConfigurationError, StoreError, ValueError) as exc:
        LOGGER.error("%s", exc)
        return 1
    except OSError as exc:
        LOGGER.error("Could not access %s: %s", exc.filename or "a local file", exc.strerror or exc)
        return 1


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
