"""
Command-line entrypoint.

Usage:
    python -m scalelog import export.csv --profile anna [--activity-level moderately_active]
    python -m scalelog chart --profile anna [--points 13] [--method simple] [--target 75]

`import` creates the profile if it doesn't exist yet. `chart` prints the
downsampled series and the target weight line as JSON.
"""
import argparse
import json
import logging
import sys
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)


def _run_import(args: argparse.Namespace) -> int:
    from sqlmodel import Session

    from scalelog.config import get_settings
    from scalelog.db.engine import get_engine
    from scalelog.db.store import get_or_create_profile
    from scalelog.importer.csv_format import CsvImportError
    from scalelog.importer.import_service import MeasurementImportService

    settings = get_settings()
    engine = get_engine()
    activity_level = args.activity_level or settings.default_activity_level

    with Session(engine) as s:
        profile = get_or_create_profile(s, args.profile, activity_level=activity_level)

    service = MeasurementImportService(engine)
    try:
        count = service.import_file(args.file, profile, activity_level=activity_level)
    except CsvImportError as exc:
        logger.error("Import of %s failed: %s", args.file, exc)
        return 1

    print(f"Imported {count} measurements into profile {profile.name!r}")
    return 0


def _run_chart(args: argparse.Namespace) -> int:
    from sqlmodel import Session

    from scalelog.analysis.downsample import InvalidTargetCountError
    from scalelog.analysis.weight_chart import load_weight_chart
    from scalelog.db.engine import get_engine
    from scalelog.db.store import get_profile_by_name

    engine = get_engine()
    with Session(engine) as s:
        profile = get_profile_by_name(s, args.profile)
    if profile is None:
        logger.error("No profile named %r", args.profile)
        return 1

    try:
        chart = load_weight_chart(
            engine,
            profile,
            target_count=args.points,
            method=args.method,
            target_weight=args.target,
        )
    except InvalidTargetCountError as exc:
        logger.error("Cannot chart profile %r: %s", profile.name, exc)
        return 1

    payload = {
        "profile": profile.name,
        "entries": [asdict(p) for p in chart.entries],
        "target": [asdict(p) for p in chart.target],
    }
    print(json.dumps(payload, indent=2, default=_json_default, ensure_ascii=False))
    return 0


def _json_default(value):
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Not JSON serializable: {type(value).__name__}")


def build_parser() -> argparse.ArgumentParser:
    from scalelog.analysis.downsample import DownsampleMethod
    from scalelog.models.profile import ActivityLevel

    parser = argparse.ArgumentParser(
        prog="scalelog", description="Body scale measurement import and charts"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    imp = sub.add_parser("import", help="Import a scale CSV export")
    imp.add_argument("file", type=Path, help="CSV export (ISO-8859-15)")
    imp.add_argument("--profile", required=True, help="Profile name")
    imp.add_argument(
        "--activity-level",
        type=ActivityLevel,
        choices=list(ActivityLevel),
        default=None,
        help="Activity level for the metabolic rate (default: profile's level)",
    )

    chart = sub.add_parser("chart", help="Print downsampled chart data as JSON")
    chart.add_argument("--profile", required=True, help="Profile name")
    chart.add_argument("--points", type=int, default=None, help="Target point count")
    chart.add_argument(
        "--method",
        type=DownsampleMethod,
        choices=list(DownsampleMethod),
        default=None,
        help="Downsampling method (default: from settings)",
    )
    chart.add_argument("--target", type=float, default=None, help="Target weight (kg)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    from scalelog.config import get_settings

    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    args = build_parser().parse_args(argv)
    if args.command == "import":
        return _run_import(args)
    return _run_chart(args)


if __name__ == "__main__":
    sys.exit(main())
