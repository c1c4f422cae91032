"""
Health Wrapped: Command-line Export Analyzer
============================================
Reads one Samsung Health export ZIP and writes the per-year statistics
(plus the "All Time" view) as JSON.

Usage:
    python wrapped_cli.py EXPORT.zip                    # All years → wrapped_stats.json
    python wrapped_cli.py EXPORT.zip --year 2024        # Single year only
    python wrapped_cli.py EXPORT.zip --summary          # Also log a 3-line digest per year
    python wrapped_cli.py EXPORT.zip -o out/stats.json  # Custom output path
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from config import LOG_LEVEL, OUTPUT_PATH

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s  %(levelname)-8s  %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
log = logging.getLogger("wrapped_cli")

from export_reader import ExportError, open_export_archive
from pipeline.summary_builder import build_year_digest
from pipeline.wrapped_pipeline import run_wrapped_pipeline
from routes.helpers import serialize_results


def _log_progress(stage: str, message: str, stats=None) -> None:
    log.debug("progress %s: %s %s", stage, message, stats or "")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Health Wrapped export analyzer"
    )
    parser.add_argument("export", type=Path,
                        help="Path to the Samsung Health export ZIP")
    parser.add_argument("-o", "--output", type=Path, default=OUTPUT_PATH,
                        help=f"JSON output path (default: {OUTPUT_PATH})")
    parser.add_argument("--year",
                        help='Only write this year (e.g. 2024 or "All Time")')
    parser.add_argument("--summary", action="store_true",
                        help="Log a three-line digest for every year")
    args = parser.parse_args(argv)

    try:
        with open_export_archive(args.export) as entries:
            results = run_wrapped_pipeline(entries, on_progress=_log_progress)
    except ExportError as e:
        log.error("Export could not be analyzed: %s", e)
        return 1

    if args.year is not None and args.year not in results:
        log.error("No data for year %s (available: %s)", args.year, ", ".join(results))
        return 1

    if args.summary:
        for key, stats in results.items():
            if args.year is not None and key != args.year:
                continue
            log.info("%s\n%s", key, build_year_digest(stats))

    payload = serialize_results(results, year=args.year)
    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    log.info("Wrote %d year entries to %s", len(payload["years"]), args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
