"""Wrapped pipeline orchestration: archive entries in, year → YearStats out."""

from __future__ import annotations

import logging
from datetime import date
from typing import Dict, Iterable, Optional

from constants import ALL_TIME_KEY
from export_reader import ArchiveIngestor, Entry, ExportError, ProgressCallback, emit_progress
from models import YearStats
from pipeline.all_time import build_all_time
from pipeline.sleep_reconciler import reconcile_sleep
from pipeline.wellness import aggregate_wellness
from pipeline.yearly_stats import YearlyStatsBuilder

log = logging.getLogger("wrapped_pipeline")


class WrappedPipeline:
    """One-shot, in-memory analysis of a single export."""

    def __init__(self, on_progress: Optional[ProgressCallback] = None,
                 today: Optional[date] = None):
        self.on_progress = on_progress
        self.today = today

    def run(self, entries: Iterable[Entry]) -> Dict[str, YearStats]:
        """Execute every stage and return per-year stats plus "All Time".

        Raises ExportError when no year can be discovered in the export.
        """
        log.info("=" * 60)
        log.info("  WRAPPED ANALYSIS STARTED")
        log.info("=" * 60)

        log.info("Step 1/4: Reading export entries...")
        export = ArchiveIngestor(self.on_progress).ingest(entries)

        emit_progress(self.on_progress, "analyzing", "Reconciling sleep sessions")
        log.info("Step 2/4: Reconciling sleep and wellness series...")
        sleep = reconcile_sleep(export.sleep)
        wellness = aggregate_wellness(export)

        emit_progress(self.on_progress, "analyzing", "Crunching yearly statistics")
        log.info("Step 3/4: Building yearly statistics...")
        builder = YearlyStatsBuilder(export, sleep, wellness, today=self.today)
        years = builder.discover_years()
        if not years:
            raise ExportError("No years discovered in export; check the date formats")

        results: Dict[str, YearStats] = {str(y): builder.build(y) for y in years}

        log.info("Step 4/4: Merging All Time view...")
        results[ALL_TIME_KEY] = build_all_time(list(results.values()))

        emit_progress(self.on_progress, "analyzing", "Analysis complete")
        log.info("=" * 60)
        log.info("  WRAPPED ANALYSIS COMPLETE (years=%s)", ", ".join(str(y) for y in years))
        log.info("=" * 60)
        return results


def run_wrapped_pipeline(entries: Iterable[Entry],
                         on_progress: Optional[ProgressCallback] = None,
                         today: Optional[date] = None) -> Dict[str, YearStats]:
    return WrappedPipeline(on_progress=on_progress, today=today).run(entries)
