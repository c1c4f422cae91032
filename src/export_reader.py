"""
Samsung Health Export Reader
============================
Turns the entries of one export archive into raw record sets.

Flow:
1. Index every .json entry by base name (binning files are referenced by
   name from CSV rows).
2. Classify each .csv entry by name into a record category and parse it.
3. For heart-rate / stress / HRV rows, load each referenced binning file
   once (memoized, failures included).
4. Emit advisory progress events after each pass.

Decompression lives in open_export_archive(); everything else only sees
(name, reader) pairs so tests can feed in-memory entries.
"""

from __future__ import annotations

import io
import json
import logging
import zipfile
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from constants import HR_BIN_FIELDS, HRV_BIN_FIELDS, STRESS_BIN_FIELDS
from models import HealthExport, RawRecord
from pipeline.tabular import parse_records

log = logging.getLogger("export_reader")

EntryReader = Callable[[], str]
Entry = Tuple[str, EntryReader]
ProgressCallback = Callable[[str, str, Optional[Dict[str, int]]], None]

STEPS = "steps"
EXERCISE = "exercise"
SLEEP = "sleep"
HEART_RATE = "heart_rate"
STRESS = "stress"
OXYGEN_SATURATION = "oxygen_saturation"
HRV = "hrv"

EXERCISE_EXCLUDES = ("custom_exercise", "weather", "location_data", "live_data")
SLEEP_DETAIL_MARKERS = ("stage", "alarm", "log", "data_source", "raw")
STRESS_EXCLUDES = ("histogram",)


class ExportError(Exception):
    """Terminal failure: the export cannot produce a dashboard."""


def classify_entry(name: str) -> Optional[str]:
    """Return the record category for an archive entry, or None to skip it.

    First match wins. An excluded exercise or stress name falls through to
    the later categories; sleep detail files (stages, alarms, raw logs) are
    skipped outright.
    """
    low = name.lower()
    if not low.endswith(".csv"):
        return None
    if "step" in low and "trend" in low:
        return STEPS
    if "exercise" in low and not any(x in low for x in EXERCISE_EXCLUDES):
        return EXERCISE
    if "sleep" in low:
        if any(x in low for x in SLEEP_DETAIL_MARKERS):
            return None
        return SLEEP
    if "heart_rate" in low:
        return HEART_RATE
    if "stress" in low and not any(x in low for x in STRESS_EXCLUDES):
        return STRESS
    if "oxygen_saturation" in low:
        return OXYGEN_SATURATION
    if "hrv" in low:
        return HRV
    return None


def emit_progress(on_progress: Optional[ProgressCallback], stage: str, message: str,
                  stats: Optional[Dict[str, int]] = None) -> None:
    """Fire-and-forget progress notification."""
    log.info("[%s] %s%s", stage, message, f" {stats}" if stats else "")
    if on_progress is None:
        return
    try:
        on_progress(stage, message, stats)
    except Exception as e:
        log.warning("Progress callback failed (non-fatal): %s", e)


class ArchiveIngestor:
    """Classify export entries and collect raw records plus binning JSON."""

    BIN_FIELDS = {
        HEART_RATE: HR_BIN_FIELDS,
        STRESS: STRESS_BIN_FIELDS,
        HRV: HRV_BIN_FIELDS,
    }

    def __init__(self, on_progress: Optional[ProgressCallback] = None):
        self.on_progress = on_progress

    def ingest(self, entries: Iterable[Entry]) -> HealthExport:
        entries = list(entries)
        json_index: Dict[str, EntryReader] = {}
        for name, reader in entries:
            if name.lower().endswith(".json"):
                json_index[name.rsplit("/", 1)[-1]] = reader

        export = HealthExport()
        attempted: Dict[str, bool] = {}
        emit_progress(self.on_progress, "extracting", "Archive extracted successfully")

        for name, reader in entries:
            if name.endswith("/"):
                continue
            category = classify_entry(name)
            if category is None:
                continue

            records = parse_records(reader(), file_name=name)
            self._collect(export, category, records)

            if category == STEPS:
                emit_progress(self.on_progress, "parsing", "Analyzing step data",
                              {"steps": len(export.steps)})
            elif category == EXERCISE:
                emit_progress(self.on_progress, "parsing", "Discovering workouts",
                              {"workouts": len(export.exercises)})
            elif category == SLEEP:
                emit_progress(self.on_progress, "parsing", "Analyzing sleep patterns",
                              {"sleepSessions": len(export.sleep)})

            bin_fields = self.BIN_FIELDS.get(category)
            if bin_fields:
                self._resolve_bins(records, bin_fields, json_index, export, attempted)

        log.info("Export record counts: %s", export.counts())
        return export

    @staticmethod
    def _collect(export: HealthExport, category: str, records: List[RawRecord]) -> None:
        target = {
            STEPS: export.steps,
            EXERCISE: export.exercises,
            SLEEP: export.sleep,
            HEART_RATE: export.heart_rate,
            STRESS: export.stress,
            OXYGEN_SATURATION: export.oxygen_saturation,
            HRV: export.hrv,
        }[category]
        target.extend(records)

    @staticmethod
    def _resolve_bins(records: List[RawRecord], bin_fields: Sequence[str],
                      json_index: Dict[str, EntryReader], export: HealthExport,
                      attempted: Dict[str, bool]) -> None:
        """Load every referenced binning file exactly once."""
        for record in records:
            ref = record.first(bin_fields)
            if not ref or ref in attempted or ref not in json_index:
                continue
            attempted[ref] = True
            try:
                export.binning_data[ref] = json.loads(json_index[ref]())
            except ValueError as e:
                log.warning("Failed to parse binning JSON %s: %s", ref, e)


def _decode(raw: bytes) -> str:
    return raw.decode("utf-8-sig", errors="replace")


@contextmanager
def open_export_archive(source: Union[str, Path, bytes]) -> Iterator[List[Entry]]:
    """Open an export ZIP (path or bytes) and yield lazy entry readers.

    The archive is closed when the ``with`` block exits, so readers must be
    consumed inside it. Raises ExportError when the archive cannot be opened.
    """
    try:
        if isinstance(source, (bytes, bytearray)):
            zf = zipfile.ZipFile(io.BytesIO(source))
        else:
            zf = zipfile.ZipFile(source)
    except (zipfile.BadZipFile, OSError) as e:
        raise ExportError(f"Could not open export archive: {e}") from e

    def reader(name: str) -> EntryReader:
        return lambda: _decode(zf.read(name))

    with zf:
        entries = [(info.filename, reader(info.filename))
                   for info in zf.infolist() if not info.is_dir()]
        log.info("Opened export archive with %d entries", len(entries))
        yield entries
