"""
Tests for archive classification and ingestion.

Covers: entry classification order and exclusions, binning JSON resolution
(memoized, failures tolerated), progress events, and ZIP opening.
"""

import json

import pytest

from conftest import make_entries, make_zip, sample_files
from export_reader import (
    EXERCISE,
    HEART_RATE,
    HRV,
    OXYGEN_SATURATION,
    SLEEP,
    STEPS,
    STRESS,
    ArchiveIngestor,
    ExportError,
    classify_entry,
    open_export_archive,
)


# ─── classify_entry ───────────────────────────────────────────


class TestClassifyEntry:

    @pytest.mark.parametrize("name,expected", [
        ("x/com.samsung.shealth.step_daily_trend.2024.csv", STEPS),
        ("x/com.samsung.shealth.exercise.2024.csv", EXERCISE),
        ("x/com.samsung.shealth.sleep_combined.2024.csv", SLEEP),
        ("x/com.samsung.shealth.tracker.heart_rate.2024.csv", HEART_RATE),
        ("x/com.samsung.shealth.stress.2024.csv", STRESS),
        ("x/com.samsung.shealth.tracker.oxygen_saturation.2024.csv", OXYGEN_SATURATION),
        ("x/com.samsung.health.hrv.2024.csv", HRV),
        ("X/COM.SAMSUNG.SHEALTH.SLEEP.2024.CSV", SLEEP),
    ])
    def test_categories(self, name, expected):
        assert classify_entry(name) == expected

    @pytest.mark.parametrize("name", [
        "x/com.samsung.shealth.exercise.custom_exercise.csv",
        "x/com.samsung.shealth.exercise.weather.csv",
        "x/com.samsung.shealth.exercise.location_data.csv",
        "x/com.samsung.shealth.exercise.live_data.csv",
        "x/com.samsung.shealth.sleep_stage.csv",
        "x/com.samsung.shealth.sleep.raw_data.csv",
        "x/com.samsung.shealth.stress.histogram.csv",
        "x/com.samsung.shealth.step_daily_trend.json",
        "x/com.samsung.shealth.tracker.pedometer_day_summary.csv",
    ])
    def test_excluded(self, name):
        assert classify_entry(name) is None

    def test_excluded_sleep_is_not_reclassified(self):
        # would match heart_rate if sleep exclusions fell through
        assert classify_entry("x/sleep_stage_heart_rate.csv") is None

    def test_excluded_exercise_falls_through(self):
        assert classify_entry("x/exercise.live_data.heart_rate.csv") == HEART_RATE
        assert classify_entry("x/exercise.weather.stress.csv") == STRESS

    def test_excluded_stress_falls_through(self):
        assert classify_entry("x/stress.histogram.hrv.csv") == HRV

    def test_steps_need_trend(self):
        assert classify_entry("x/step_count.csv") is None


# ─── ArchiveIngestor ──────────────────────────────────────────


class TestArchiveIngestor:

    def test_collects_every_category(self, sample_entries):
        export = ArchiveIngestor().ingest(sample_entries)
        counts = export.counts()
        assert counts["steps"] == 5
        assert counts["exercises"] == 3
        assert counts["sleep"] == 2  # combined + watch, stage file ignored
        assert counts["heart_rate"] == 2
        assert counts["stress"] == 2
        assert counts["oxygen_saturation"] == 2
        assert counts["hrv"] == 1

    def test_bins_resolved_by_basename(self, sample_entries):
        export = ArchiveIngestor().ingest(sample_entries)
        assert set(export.binning_data) == {"hr_bin.json", "hrv_bin.json"}
        assert export.binning_data["hrv_bin.json"] == [{"rmssd": 40}, {"rmssd": 50}]

    def test_record_carries_file_name(self, sample_entries):
        export = ArchiveIngestor().ingest(sample_entries)
        names = {r.file_name for r in export.sleep}
        assert any("sleep_combined" in n for n in names)

    def test_bin_file_read_once(self):
        reads = []
        files = {
            "a/com.samsung.shealth.tracker.heart_rate.csv": "\n".join([
                "start_time,heart_rate,binning_data,end_time,min,max",
                "2024-01-01 10:00:00.000,0,shared.json,x,0,0",
                "2024-01-01 11:00:00.000,0,shared.json,x,0,0",
            ]),
        }
        entries = make_entries(files)

        def reader():
            reads.append(1)
            return json.dumps([{"heart_rate": 60}])

        entries.append(("a/jsons/shared.json", reader))
        export = ArchiveIngestor().ingest(entries)
        assert len(reads) == 1
        assert export.binning_data["shared.json"] == [{"heart_rate": 60}]

    def test_bad_bin_json_logged_and_skipped(self, caplog):
        files = {
            "a/com.samsung.shealth.stress.csv": "\n".join([
                "start_time,score,binning_data,end_time,min,max",
                "2024-01-01 10:00:00.000,30,broken.json,x,0,0",
                "2024-01-02 10:00:00.000,30,broken.json,x,0,0",
            ]),
            "a/jsons/broken.json": "{not json",
        }
        with caplog.at_level("WARNING"):
            export = ArchiveIngestor().ingest(make_entries(files))
        assert export.binning_data == {}
        assert len(export.stress) == 2
        assert sum("broken.json" in r.getMessage() for r in caplog.records) == 1

    def test_progress_events(self, sample_entries):
        events = []
        ArchiveIngestor(lambda stage, msg, stats: events.append((stage, stats))).ingest(
            sample_entries)
        assert events[0] == ("extracting", None)
        parsing = [stats for stage, stats in events if stage == "parsing"]
        assert {"steps": 5} in parsing
        assert {"workouts": 3} in parsing
        assert {"sleepSessions": 2} in parsing

    def test_failing_callback_is_swallowed(self, sample_entries):
        def boom(stage, msg, stats):
            raise RuntimeError("ui gone")

        export = ArchiveIngestor(boom).ingest(sample_entries)
        assert len(export.steps) == 5


# ─── open_export_archive ──────────────────────────────────────


class TestOpenExportArchive:

    def test_from_bytes(self, sample_zip_bytes):
        with open_export_archive(sample_zip_bytes) as entries:
            names = [name for name, _ in entries]
        assert any(n.endswith("step_daily_trend.20240111.csv") for n in names)

    def test_from_path(self, sample_zip_path):
        with open_export_archive(sample_zip_path) as entries:
            readme = next(r for n, r in entries if n.endswith("README.txt"))
            assert readme() == "not a table"

    def test_bom_stripped(self):
        data = make_zip({"a.csv": "\ufeffday_time,count"})
        with open_export_archive(data) as entries:
            (name, reader), = entries
            assert reader() == "day_time,count"

    def test_archive_closed_after_block(self, sample_zip_path):
        with open_export_archive(sample_zip_path) as entries:
            _, reader = entries[0]
        with pytest.raises(ValueError):
            reader()

    def test_closed_when_block_raises(self, sample_zip_path):
        with pytest.raises(RuntimeError):
            with open_export_archive(sample_zip_path) as entries:
                _, reader = entries[0]
                raise RuntimeError("boom")
        with pytest.raises(ValueError):
            reader()

    def test_not_a_zip_raises_export_error(self):
        with pytest.raises(ExportError):
            with open_export_archive(b"definitely not a zip"):
                pass

    def test_missing_file_raises_export_error(self, tmp_path):
        with pytest.raises(ExportError):
            with open_export_archive(tmp_path / "missing.zip"):
                pass

    def test_round_trip_through_ingestor(self):
        with open_export_archive(make_zip(sample_files())) as entries:
            export = ArchiveIngestor().ingest(entries)
        assert len(export.exercises) == 3
