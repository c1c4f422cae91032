"""Contract tests for the wrapped pipeline orchestration.

Covers:
- result keys (one per discovered year, "All Time" last)
- progress stage ordering and callback failure isolation
- ExportError when an export has no datable records
"""

import pytest

from conftest import SAMPLE_TODAY, make_entries
from export_reader import ExportError, open_export_archive
from pipeline.wrapped_pipeline import WrappedPipeline, run_wrapped_pipeline


# ─── Results ─────────────────────────────────────────────────


class TestResults:

    def test_years_then_all_time(self, sample_entries):
        results = run_wrapped_pipeline(sample_entries, today=SAMPLE_TODAY)
        assert list(results) == ["2023", "2024", "All Time"]

    def test_all_time_is_merge_of_years(self, sample_entries):
        results = run_wrapped_pipeline(sample_entries, today=SAMPLE_TODAY)
        assert results["All Time"].total_steps == (
            results["2023"].total_steps + results["2024"].total_steps)
        assert results["All Time"].year == "All Time"

    def test_runs_from_zip_bytes(self, sample_zip_bytes):
        with open_export_archive(sample_zip_bytes) as entries:
            results = run_wrapped_pipeline(entries, today=SAMPLE_TODAY)
        assert results["2024"].total_steps == 25000


# ─── Progress ────────────────────────────────────────────────


class TestProgress:

    def test_stage_order(self, sample_entries):
        events = []
        WrappedPipeline(on_progress=lambda s, m, st: events.append((s, m, st)),
                        today=SAMPLE_TODAY).run(sample_entries)
        stages = [e[0] for e in events]
        assert stages[0] == "extracting"
        assert "parsing" in stages
        assert stages[-1] == "analyzing"
        assert stages.index("analyzing") > max(i for i, s in enumerate(stages) if s == "parsing")
        assert events[-1][1] == "Analysis complete"
        assert events[-1][2] is None

    def test_callback_errors_do_not_abort(self, sample_entries):
        def explode(stage, message, stats):
            raise RuntimeError("ui went away")

        results = WrappedPipeline(on_progress=explode, today=SAMPLE_TODAY).run(sample_entries)
        assert "All Time" in results


# ─── Failure ─────────────────────────────────────────────────


class TestNoYears:

    def test_no_recognized_files(self):
        with pytest.raises(ExportError):
            run_wrapped_pipeline(make_entries({"export/readme.txt": "hello"}))

    def test_undatable_records(self):
        files = {"export/com.samsung.shealth.step_daily_trend.csv":
                 "day_time,count\nnot-a-date,100\n"}
        with pytest.raises(ExportError):
            run_wrapped_pipeline(make_entries(files))
