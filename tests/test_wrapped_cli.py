"""Tests for the command-line export analyzer."""

import json

import pytest

import wrapped_cli


@pytest.fixture(autouse=True)
def pinned_today(monkeypatch):
    monkeypatch.setenv("WRAPPED_TODAY", "2024-01-11")


class TestMain:

    def test_writes_all_years(self, sample_zip_path, tmp_path):
        out = tmp_path / "nested" / "stats.json"
        assert wrapped_cli.main([str(sample_zip_path), "-o", str(out)]) == 0
        payload = json.loads(out.read_text(encoding="utf-8"))
        assert payload["years"] == ["2023", "2024", "All Time"]
        assert payload["stats"]["2024"]["daily_avg"] == 2500

    def test_single_year_with_summary(self, sample_zip_path, tmp_path):
        out = tmp_path / "stats.json"
        code = wrapped_cli.main([str(sample_zip_path), "-o", str(out), "--year", "2024",
                                 "--summary"])
        assert code == 0
        assert list(json.loads(out.read_text(encoding="utf-8"))["stats"]) == ["2024"]

    def test_unknown_year_fails(self, sample_zip_path, tmp_path):
        out = tmp_path / "stats.json"
        assert wrapped_cli.main([str(sample_zip_path), "-o", str(out), "--year", "1999"]) == 1
        assert not out.exists()

    def test_bad_archive_fails(self, tmp_path):
        bad = tmp_path / "bad.zip"
        bad.write_bytes(b"not a zip")
        assert wrapped_cli.main([str(bad), "-o", str(tmp_path / "x.json")]) == 1

    def test_missing_file_fails(self, tmp_path):
        assert wrapped_cli.main([str(tmp_path / "nope.zip"), "-o", str(tmp_path / "x.json")]) == 1
