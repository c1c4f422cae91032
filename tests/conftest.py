"""
Shared test configuration.

Adds both the project root and src/ to sys.path so that flat modules
(export_reader, models, api, ...) and the pipeline/analytics/routes
packages import with plain `import module_name`.

Also provides a small but complete Samsung Health style export (two years
of steps, workouts, overlapping sleep sources, binned heart rate and HRV)
as in-memory entries and as ZIP bytes.
"""

import io
import json
import os
import sys
import zipfile
from datetime import date

import pytest

_project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
_src_dir = os.path.join(_project_root, "src")

if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

if _src_dir not in sys.path:
    sys.path.insert(1, _src_dir)


# ─── Sample export ────────────────────────────────────────────

# Pinned "today" for days-elapsed math: 2024 has 10 elapsed days.
SAMPLE_TODAY = date(2024, 1, 11)

STEP_CSV = "\n".join([
    "com.samsung.shealth.step_daily_trend,6313005,3",
    "day_time,count,calorie,distance,speed,source_type,update_time",
    "1703980800000,5000,200,4000,1.2,-2,2023-12-31 23:00:00.000",
    "1704067200000,10000,400,8000,1.5,-2,2024-01-01 23:00:00.000",
    "1704153600000,12000,500,9000,0,-2,2024-01-02 23:00:00.000",
    "1704240000000,3000,100,2000,1.1,,2024-01-03 23:00:00.000",
    "1704240000000,99999,1,1,1,0,2024-01-03 23:00:00.000",
])

EXERCISE_CSV = "\n".join([
    "com.samsung.shealth.exercise,6313005,5",
    "com.samsung.health.exercise.start_time,com.samsung.health.exercise.exercise_type,"
    "com.samsung.health.exercise.duration,com.samsung.health.exercise.calorie,"
    "com.samsung.health.exercise.distance,com.samsung.health.exercise.mean_heart_rate",
    "2023-12-31 09:00:00.000,1002,1200000,200,3000,140",
    "2024-01-01 07:30:00.000,1002,1800000,300,5000,150",
    "2024-01-06 18:00:00.000,15001,3600000,150,0,0",
])

SLEEP_HEADER = ("com.samsung.health.sleep.start_time,com.samsung.health.sleep.end_time,"
                "sleep_duration,efficiency,sleep_score,time_offset")

SLEEP_COMBINED_CSV = "\n".join([
    "com.samsung.shealth.sleep_combined,6313005,1",
    SLEEP_HEADER,
    "2024-01-01 22:00:00.000,2024-01-02 05:00:00.000,420,90,85,UTC+0000",
])

SLEEP_WATCH_CSV = "\n".join([
    "com.samsung.shealth.sleep,6313005,1",
    SLEEP_HEADER,
    "2024-01-01 22:00:00.000,2024-01-02 06:00:00.000,480,90,80,UTC+0000",
])

SLEEP_STAGE_CSV = "\n".join([
    "com.samsung.shealth.sleep_stage,6313005,1",
    "start_time,end_time,stage,sleep_id,datauuid,time_offset",
    "2024-01-01 22:00:00.000,2024-01-01 23:00:00.000,40001,x,y,UTC+0000",
])

HEART_RATE_CSV = "\n".join([
    "com.samsung.shealth.tracker.heart_rate,6313005,3",
    "start_time,heart_rate,binning_data,end_time,min,max",
    "2024-01-01 10:00:00.000,70,,2024-01-01 10:01:00.000,70,70",
    "2024-01-02 10:00:00.000,0,hr_bin.json,2024-01-02 10:30:00.000,55,100",
])

HR_BINS = [{"heart_rate": v} for v in (100, 95, 90, 85, 80, 75, 70, 65, 60, 55)]

STRESS_CSV = "\n".join([
    "com.samsung.shealth.stress,6313005,2",
    "start_time,score,binning_data,end_time,min,max",
    "2024-01-01 12:00:00.000,40,,2024-01-01 12:10:00.000,40,40",
    "2024-01-02 12:00:00.000,60,,2024-01-02 12:10:00.000,60,60",
])

SPO2_CSV = "\n".join([
    "com.samsung.shealth.tracker.oxygen_saturation,6313005,1",
    "start_time,spo2,heart_rate,end_time,min,max",
    "2024-01-01 03:00:00.000,97,60,2024-01-01 03:01:00.000,97,97",
    "2024-01-01 04:00:00.000,94,58,2024-01-01 04:01:00.000,94,94",
])

HRV_CSV = "\n".join([
    "com.samsung.health.hrv,6313005,1",
    "start_time,binning_data,end_time,deviceuuid,pkg_name,datauuid",
    "2024-01-02 03:00:00.000,hrv_bin.json,2024-01-02 03:05:00.000,d,p,u",
])

HRV_BINS = [{"rmssd": 40}, {"rmssd": 50}]


def sample_files():
    """Archive entry name → text content of the sample export."""
    base = "samsunghealth_user_20240111/"
    return {
        base + "com.samsung.shealth.step_daily_trend.20240111.csv": STEP_CSV,
        base + "com.samsung.shealth.exercise.20240111.csv": EXERCISE_CSV,
        base + "com.samsung.shealth.sleep_combined.20240111.csv": SLEEP_COMBINED_CSV,
        base + "com.samsung.shealth.sleep.20240111.csv": SLEEP_WATCH_CSV,
        base + "com.samsung.shealth.sleep_stage.20240111.csv": SLEEP_STAGE_CSV,
        base + "com.samsung.shealth.tracker.heart_rate.20240111.csv": HEART_RATE_CSV,
        base + "com.samsung.shealth.stress.20240111.csv": STRESS_CSV,
        base + "com.samsung.shealth.tracker.oxygen_saturation.20240111.csv": SPO2_CSV,
        base + "com.samsung.health.hrv.20240111.csv": HRV_CSV,
        base + "jsons/com.samsung.shealth.tracker.heart_rate/hr_bin.json": json.dumps(HR_BINS),
        base + "jsons/com.samsung.health.hrv/hrv_bin.json": json.dumps(HRV_BINS),
        base + "README.txt": "not a table",
    }


def make_entries(files):
    """(name, reader) pairs for ArchiveIngestor from a name → text mapping."""
    return [(name, (lambda text=text: text)) for name, text in files.items()]


def make_zip(files):
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, text in files.items():
            zf.writestr(name, text)
    return buf.getvalue()


@pytest.fixture
def sample_entries():
    return make_entries(sample_files())


@pytest.fixture
def sample_zip_bytes():
    return make_zip(sample_files())


@pytest.fixture
def sample_zip_path(tmp_path):
    path = tmp_path / "export.zip"
    path.write_bytes(make_zip(sample_files()))
    return path
