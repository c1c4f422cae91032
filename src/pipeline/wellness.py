"""Daily wellness series from irregular heart-rate / HRV / stress / SpO2 rows.

Each row is bucketed by the calendar day of its own start time. Rows that
reference a binning JSON file are exploded into the per-sample values of that
file. Each day collapses to one value:

    heart rate  10th-percentile sample ("resting HR" proxy)
    HRV         mean rmssd
    stress      mean score
    SpO2        minimum sample

Days whose value is <= 0 are dropped (no data, not a zero reading).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from analytics.stats_math import low_percentile, round_half_up
from constants import (
    HR_BIN_FIELDS,
    HR_START_FIELDS,
    HR_VALUE_FIELDS,
    HRV_BIN_FIELDS,
    HRV_START_FIELDS,
    RESTING_HR_PERCENTILE,
    SPO2_START_FIELDS,
    SPO2_VALUE_FIELDS,
    STRESS_BIN_FIELDS,
    STRESS_START_FIELDS,
    STRESS_VALUE_FIELDS,
)
from models import DailyValue, HealthExport, RawRecord, TrendPoint, to_number
from pipeline.fields import parse_wall_clock

log = logging.getLogger("pipeline.wellness")

Sample = Tuple[str, float]


@dataclass
class WellnessSeries:
    """Date-sorted daily series for every wellness signal."""
    heart_rate: List[DailyValue] = field(default_factory=list)
    hrv: List[DailyValue] = field(default_factory=list)
    stress: List[DailyValue] = field(default_factory=list)
    spo2: List[DailyValue] = field(default_factory=list)


def _bin_samples(record: RawRecord, bin_fields: Sequence[str],
                 binning: Dict[str, list], key: str) -> Optional[List[float]]:
    """Values of *key* from the row's binning file; None if no file is loaded."""
    ref = record.first(bin_fields)
    if not ref or ref not in binning:
        return None

    payload = binning[ref]
    values: List[float] = []
    if isinstance(payload, list):
        for entry in payload:
            if isinstance(entry, dict):
                v = to_number(entry.get(key))
                if v:
                    values.append(v)
    return values


def collect_samples(
    records: Iterable[RawRecord],
    start_fields: Sequence[str],
    values_for: Callable[[RawRecord], List[float]],
) -> List[Sample]:
    """(day, value) pairs for every usable sample of every row."""
    samples: List[Sample] = []
    for record in records:
        started = parse_wall_clock(record.first(start_fields))
        if started is None:
            continue
        day = started.date().isoformat()
        samples.extend((day, v) for v in values_for(record))
    return samples


def daily_series(samples: List[Sample],
                 reducer: Callable[[np.ndarray], float]) -> List[DailyValue]:
    """Group samples by day, reduce, round, drop non-positive days."""
    if not samples:
        return []
    df = pd.DataFrame(samples, columns=["date", "value"])
    daily = df.groupby("date")["value"].agg(lambda s: reducer(s.to_numpy()))
    out = [
        DailyValue(date=str(day), value=round_half_up(float(val)))
        for day, val in daily.sort_index().items()
    ]
    return [d for d in out if d.value > 0]


def _resting_hr(values: np.ndarray) -> float:
    return low_percentile(values, RESTING_HR_PERCENTILE)


def aggregate_wellness(export: HealthExport) -> WellnessSeries:
    """Build all four daily series from the raw wellness record sets."""
    binning = export.binning_data

    def hr_values(record: RawRecord) -> List[float]:
        binned = _bin_samples(record, HR_BIN_FIELDS, binning, "heart_rate")
        if binned is not None:
            return binned
        flat = record.first_number(HR_VALUE_FIELDS)
        return [flat] if flat else []

    def hrv_values(record: RawRecord) -> List[float]:
        return _bin_samples(record, HRV_BIN_FIELDS, binning, "rmssd") or []

    def stress_values(record: RawRecord) -> List[float]:
        binned = _bin_samples(record, STRESS_BIN_FIELDS, binning, "score")
        if binned is not None:
            return binned
        flat = record.first_number(STRESS_VALUE_FIELDS)
        return [flat] if flat else []

    def spo2_values(record: RawRecord) -> List[float]:
        flat = record.first_number(SPO2_VALUE_FIELDS)
        return [flat] if flat else []

    series = WellnessSeries(
        heart_rate=daily_series(
            collect_samples(export.heart_rate, HR_START_FIELDS, hr_values), _resting_hr),
        hrv=daily_series(
            collect_samples(export.hrv, HRV_START_FIELDS, hrv_values), np.mean),
        stress=daily_series(
            collect_samples(export.stress, STRESS_START_FIELDS, stress_values), np.mean),
        spo2=daily_series(
            collect_samples(export.oxygen_saturation, SPO2_START_FIELDS, spo2_values), np.min),
    )
    log.info(
        "Wellness days: hr=%d hrv=%d stress=%d spo2=%d",
        len(series.heart_rate), len(series.hrv), len(series.stress), len(series.spo2),
    )
    return series


def trend_points(records: Sequence[RawRecord], start_fields: Sequence[str],
                 value_fields: Sequence[str], year: int, limit: int) -> List[TrendPoint]:
    """Last *limit* raw readings of *year* as (time-of-day, value) points."""
    in_year: List[TrendPoint] = []
    for record in records:
        raw_start = record.first(start_fields)
        started = parse_wall_clock(raw_start)
        if started is None or started.year != year:
            continue
        parts = raw_start.strip().replace("T", " ").split(" ")
        time_part = parts[1] if len(parts) > 1 else ""
        in_year.append(TrendPoint(time=time_part, value=int(record.first_number(value_fields))))
    return in_year[-limit:] if limit > 0 else []
