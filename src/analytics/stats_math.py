"""Small numeric helpers shared by the yearly and all-time builders.

Every reduction here returns 0 (or a sentinel) on empty or degenerate
input instead of raising or leaking NaN into the dashboard.
"""

from __future__ import annotations

import math
from datetime import date
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np
from scipy import stats as sp_stats

from constants import MINUTES_PER_DAY

EMPTY_CLOCK = "--:--"


def safe_div(num: float, den: float) -> float:
    """num / den, or 0 when den is 0 or the result is not finite."""
    if not den:
        return 0.0
    out = num / den
    return out if math.isfinite(out) else 0.0


def mean_or_zero(values: Sequence[float]) -> float:
    return safe_div(float(sum(values)), len(values))


def round_half_up(value: float) -> int:
    """Dashboard rounding: .5 always rounds up (not banker's rounding)."""
    return int(math.floor(value + 0.5))


def low_percentile(values: Sequence[float], fraction: float) -> float:
    """Element at floor(n * fraction) of the sorted samples (no interpolation)."""
    if not len(values):
        return 0.0
    ordered = np.sort(np.asarray(values, dtype=np.float64))
    return float(ordered[int(math.floor(len(ordered) * fraction))])


# ─── Clock-time averaging ─────────────────────────────────────


def circular_mean_minutes(minutes: Iterable[float]) -> float:
    """Average minutes-of-day on a 24h circle.

    Each sample maps to angle (m / 1440) * 2π; the mean sin/cos resultant is
    turned back into minutes, so 23:50 and 00:10 average to ~00:00 rather
    than noon.
    """
    arr = np.asarray(list(minutes), dtype=np.float64)
    if arr.size == 0:
        return 0.0
    angles = arr / MINUTES_PER_DAY * 2 * math.pi
    avg = math.atan2(float(np.mean(np.sin(angles))), float(np.mean(np.cos(angles))))
    if avg < 0:
        avg += 2 * math.pi
    return avg / (2 * math.pi) * MINUTES_PER_DAY


def format_hhmm(minutes: float) -> str:
    """Minutes-of-day → 'HH:MM'; exactly 0 means "no data"."""
    if minutes == 0:
        return EMPTY_CLOCK
    hours = int(minutes // 60) % 24
    mins = round_half_up(minutes % 60)
    if mins == 60:
        hours, mins = (hours + 1) % 24, 0
    return f"{hours:02d}:{mins:02d}"


def parse_hhmm(text: str) -> Optional[int]:
    """'HH:MM' → minutes-of-day; None for '--:--' or garbage."""
    try:
        hours, mins = text.split(":")
        return int(hours) * 60 + int(mins)
    except (AttributeError, ValueError):
        return None


# ─── Correlation ──────────────────────────────────────────────


def pearson(xs: Sequence[float], ys: Sequence[float]) -> float:
    """Pearson r of two aligned series; 0 when undefined.

    Undefined means: different lengths, fewer than two points, or either
    series constant (zero variance).
    """
    if len(xs) != len(ys) or len(xs) < 2:
        return 0.0
    x = np.asarray(xs, dtype=np.float64)
    y = np.asarray(ys, dtype=np.float64)
    # Skip constant arrays (all same value → no correlation)
    if np.std(x) < 1e-10 or np.std(y) < 1e-10:
        return 0.0
    r, _p = sp_stats.pearsonr(x, y)
    r = float(r)
    return r if math.isfinite(r) else 0.0


# ─── Streaks ──────────────────────────────────────────────────


def longest_streak(days: Iterable[date]) -> Tuple[int, Optional[date]]:
    """Longest run of consecutive-day transitions and the day it ends on.

    Counts transitions between distinct sorted days, so [Jan1, Jan2, Jan3,
    Jan5] gives 2: a gap of more than one day resets the run.
    """
    ordered = sorted(set(days))
    best, current = 0, 0
    best_end: Optional[date] = None
    for prev, cur in zip(ordered, ordered[1:]):
        if (cur - prev).days <= 1:
            current += 1
            if current > best:
                best, best_end = current, cur
        else:
            current = 0
    return best, best_end
