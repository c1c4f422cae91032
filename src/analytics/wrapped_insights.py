"""Heuristic "wrapped" classifications.

Each cascade is a pure function of the few numbers it needs, with every
threshold a named constant in constants.py so product copy and tests agree
on the exact cut-offs.
"""

from __future__ import annotations

import math
from typing import Dict, Iterable, Sequence

from analytics.stats_math import mean_or_zero, safe_div
from constants import (
    AFTERNOON_END_HOUR,
    CONSISTENT_GRINDER_SESSIONS,
    CONSISTENT_SLEEPER_EFFICIENCY,
    EARLY_BIRD_HOUR,
    EARLY_RISER_BEDTIME_HOUR,
    MARATHON_KM,
    MINUTES_PER_DAY,
    MONTH_NAMES,
    MORNING_END_HOUR,
    NIGHT_OWL_BEDTIME_HOUR,
    NIGHT_OWL_WORKOUT_HOUR,
    PIZZA_SLICE_KCAL,
    TREND_BAND,
    WEEKDAY_NAMES,
    WEEKEND_WARRIOR_RATIO,
)
from models import MonthTrend

EARLY_BIRD = "Early Bird"
NIGHT_OWL = "Night Owl"
BALANCED = "Balanced"

WEEKEND_WARRIOR = "Weekend Warrior"
CONSISTENT_GRINDER = "Consistent Grinder"
CASUAL = "Casual"

CONSISTENT_SLEEPER = "Consistent Sleeper"
EARLY_RISER = "Early Riser"
VARIABLE = "Variable"


# ─── Personality ──────────────────────────────────────────────


def classify_fitness_type(avg_workout_hour: float) -> str:
    if avg_workout_hour < EARLY_BIRD_HOUR:
        return EARLY_BIRD
    if avg_workout_hour > NIGHT_OWL_WORKOUT_HOUR:
        return NIGHT_OWL
    return BALANCED


def classify_workout_style(weekend_sessions: int, weekday_sessions: int) -> str:
    if weekend_sessions > weekday_sessions * WEEKEND_WARRIOR_RATIO:
        return WEEKEND_WARRIOR
    if weekend_sessions + weekday_sessions > CONSISTENT_GRINDER_SESSIONS:
        return CONSISTENT_GRINDER
    return CASUAL


def classify_sleep_archetype(avg_efficiency: float, avg_bedtime_hour: float) -> str:
    if avg_efficiency > CONSISTENT_SLEEPER_EFFICIENCY:
        return CONSISTENT_SLEEPER
    if avg_bedtime_hour > NIGHT_OWL_BEDTIME_HOUR:
        return NIGHT_OWL
    if avg_bedtime_hour < EARLY_RISER_BEDTIME_HOUR:
        return EARLY_RISER
    return VARIABLE


# ─── Niche stats ──────────────────────────────────────────────


def marathons_walked(distance_km: float) -> int:
    return int(math.floor(safe_div(distance_km, MARATHON_KM)))


def pizza_slices(calories: float) -> int:
    return int(math.floor(safe_div(calories, PIZZA_SLICE_KCAL)))


def full_days_slept(mean_sleep_minutes: float, sleep_days: int) -> int:
    return int(math.floor(mean_sleep_minutes * sleep_days / MINUTES_PER_DAY))


def most_active_hour(hours: Iterable[int]) -> int:
    """Hour of day with the most workout starts; earliest hour wins ties."""
    counts: Dict[int, int] = {}
    for h in hours:
        counts[h] = counts.get(h, 0) + 1
    if not counts:
        return 0
    return max(sorted(counts), key=lambda h: counts[h])


def favorite_weekday(workout_counts: Dict[str, int]) -> str:
    """Weekday with most workouts, scanning Sunday first; Monday if none."""
    best_day, best_count = "Monday", 0
    for day in WEEKDAY_NAMES:
        count = workout_counts.get(day, 0)
        if count > best_count:
            best_day, best_count = day, count
    return best_day


# ─── Patterns ─────────────────────────────────────────────────


def most_productive_month(monthly_trends: Sequence[MonthTrend]) -> str:
    best_month, best_steps = MONTH_NAMES[0], 0
    for m in monthly_trends:
        if m.steps > best_steps:
            best_month, best_steps = m.month, m.steps
    return best_month


def best_workout_time(hour: int) -> str:
    if hour < MORNING_END_HOUR:
        return "Morning"
    if hour < AFTERNOON_END_HOUR:
        return "Afternoon"
    return "Evening"


def sleep_quality_trend(durations: Sequence[float]) -> str:
    """Compare mean sleep of the first vs second half of the year's nights.

    *durations* must be in chronological order.
    """
    half = len(durations) // 2
    first = mean_or_zero(durations[:half])
    second = mean_or_zero(durations[half:])
    if second > first * (1 + TREND_BAND):
        return "improving"
    if second < first * (1 - TREND_BAND):
        return "declining"
    return "stable"


def trend_direction(current: float, previous: float) -> str:
    """Month-over-month direction with the same ±5% stable band."""
    if current > previous * (1 + TREND_BAND):
        return "up"
    if current < previous * (1 - TREND_BAND):
        return "down"
    return "stable"
