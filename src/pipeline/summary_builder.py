"""Helpers for building fun comparisons and concise year text for UI cards."""

from __future__ import annotations

import math

from constants import FIVE_K_KM
from models import FunComparisons, NicheStats, YearStats


def build_fun_comparisons(niche: NicheStats, distance_km: float) -> FunComparisons:
    """Turn niche counts into the three headline comparison strings."""
    marathons = niche.marathons_walked
    if marathons > 0:
        distance = f"{marathons} marathon{'s' if marathons > 1 else ''}"
    else:
        distance = f"{int(math.floor(distance_km / FIVE_K_KM))} 5K runs"
    return FunComparisons(
        distance_equivalent=distance,
        calorie_equivalent=f"{niche.calories_in_pizzas} pizza slices",
        sleep_equivalent=f"{niche.sleep_days_total} full days",
    )


def build_year_digest(stats: YearStats) -> str:
    """Create a strict 3-bullet, human-friendly digest of one year."""

    def clip(s: str, limit: int = 260) -> str:
        s = s.replace("\n", " ").strip()
        if len(s) <= limit:
            return s
        return s[: limit - 3].rstrip() + "..."

    def bullet(label: str, value: str) -> str:
        prefix = f"- {label}: "
        allowed = max(48, 280 - len(prefix))
        return prefix + clip(value, allowed)

    insights = stats.wrapped_insights
    fun = insights.fun_comparisons

    if stats.total_steps:
        activity = (
            f"{stats.total_steps:,} steps ({stats.daily_avg:,}/day), "
            f"{stats.total_distance:.2f} km, about {fun.distance_equivalent}."
        )
        if stats.best_month.name:
            activity += f" Best month: {stats.best_month.name}."
    else:
        activity = "No step data recorded."

    if stats.avg_sleep_duration:
        sleep = (
            f"{stats.avg_sleep_duration:.1f} h average, bed {stats.avg_bed_time}, "
            f"wake {stats.avg_wake_time}, trend {insights.patterns.sleep_quality_trend}."
        )
    else:
        sleep = "No sleep sessions recorded."

    personality = insights.personality
    training = (
        f"{stats.total_workouts} workouts, {personality.fitness_type} / "
        f"{personality.workout_style}, favourite day "
        f"{insights.niche_stats.favorite_workout_day}."
    )

    return (
        f"{bullet('Activity', activity)}\n"
        f"{bullet('Sleep', sleep)}\n"
        f"{bullet('Training', training)}"
    )
