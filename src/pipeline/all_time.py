"""Synthetic "All Time" view merged from the per-year results.

A pure function of the list of YearStats: totals are summed, rates are
averaged per year, "best of" fields are maxed, per-day series are
concatenated and re-sorted. The result never depends on the order the
years are passed in.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Callable, List, Sequence, TypeVar

from analytics.stats_math import circular_mean_minutes, format_hhmm, parse_hhmm, round_half_up
from constants import ALL_TIME_KEY, MONTH_NAMES, TOP_EXERCISES_ALL_TIME, WEEKDAY_NAMES
from models import (
    ActiveWeek,
    BestDay,
    BestMonth,
    BestSleepScore,
    Correlations,
    DailyValue,
    ExerciseCount,
    LongestWorkout,
    MonthTrend,
    NicheStats,
    PersonalRecords,
    Streak,
    WeekdayStat,
    WrappedInsights,
    YearStats,
)
from pipeline.summary_builder import build_fun_comparisons

log = logging.getLogger("pipeline.all_time")

T = TypeVar("T")


def _mean(years: Sequence[YearStats], pick: Callable[[YearStats], float]) -> float:
    return sum(pick(y) for y in years) / len(years)


def _best(items: Sequence[T], start: T, score: Callable[[T], float]) -> T:
    """First item with the strictly highest score, else *start*."""
    best = start
    for item in items:
        if score(item) > score(best):
            best = item
    return best


def _merge_series(years: Sequence[YearStats],
                  pick: Callable[[YearStats], List[DailyValue]]) -> List[DailyValue]:
    return sorted((d for y in years for d in pick(y)), key=lambda d: d.date)


def _weekday_mean(years: Sequence[YearStats], day: str) -> WeekdayStat:
    rows = [next((w for w in y.weekday_stats if w.day == day), WeekdayStat(day=day))
            for y in years]
    n = len(rows)
    return WeekdayStat(
        day=day,
        avg_steps=round_half_up(sum(r.avg_steps for r in rows) / n),
        avg_workouts=round_half_up(sum(r.avg_workouts for r in rows) / n),
        avg_sleep=sum(r.avg_sleep for r in rows) / n,
        avg_stress=round_half_up(sum(r.avg_stress for r in rows) / n * 10) / 10,
    )


def _mean_clock(values: Sequence[str]) -> str:
    minutes = [m for m in (parse_hhmm(v) for v in values) if m is not None]
    return format_hhmm(circular_mean_minutes(minutes))


def build_all_time(years: Sequence[YearStats]) -> YearStats:
    """Merge per-year stats into one "All Time" YearStats."""
    if not years:
        raise ValueError("build_all_time needs at least one year")
    years = sorted(years, key=lambda y: y.year)
    latest = years[-1]

    monthly_trends = [
        MonthTrend(month=name, steps=sum(
            next((m.steps for m in y.monthly_trends if m.month == name), 0) for y in years))
        for name in MONTH_NAMES
    ]

    exercise_counts: Counter = Counter()
    for y in years:
        for e in y.top_exercises:
            exercise_counts[e.name] += e.count

    records = [y.personal_records for y in years]
    personal_records = PersonalRecords(
        most_steps_day=_best([r.most_steps_day for r in records], BestDay(), lambda b: b.count),
        longest_workout=_best([r.longest_workout for r in records], LongestWorkout(),
                              lambda w: w.duration),
        best_sleep_score=_best([r.best_sleep_score for r in records], BestSleepScore(),
                               lambda s: s.score),
        most_active_week=_best([r.most_active_week for r in records], ActiveWeek(),
                               lambda w: w.steps),
        longest_streak=_best([r.longest_streak for r in records], Streak(), lambda s: s.days),
    )

    total_distance = round_half_up(sum(y.total_distance for y in years) * 100) / 100
    last_niche = latest.wrapped_insights.niche_stats
    niche = NicheStats(
        marathons_walked=sum(y.wrapped_insights.niche_stats.marathons_walked for y in years),
        calories_in_pizzas=sum(y.wrapped_insights.niche_stats.calories_in_pizzas for y in years),
        sleep_days_total=sum(y.wrapped_insights.niche_stats.sleep_days_total for y in years),
        most_active_hour=last_niche.most_active_hour,
        favorite_workout_day=last_niche.favorite_workout_day,
        longest_streak=max(y.wrapped_insights.niche_stats.longest_streak for y in years),
    )

    positive_spo2 = [y.min_spo2 for y in years if y.min_spo2 > 0]

    merged = YearStats(
        year=ALL_TIME_KEY,
        total_steps=sum(y.total_steps for y in years),
        daily_avg=round_half_up(_mean(years, lambda y: y.daily_avg)),
        total_calories=sum(y.total_calories for y in years),
        total_distance=total_distance,
        avg_speed=round_half_up(_mean(years, lambda y: y.avg_speed) * 10) / 10,
        best_day=_best([y.best_day for y in years], BestDay(), lambda b: b.count),
        best_month=_best([y.best_month for y in years], BestMonth(), lambda m: m.steps),
        monthly_trends=monthly_trends,
        top_exercises=[ExerciseCount(name=name, count=count)
                       for name, count in exercise_counts.most_common(TOP_EXERCISES_ALL_TIME)],
        avg_sleep_duration=_mean(years, lambda y: y.avg_sleep_duration),
        avg_efficiency=round_half_up(_mean(years, lambda y: y.avg_efficiency)),
        avg_sleep_score=round_half_up(_mean(years, lambda y: y.avg_sleep_score)),
        avg_bed_time=_mean_clock([y.avg_bed_time for y in years]),
        avg_wake_time=_mean_clock([y.avg_wake_time for y in years]),
        total_workouts=sum(y.total_workouts for y in years),
        avg_resting_hr=round_half_up(_mean(years, lambda y: y.avg_resting_hr)),
        avg_hrv=round_half_up(_mean(years, lambda y: y.avg_hrv)),
        avg_stress=round_half_up(_mean(years, lambda y: y.avg_stress)),
        min_spo2=min(positive_spo2) if positive_spo2 else 0,
        heart_rate=[],
        stress=[],
        daily_step_data=_merge_series(years, lambda y: y.daily_step_data),
        daily_sleep_data=_merge_series(years, lambda y: y.daily_sleep_data),
        daily_sleep_score_data=_merge_series(years, lambda y: y.daily_sleep_score_data),
        daily_hr_data=_merge_series(years, lambda y: y.daily_hr_data),
        daily_hrv_data=_merge_series(years, lambda y: y.daily_hrv_data),
        daily_stress_data=_merge_series(years, lambda y: y.daily_stress_data),
        daily_spo2_data=_merge_series(years, lambda y: y.daily_spo2_data),
        workouts=sorted((w for y in years for w in y.workouts),
                        key=lambda w: w.start_time, reverse=True),
        total_workout_duration=sum(y.total_workout_duration for y in years),
        total_workout_calories=sum(y.total_workout_calories for y in years),
        total_workout_distance=sum(y.total_workout_distance for y in years),
        daily_workout_data=sorted((d for y in years for d in y.daily_workout_data),
                                  key=lambda d: d.date),
        personal_records=personal_records,
        weekday_stats=[_weekday_mean(years, day) for day in WEEKDAY_NAMES],
        monthly_comparison=[],
        seasonal_data=[],
        correlations=Correlations(
            sleep_vs_activity=_mean(years, lambda y: y.correlations.sleep_vs_activity),
            stress_vs_workouts=_mean(years, lambda y: y.correlations.stress_vs_workouts),
            hr_vs_sleep=_mean(years, lambda y: y.correlations.hr_vs_sleep),
        ),
        wrapped_insights=WrappedInsights(
            personality=latest.wrapped_insights.personality,
            niche_stats=niche,
            fun_comparisons=build_fun_comparisons(niche, total_distance),
            patterns=latest.wrapped_insights.patterns,
        ),
    )
    log.info("All Time: merged %d years (%s..%s)", len(years), years[0].year, latest.year)
    return merged
