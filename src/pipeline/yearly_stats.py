"""
Yearly Stats Builder
====================
Partitions every normalized record set by calendar year and computes the
full YearStats for each year.

Inputs (already reconciled upstream):
  - raw step-trend and exercise rows from the HealthExport
  - de-duplicated SleepSessions (local wall-clock)
  - daily wellness series (resting HR, HRV, stress, SpO2)

Year discovery looks at every source (steps of any device tag, sleep,
heart rate, HRV, exercises); the per-year step totals only count the merged
"all devices" rows. Each year is independent of every other year.
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Sequence

import pandas as pd

from analytics.stats_math import (
    circular_mean_minutes,
    format_hhmm,
    longest_streak,
    mean_or_zero,
    pearson,
    round_half_up,
    safe_div,
)
from analytics import wrapped_insights as wi
from config import reference_date
from constants import (
    DEFAULT_BEDTIME_HOUR,
    DEFAULT_EXERCISE_LABEL,
    DEFAULT_WORKOUT_HOUR,
    EXERCISE_CALORIE_FIELDS,
    EXERCISE_DISTANCE_FIELDS,
    EXERCISE_DURATION_FIELDS,
    EXERCISE_MAX_HR_FIELDS,
    EXERCISE_MEAN_HR_FIELDS,
    EXERCISE_MEAN_SPEED_FIELDS,
    EXERCISE_START_FIELDS,
    EXERCISE_TYPE_FIELDS,
    EXERCISE_TYPES,
    HR_START_FIELDS,
    HR_TREND_POINTS,
    HR_VALUE_FIELDS,
    HRV_START_FIELDS,
    MONTH_NAMES,
    MS_PER_MINUTE,
    SEASONS,
    STEP_CALORIE_FIELDS,
    STEP_COUNT_FIELDS,
    STEP_DAY_TIME_FIELDS,
    STEP_DISTANCE_FIELDS,
    STEP_SOURCE_DEVICE,
    STEP_SOURCE_FIELDS,
    STEP_SPEED_FIELDS,
    STEP_UPDATE_TIME_FIELDS,
    STRESS_START_FIELDS,
    STRESS_TREND_POINTS,
    STRESS_VALUE_FIELDS,
    TOP_EXERCISES_PER_YEAR,
    WEEKDAY_NAMES,
)
from models import (
    ActiveWeek,
    BestDay,
    BestMonth,
    BestSleepScore,
    Correlations,
    DailyValue,
    DailyWorkout,
    ExerciseCount,
    HealthExport,
    LongestWorkout,
    MonthComparison,
    MonthTrend,
    NicheStats,
    Patterns,
    PersonalRecords,
    Personality,
    RawRecord,
    SeasonStat,
    SleepSession,
    StepRecord,
    Streak,
    WeekdayStat,
    WorkoutRecord,
    WrappedInsights,
    YearStats,
)
from pipeline.fields import parse_epoch_ms_date, parse_wall_clock
from pipeline.summary_builder import build_fun_comparisons
from pipeline.wellness import WellnessSeries, trend_points

log = logging.getLogger("pipeline.yearly_stats")


# ─── Record normalization ─────────────────────────────────────


def step_from_record(record: RawRecord) -> Optional[StepRecord]:
    """Step-trend row → StepRecord; None when no day can be derived.

    The day comes from ``day_time`` (epoch ms, UTC date) and falls back to
    the date part of ``update_time``.
    """
    day = parse_epoch_ms_date(record.first(STEP_DAY_TIME_FIELDS))
    if day is None:
        updated = parse_wall_clock(record.first(STEP_UPDATE_TIME_FIELDS))
        if updated is None:
            return None
        day = updated.date()
    return StepRecord(
        day=day,
        count=int(record.first_number(STEP_COUNT_FIELDS)),
        calories=record.first_number(STEP_CALORIE_FIELDS),
        distance=record.first_number(STEP_DISTANCE_FIELDS),
        speed=record.first_number(STEP_SPEED_FIELDS),
        source_type=record.first(STEP_SOURCE_FIELDS).strip(),
    )


def workout_from_record(record: RawRecord) -> Optional[WorkoutRecord]:
    """Exercise row → WorkoutRecord; None without a parseable start time."""
    start_text = record.first(EXERCISE_START_FIELDS)
    started = parse_wall_clock(start_text)
    if started is None:
        return None

    type_code = int(record.first_number(EXERCISE_TYPE_FIELDS))
    distance = record.first_number(EXERCISE_DISTANCE_FIELDS)
    avg_hr = record.first_number(EXERCISE_MEAN_HR_FIELDS)
    max_hr = record.first_number(EXERCISE_MAX_HR_FIELDS)
    avg_speed = record.first_number(EXERCISE_MEAN_SPEED_FIELDS)
    return WorkoutRecord(
        type=EXERCISE_TYPES.get(type_code, DEFAULT_EXERCISE_LABEL),
        duration=record.first_number(EXERCISE_DURATION_FIELDS) / MS_PER_MINUTE,
        calories=record.first_number(EXERCISE_CALORIE_FIELDS),
        start_time=start_text.strip(),
        date=started.date().isoformat(),
        started_at=started,
        distance=distance / 1000 if distance > 0 else None,
        avg_hr=avg_hr if avg_hr > 0 else None,
        max_hr=max_hr if max_hr > 0 else None,
        avg_speed=avg_speed if avg_speed > 0 else None,
    )


def counts_toward_totals(step: StepRecord) -> bool:
    """Only merged all-device rows (or untagged rows) are summed."""
    return step.source_type == STEP_SOURCE_DEVICE or not step.source_type


def _sunday_first_index(day: date) -> int:
    return (day.weekday() + 1) % 7


def days_elapsed(year: int, today: date) -> int:
    """Whole days of *year* to average over: elapsed days for the current year."""
    if year == today.year:
        return (today - date(year, 1, 1)).days
    return (date(year + 1, 1, 1) - date(year, 1, 1)).days


# ─── Per-year intermediates ───────────────────────────────────


@dataclass
class SleepDay:
    """All reconciled sessions that started on one local day."""
    minutes: float = 0.0
    efficiency: List[float] = field(default_factory=list)
    score: List[float] = field(default_factory=list)
    bed_times: List[int] = field(default_factory=list)
    wake_times: List[int] = field(default_factory=list)

    @property
    def hours(self) -> float:
        return self.minutes / 60

    @property
    def mean_efficiency(self) -> float:
        return mean_or_zero(self.efficiency)

    @property
    def mean_score(self) -> float:
        return mean_or_zero(self.score)


def group_sleep_days(sessions: Sequence[SleepSession]) -> Dict[str, SleepDay]:
    """Bucket sessions by local start day, date-sorted."""
    days: Dict[str, SleepDay] = defaultdict(SleepDay)
    for s in sessions:
        if s.duration <= 0:
            continue
        bucket = days[s.day]
        bucket.minutes += s.duration
        if s.efficiency > 0:
            bucket.efficiency.append(s.efficiency)
        if s.score > 0:
            bucket.score.append(s.score)
        bucket.bed_times.append(s.bed_minutes)
        bucket.wake_times.append(s.wake_minutes)
    return dict(sorted(days.items()))


def _step_frame(steps: Sequence[StepRecord]) -> pd.DataFrame:
    frame = pd.DataFrame(
        [(pd.Timestamp(s.day), s.count, s.calories, s.distance, s.speed) for s in steps],
        columns=["day", "count", "calories", "distance", "speed"],
    )
    frame["day"] = pd.to_datetime(frame["day"])
    return frame


def _in_year(series: Sequence[DailyValue], year: int) -> List[DailyValue]:
    prefix = f"{year:04d}-"
    return [d for d in series if d.date.startswith(prefix)]


# ─── Builder ──────────────────────────────────────────────────


class YearlyStatsBuilder:
    """Computes YearStats for every discovered year of one export."""

    def __init__(self, export: HealthExport, sleep: Sequence[SleepSession],
                 wellness: WellnessSeries, today: Optional[date] = None):
        self.export = export
        self.sleep = list(sleep)
        self.wellness = wellness
        self.today = today or reference_date()

        self.steps = [s for s in (step_from_record(r) for r in export.steps) if s is not None]
        self.workouts = [w for w in (workout_from_record(r) for r in export.exercises)
                         if w is not None]
        log.info("Normalized %d step rows and %d workouts", len(self.steps), len(self.workouts))

    # ── Year discovery ──────────────────────────────────────

    def discover_years(self) -> List[int]:
        years = set()
        years.update(s.day.year for s in self.steps)
        years.update(s.start.year for s in self.sleep)
        for records, start_fields in ((self.export.heart_rate, HR_START_FIELDS),
                                      (self.export.hrv, HRV_START_FIELDS)):
            for record in records:
                started = parse_wall_clock(record.first(start_fields))
                if started is not None:
                    years.add(started.year)
        years.update(w.started_at.year for w in self.workouts)
        return sorted(years)

    def build_all(self) -> Dict[str, YearStats]:
        return {str(year): self.build(year) for year in self.discover_years()}

    # ── One year ────────────────────────────────────────────

    def build(self, year: int) -> YearStats:
        steps = [s for s in self.steps if s.day.year == year and counts_toward_totals(s)]
        workouts = sorted(
            (w for w in self.workouts if w.started_at.year == year),
            key=lambda w: w.started_at, reverse=True,
        )
        sleep_days = group_sleep_days([s for s in self.sleep if s.start.year == year])

        daily_hr = _in_year(self.wellness.heart_rate, year)
        daily_hrv = _in_year(self.wellness.hrv, year)
        daily_stress = _in_year(self.wellness.stress, year)
        daily_spo2 = _in_year(self.wellness.spo2, year)

        frame = _step_frame(steps)
        daily_steps = self._daily_steps(frame)

        total_steps = int(frame["count"].sum()) if not frame.empty else 0
        total_calories = float(frame["calories"].sum()) if not frame.empty else 0.0
        distance_km = float(frame["distance"].sum()) / 1000 if not frame.empty else 0.0
        moving = frame.loc[frame["speed"] > 0, "speed"] if not frame.empty else []
        avg_speed = float(moving.mean()) if len(moving) else 0.0

        best_day = self._best_day(frame)
        monthly_trends = self._monthly_trends(frame)
        best_month = BestMonth()
        for m in monthly_trends:
            if m.steps > best_month.steps:
                best_month = BestMonth(name=m.month, steps=m.steps)

        exercise_counts = Counter(w.type for w in workouts)
        top_exercises = [ExerciseCount(name=name, count=count)
                         for name, count in exercise_counts.most_common(TOP_EXERCISES_PER_YEAR)]

        avg_sleep_minutes = mean_or_zero([d.minutes for d in sleep_days.values()])
        avg_efficiency = mean_or_zero([d.mean_efficiency for d in sleep_days.values()])
        avg_score = mean_or_zero([d.mean_score for d in sleep_days.values()])
        bed_times = [m for d in sleep_days.values() for m in d.bed_times]
        wake_times = [m for d in sleep_days.values() for m in d.wake_times]

        weekday_stats = self._weekday_stats(daily_steps, workouts, sleep_days, daily_stress)
        streak_days, streak_end = longest_streak(s.day for s in steps)

        personal_records = PersonalRecords(
            most_steps_day=best_day,
            longest_workout=self._longest_workout(workouts),
            best_sleep_score=self._best_sleep_score(sleep_days),
            most_active_week=self._most_active_week(frame),
            longest_streak=Streak(days=streak_days,
                                  end_date=streak_end.isoformat() if streak_end else ""),
        )

        insights = self._wrapped_insights(
            workouts=workouts,
            sleep_days=sleep_days,
            avg_efficiency=avg_efficiency,
            avg_sleep_minutes=avg_sleep_minutes,
            distance_km=distance_km,
            total_calories=total_calories,
            monthly_trends=monthly_trends,
            weekday_stats=weekday_stats,
            streak_days=streak_days,
        )

        stats = YearStats(
            year=str(year),
            total_steps=total_steps,
            daily_avg=round_half_up(total_steps / max(days_elapsed(year, self.today), 1)),
            total_calories=round_half_up(total_calories),
            total_distance=round_half_up(distance_km * 100) / 100,
            avg_speed=round_half_up(avg_speed * 10) / 10,
            best_day=best_day,
            best_month=best_month,
            monthly_trends=monthly_trends,
            top_exercises=top_exercises,
            avg_sleep_duration=avg_sleep_minutes / 60,
            avg_efficiency=round_half_up(avg_efficiency),
            avg_sleep_score=round_half_up(avg_score),
            avg_bed_time=format_hhmm(circular_mean_minutes(bed_times)),
            avg_wake_time=format_hhmm(circular_mean_minutes(wake_times)),
            total_workouts=len(workouts),
            avg_resting_hr=round_half_up(mean_or_zero([d.value for d in daily_hr])),
            avg_hrv=round_half_up(mean_or_zero([d.value for d in daily_hrv])),
            avg_stress=round_half_up(mean_or_zero([d.value for d in daily_stress])),
            min_spo2=int(min((d.value for d in daily_spo2), default=0)),
            heart_rate=trend_points(self.export.heart_rate, HR_START_FIELDS,
                                    HR_VALUE_FIELDS, year, HR_TREND_POINTS),
            stress=trend_points(self.export.stress, STRESS_START_FIELDS,
                                STRESS_VALUE_FIELDS, year, STRESS_TREND_POINTS),
            daily_step_data=[DailyValue(date=d.isoformat(), value=v)
                             for d, v in daily_steps.items()],
            daily_sleep_data=[DailyValue(date=day, value=d.hours)
                              for day, d in sleep_days.items()],
            daily_sleep_score_data=[DailyValue(date=day, value=d.mean_score)
                                    for day, d in sleep_days.items()],
            daily_hr_data=daily_hr,
            daily_hrv_data=daily_hrv,
            daily_stress_data=daily_stress,
            daily_spo2_data=daily_spo2,
            workouts=workouts,
            total_workout_duration=sum(w.duration for w in workouts),
            total_workout_calories=sum(w.calories for w in workouts),
            total_workout_distance=sum(w.distance or 0 for w in workouts),
            daily_workout_data=self._daily_workouts(workouts),
            personal_records=personal_records,
            weekday_stats=weekday_stats,
            monthly_comparison=self._monthly_comparison(monthly_trends, workouts, sleep_days),
            seasonal_data=self._seasonal_data(daily_steps, workouts, sleep_days),
            correlations=self._correlations(daily_steps, workouts, sleep_days,
                                            daily_hr, daily_stress),
            wrapped_insights=insights,
        )
        log.info("Year %d: %d steps, %d workouts, %d sleep days",
                 year, total_steps, len(workouts), len(sleep_days))
        return stats

    # ── Steps ───────────────────────────────────────────────

    @staticmethod
    def _daily_steps(frame: pd.DataFrame) -> Dict[date, int]:
        if frame.empty:
            return {}
        daily = frame.groupby("day")["count"].sum().sort_index()
        return {ts.date(): int(v) for ts, v in daily.items()}

    @staticmethod
    def _best_day(frame: pd.DataFrame) -> BestDay:
        if frame.empty or frame["count"].max() <= 0:
            return BestDay()
        row = frame.loc[frame["count"].idxmax()]
        return BestDay(count=int(row["count"]), date=row["day"].date().isoformat())

    @staticmethod
    def _monthly_trends(frame: pd.DataFrame) -> List[MonthTrend]:
        by_month: Dict[int, int] = {}
        if not frame.empty:
            grouped = frame.groupby(frame["day"].dt.month)["count"].sum()
            by_month = {int(m): int(v) for m, v in grouped.items()}
        return [MonthTrend(month=name, steps=by_month.get(i + 1, 0))
                for i, name in enumerate(MONTH_NAMES)]

    @staticmethod
    def _most_active_week(frame: pd.DataFrame) -> ActiveWeek:
        if frame.empty:
            return ActiveWeek()
        week_start = frame["day"] - pd.to_timedelta(frame["day"].dt.weekday, unit="D")
        weekly = frame.groupby(week_start)["count"].sum().sort_index()
        if weekly.max() <= 0:
            return ActiveWeek()
        start = weekly.idxmax()
        return ActiveWeek(steps=int(weekly[start]), week_start=start.date().isoformat())

    # ── Workouts ────────────────────────────────────────────

    @staticmethod
    def _daily_workouts(workouts: Sequence[WorkoutRecord]) -> List[DailyWorkout]:
        totals: Dict[str, List[float]] = defaultdict(lambda: [0.0, 0.0, 0.0])
        for w in workouts:
            t = totals[w.date]
            t[0] += w.duration
            t[1] += w.calories
            t[2] += w.distance or 0
        return [DailyWorkout(date=day, duration=t[0], calories=t[1], distance=t[2])
                for day, t in sorted(totals.items())]

    @staticmethod
    def _longest_workout(workouts: Sequence[WorkoutRecord]) -> LongestWorkout:
        best = LongestWorkout()
        for w in workouts:
            if w.duration > best.duration:
                best = LongestWorkout(duration=w.duration, type=w.type, date=w.date)
        return best

    # ── Sleep ───────────────────────────────────────────────

    @staticmethod
    def _best_sleep_score(sleep_days: Dict[str, SleepDay]) -> BestSleepScore:
        best = BestSleepScore()
        for day, d in sleep_days.items():
            if d.mean_score > best.score:
                best = BestSleepScore(score=d.mean_score, date=day)
        return best

    # ── Breakdowns ──────────────────────────────────────────

    @staticmethod
    def _weekday_stats(daily_steps: Dict[date, int], workouts: Sequence[WorkoutRecord],
                       sleep_days: Dict[str, SleepDay],
                       daily_stress: Sequence[DailyValue]) -> List[WeekdayStat]:
        steps: List[List[int]] = [[] for _ in WEEKDAY_NAMES]
        sleep: List[List[float]] = [[] for _ in WEEKDAY_NAMES]
        stress: List[List[float]] = [[] for _ in WEEKDAY_NAMES]
        sessions = [0] * len(WEEKDAY_NAMES)

        for day, count in daily_steps.items():
            steps[_sunday_first_index(day)].append(count)
        for w in workouts:
            sessions[_sunday_first_index(w.started_at.date())] += 1
        for day, d in sleep_days.items():
            sleep[_sunday_first_index(date.fromisoformat(day))].append(d.hours)
        for d in daily_stress:
            stress[_sunday_first_index(date.fromisoformat(d.date))].append(d.value)

        return [
            WeekdayStat(
                day=name,
                avg_steps=round_half_up(mean_or_zero(steps[i])),
                avg_workouts=sessions[i],
                avg_sleep=mean_or_zero(sleep[i]),
                avg_stress=round_half_up(mean_or_zero(stress[i]) * 10) / 10,
            )
            for i, name in enumerate(WEEKDAY_NAMES)
        ]

    @staticmethod
    def _monthly_comparison(monthly_trends: Sequence[MonthTrend],
                            workouts: Sequence[WorkoutRecord],
                            sleep_days: Dict[str, SleepDay]) -> List[MonthComparison]:
        workouts_by_month = Counter(w.started_at.month for w in workouts)
        sleep_by_month: Dict[int, List[float]] = defaultdict(list)
        for day, d in sleep_days.items():
            sleep_by_month[int(day[5:7])].append(d.hours)

        out: List[MonthComparison] = []
        previous: Optional[int] = None
        for i, trend in enumerate(monthly_trends):
            if previous is None:
                direction, change = "stable", 0.0
            else:
                direction = wi.trend_direction(trend.steps, previous)
                change = round_half_up(safe_div(trend.steps - previous, previous) * 1000) / 10
            out.append(MonthComparison(
                month=trend.month,
                steps=trend.steps,
                workouts=workouts_by_month.get(i + 1, 0),
                sleep=round_half_up(mean_or_zero(sleep_by_month.get(i + 1, [])) * 100) / 100,
                trend=direction,
                change_percent=change,
            ))
            previous = trend.steps
        return out

    @staticmethod
    def _seasonal_data(daily_steps: Dict[date, int], workouts: Sequence[WorkoutRecord],
                       sleep_days: Dict[str, SleepDay]) -> List[SeasonStat]:
        out: List[SeasonStat] = []
        for season, months in SEASONS.items():
            season_steps = [v for d, v in daily_steps.items() if d.month in months]
            season_workouts = [w for w in workouts if w.started_at.month in months]
            season_sleep = [d.hours for day, d in sleep_days.items() if int(day[5:7]) in months]
            top = Counter(w.type for w in season_workouts).most_common(1)
            out.append(SeasonStat(
                season=season,
                avg_steps=round_half_up(mean_or_zero(season_steps)),
                avg_workouts=round_half_up(len(season_workouts) / len(months) * 10) / 10,
                avg_sleep=round_half_up(mean_or_zero(season_sleep) * 100) / 100,
                top_activity=top[0][0] if top else "",
            ))
        return out

    @staticmethod
    def _correlations(daily_steps: Dict[date, int], workouts: Sequence[WorkoutRecord],
                      sleep_days: Dict[str, SleepDay], daily_hr: Sequence[DailyValue],
                      daily_stress: Sequence[DailyValue]) -> Correlations:
        steps_by_day = {d.isoformat(): v for d, v in daily_steps.items()}
        sleep_hours = [d.hours for d in sleep_days.values()]
        sleep_steps = [steps_by_day.get(day, 0) for day in sleep_days]

        sessions_by_day = Counter(w.date for w in workouts)
        stress_values = [d.value for d in daily_stress]
        stress_sessions = [sessions_by_day.get(d.date, 0) for d in daily_stress]

        paired = [(d.value, sleep_days[d.date].hours) for d in daily_hr if d.date in sleep_days]
        return Correlations(
            sleep_vs_activity=pearson(sleep_hours, sleep_steps),
            stress_vs_workouts=pearson(stress_values, stress_sessions),
            hr_vs_sleep=pearson([p[0] for p in paired], [p[1] for p in paired]),
        )

    # ── Insights ────────────────────────────────────────────

    @staticmethod
    def _wrapped_insights(*, workouts: Sequence[WorkoutRecord],
                          sleep_days: Dict[str, SleepDay], avg_efficiency: float,
                          avg_sleep_minutes: float, distance_km: float,
                          total_calories: float, monthly_trends: Sequence[MonthTrend],
                          weekday_stats: Sequence[WeekdayStat],
                          streak_days: int) -> WrappedInsights:
        hours = [w.started_at.hour for w in workouts]
        avg_hour = mean_or_zero(hours) if hours else DEFAULT_WORKOUT_HOUR
        weekend = sum(1 for w in workouts if _sunday_first_index(w.started_at.date()) in (0, 6))

        bed_hours = [m // 60 for d in sleep_days.values() for m in d.bed_times]
        avg_bed_hour = mean_or_zero(bed_hours) if bed_hours else DEFAULT_BEDTIME_HOUR

        personality = Personality(
            fitness_type=wi.classify_fitness_type(avg_hour),
            workout_style=wi.classify_workout_style(weekend, len(workouts) - weekend),
            sleep_archetype=wi.classify_sleep_archetype(avg_efficiency, avg_bed_hour),
        )

        active_hour = wi.most_active_hour(hours)
        niche = NicheStats(
            marathons_walked=wi.marathons_walked(distance_km),
            calories_in_pizzas=wi.pizza_slices(total_calories),
            sleep_days_total=wi.full_days_slept(avg_sleep_minutes, len(sleep_days)),
            most_active_hour=active_hour,
            favorite_workout_day=wi.favorite_weekday(
                {s.day: s.avg_workouts for s in weekday_stats}),
            longest_streak=streak_days,
        )

        patterns = Patterns(
            most_productive_month=wi.most_productive_month(monthly_trends),
            best_workout_time=wi.best_workout_time(active_hour),
            sleep_quality_trend=wi.sleep_quality_trend([d.minutes for d in sleep_days.values()]),
        )
        return WrappedInsights(
            personality=personality,
            niche_stats=niche,
            fun_comparisons=build_fun_comparisons(niche, distance_km),
            patterns=patterns,
        )
