"""
Data models for the health wrapped pipeline.

- RawRecord:    one parsed row of an export CSV (immutable)
- HealthExport: every raw record set plus resolved binning JSON
- SleepSession / WorkoutRecord / StepRecord: normalized records
- YearStats:    the per-year result handed to the presentation layer
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional


@dataclass(frozen=True)
class RawRecord:
    """One CSV row: header → raw string, plus the entry it came from."""
    fields: Mapping[str, str]
    file_name: str = ""

    def __post_init__(self):
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    def get(self, name: str, default: str = "") -> str:
        value = self.fields.get(name)
        return default if value is None else value

    def first(self, aliases: Iterable[str]) -> str:
        """Return the first non-empty value among *aliases*, else ''."""
        for name in aliases:
            value = self.fields.get(name)
            if value:
                return value
        return ""

    def first_number(self, aliases: Iterable[str]) -> float:
        """Return the first alias that parses to a non-zero number, else 0."""
        for name in aliases:
            value = to_number(self.fields.get(name))
            if value:
                return value
        return 0.0


def to_number(value: Any) -> float:
    """Coerce an export cell to float; blanks and garbage become 0."""
    if value is None:
        return 0.0
    try:
        out = float(str(value).strip())
    except (TypeError, ValueError):
        return 0.0
    if out != out or out in (float("inf"), float("-inf")):
        return 0.0
    return out


@dataclass
class HealthExport:
    """Raw record sets pulled out of one export archive."""
    steps: List[RawRecord] = field(default_factory=list)
    exercises: List[RawRecord] = field(default_factory=list)
    sleep: List[RawRecord] = field(default_factory=list)
    heart_rate: List[RawRecord] = field(default_factory=list)
    stress: List[RawRecord] = field(default_factory=list)
    oxygen_saturation: List[RawRecord] = field(default_factory=list)
    hrv: List[RawRecord] = field(default_factory=list)
    binning_data: Dict[str, list] = field(default_factory=dict)

    def counts(self) -> Dict[str, int]:
        return {
            "steps": len(self.steps),
            "exercises": len(self.exercises),
            "sleep": len(self.sleep),
            "heart_rate": len(self.heart_rate),
            "stress": len(self.stress),
            "oxygen_saturation": len(self.oxygen_saturation),
            "hrv": len(self.hrv),
            "binning_files": len(self.binning_data),
        }


# ─── Normalized records ─────────────────────────────────────


@dataclass(frozen=True)
class SleepSession:
    """Reconciled sleep episode in local wall-clock time."""
    start: datetime
    end: datetime
    duration: float  # asleep minutes
    efficiency: float = 0.0
    score: float = 0.0
    is_combined: bool = False

    @property
    def day(self) -> str:
        return self.start.date().isoformat()

    @property
    def bed_minutes(self) -> int:
        return self.start.hour * 60 + self.start.minute

    @property
    def wake_minutes(self) -> int:
        return self.end.hour * 60 + self.end.minute


@dataclass(frozen=True)
class WorkoutRecord:
    type: str
    duration: float  # minutes
    calories: float
    start_time: str
    date: str
    started_at: Optional[datetime] = None
    distance: Optional[float] = None  # km
    avg_hr: Optional[float] = None
    max_hr: Optional[float] = None
    avg_speed: Optional[float] = None


@dataclass(frozen=True)
class StepRecord:
    day: date
    count: int
    calories: float = 0.0
    distance: float = 0.0  # metres
    speed: float = 0.0
    source_type: str = ""


# ─── Year result value objects ──────────────────────────────


@dataclass(frozen=True)
class DailyValue:
    date: str
    value: float


@dataclass(frozen=True)
class TrendPoint:
    time: str
    value: int


@dataclass(frozen=True)
class BestDay:
    count: int = 0
    date: str = ""


@dataclass(frozen=True)
class BestMonth:
    name: str = ""
    steps: int = 0


@dataclass(frozen=True)
class MonthTrend:
    month: str
    steps: int


@dataclass(frozen=True)
class ExerciseCount:
    name: str
    count: int


@dataclass(frozen=True)
class DailyWorkout:
    date: str
    duration: float
    calories: float
    distance: float


@dataclass(frozen=True)
class LongestWorkout:
    duration: float = 0.0
    type: str = ""
    date: str = ""


@dataclass(frozen=True)
class BestSleepScore:
    score: float = 0.0
    date: str = ""


@dataclass(frozen=True)
class ActiveWeek:
    steps: int = 0
    week_start: str = ""


@dataclass(frozen=True)
class Streak:
    days: int = 0
    end_date: str = ""


@dataclass(frozen=True)
class PersonalRecords:
    most_steps_day: BestDay = BestDay()
    longest_workout: LongestWorkout = LongestWorkout()
    best_sleep_score: BestSleepScore = BestSleepScore()
    most_active_week: ActiveWeek = ActiveWeek()
    longest_streak: Streak = Streak()


@dataclass(frozen=True)
class WeekdayStat:
    day: str
    avg_steps: int = 0
    avg_workouts: int = 0
    avg_sleep: float = 0.0
    avg_stress: float = 0.0


@dataclass(frozen=True)
class MonthComparison:
    month: str
    steps: int
    workouts: int
    sleep: float
    trend: str
    change_percent: float


@dataclass(frozen=True)
class SeasonStat:
    season: str
    avg_steps: int
    avg_workouts: float
    avg_sleep: float
    top_activity: str


@dataclass(frozen=True)
class Correlations:
    sleep_vs_activity: float = 0.0
    stress_vs_workouts: float = 0.0
    hr_vs_sleep: float = 0.0


@dataclass(frozen=True)
class Personality:
    fitness_type: str = "Balanced"
    workout_style: str = "Casual"
    sleep_archetype: str = "Variable"


@dataclass(frozen=True)
class NicheStats:
    marathons_walked: int = 0
    calories_in_pizzas: int = 0
    sleep_days_total: int = 0
    most_active_hour: int = 0
    favorite_workout_day: str = "Monday"
    longest_streak: int = 0


@dataclass(frozen=True)
class FunComparisons:
    distance_equivalent: str = ""
    calorie_equivalent: str = ""
    sleep_equivalent: str = ""


@dataclass(frozen=True)
class Patterns:
    most_productive_month: str = "Jan"
    best_workout_time: str = "Morning"
    sleep_quality_trend: str = "stable"


@dataclass(frozen=True)
class WrappedInsights:
    personality: Personality = Personality()
    niche_stats: NicheStats = NicheStats()
    fun_comparisons: FunComparisons = FunComparisons()
    patterns: Patterns = Patterns()


@dataclass(frozen=True)
class YearStats:
    """Every aggregate shown for one year (or the synthetic All Time view)."""
    year: str
    total_steps: int
    daily_avg: int
    total_calories: int
    total_distance: float  # km
    avg_speed: float
    best_day: BestDay
    best_month: BestMonth
    monthly_trends: List[MonthTrend]
    top_exercises: List[ExerciseCount]

    avg_sleep_duration: float  # hours
    avg_efficiency: int
    avg_sleep_score: int
    avg_bed_time: str
    avg_wake_time: str

    total_workouts: int
    avg_resting_hr: int
    avg_hrv: int
    avg_stress: int
    min_spo2: int

    heart_rate: List[TrendPoint]
    stress: List[TrendPoint]
    daily_step_data: List[DailyValue]
    daily_sleep_data: List[DailyValue]
    daily_sleep_score_data: List[DailyValue]
    daily_hr_data: List[DailyValue]
    daily_hrv_data: List[DailyValue]
    daily_stress_data: List[DailyValue]
    daily_spo2_data: List[DailyValue]

    workouts: List[WorkoutRecord]
    total_workout_duration: float
    total_workout_calories: float
    total_workout_distance: float
    daily_workout_data: List[DailyWorkout]

    personal_records: PersonalRecords
    weekday_stats: List[WeekdayStat]
    monthly_comparison: List[MonthComparison]
    seasonal_data: List[SeasonStat]
    correlations: Correlations
    wrapped_insights: WrappedInsights

    def to_dict(self) -> Dict[str, Any]:
        """Plain JSON-ready structure (datetimes as ISO strings)."""
        return _jsonable(asdict(self))


def _jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value
