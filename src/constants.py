"""
Shared constants used across multiple modules.
Single source of truth for export field aliases and insight thresholds.
"""

# Samsung Health exercise_type codes → display label
EXERCISE_TYPES = {
    0: "Workout",
    1001: "Walking",
    1002: "Running",
    11007: "Cycling",
    11008: "Mountain biking",
    13001: "Hiking",
    14001: "Swimming",
    15001: "Yoga",
    10001: "Bench Press",
    10009: "Leg Extension",
    10012: "Strength Training",
    10015: "Squats",
    12001: "Pilates",
    17001: "Circuit Training",
}
DEFAULT_EXERCISE_LABEL = "Workout"

MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
               "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
# Sunday-first, matching the dashboard weekday strip
WEEKDAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday",
                 "Thursday", "Friday", "Saturday"]

ALL_TIME_KEY = "All Time"

# ─── Field aliases (first match wins) ─────────────────────────

SLEEP_OFFSET_FIELDS = ("time_offset", "com.samsung.health.sleep.time_offset")
SLEEP_START_FIELDS = ("com.samsung.health.sleep.start_time", "start_time", "update_time")
SLEEP_END_FIELDS = ("com.samsung.health.sleep.end_time", "end_time")
SLEEP_DURATION_FIELDS = ("sleep_duration", "com.samsung.health.sleep.duration", "duration")
SLEEP_EFFICIENCY_FIELDS = ("efficiency", "com.samsung.health.sleep.efficiency")
SLEEP_SCORE_FIELDS = ("sleep_score", "com.samsung.health.sleep.sleep_score")

EXERCISE_START_FIELDS = ("com.samsung.health.exercise.start_time", "start_time")
EXERCISE_TYPE_FIELDS = ("com.samsung.health.exercise.exercise_type", "exercise_type")
EXERCISE_DURATION_FIELDS = ("com.samsung.health.exercise.duration", "duration")
EXERCISE_CALORIE_FIELDS = ("com.samsung.health.exercise.calorie", "calorie")
EXERCISE_DISTANCE_FIELDS = ("com.samsung.health.exercise.distance", "distance")
EXERCISE_MEAN_HR_FIELDS = ("com.samsung.health.exercise.mean_heart_rate", "mean_heart_rate")
EXERCISE_MAX_HR_FIELDS = ("com.samsung.health.exercise.max_heart_rate", "max_heart_rate")
EXERCISE_MEAN_SPEED_FIELDS = ("com.samsung.health.exercise.mean_speed", "mean_speed")

HR_BIN_FIELDS = ("binning_data", "com.samsung.health.heart_rate.binning_data")
STRESS_BIN_FIELDS = ("binning_data", "com.samsung.health.stress.binning_data")
HRV_BIN_FIELDS = ("binning_data",)
STRESS_VALUE_FIELDS = ("score", "stress")

HR_START_FIELDS = ("start_time", "com.samsung.health.heart_rate.start_time")
HR_VALUE_FIELDS = ("heart_rate", "com.samsung.health.heart_rate.heart_rate")
HRV_START_FIELDS = ("start_time", "com.samsung.health.hrv.start_time")
STRESS_START_FIELDS = ("start_time", "com.samsung.health.stress.start_time")
SPO2_START_FIELDS = ("start_time", "com.samsung.health.oxygen_saturation.start_time")
SPO2_VALUE_FIELDS = ("spo2", "com.samsung.health.oxygen_saturation.spo2")

STEP_DAY_TIME_FIELDS = ("day_time", "com.samsung.health.step_daily_trend.day_time")
STEP_UPDATE_TIME_FIELDS = ("update_time", "com.samsung.health.step_daily_trend.update_time")
STEP_SOURCE_FIELDS = ("source_type", "com.samsung.health.step_daily_trend.source_type")
STEP_COUNT_FIELDS = ("count", "com.samsung.health.step_daily_trend.count")
STEP_CALORIE_FIELDS = ("calorie", "com.samsung.health.step_daily_trend.calorie")
STEP_DISTANCE_FIELDS = ("distance", "com.samsung.health.step_daily_trend.distance")
STEP_SPEED_FIELDS = ("speed", "com.samsung.health.step_daily_trend.speed")

# Step rows from the phone pedometer and the watch are both exported;
# only the merged "all devices" tag (or untagged rows) are counted.
STEP_SOURCE_DEVICE = "-2"

# ─── Tabular header detection ─────────────────────────────────

HEADER_SCAN_LINES = 12
HEADER_MIN_FIELDS = 5  # header must have MORE than this many fields
HEADER_KEYWORDS = ("date", "time", "count", "efficiency", "duration", "step")

# ─── Sleep reconciliation ─────────────────────────────────────

MINUTES_PER_DAY = 1440
MS_PER_MINUTE = 60000
SPAN_MATCH_TOLERANCE_MIN = 5
DEDUP_OVERLAP_RATIO = 0.8

# ─── Wellness ─────────────────────────────────────────────────

RESTING_HR_PERCENTILE = 0.1
HR_TREND_POINTS = 30
STRESS_TREND_POINTS = 20

# ─── Wrapped insight thresholds ───────────────────────────────

EARLY_BIRD_HOUR = 10
NIGHT_OWL_WORKOUT_HOUR = 17
DEFAULT_WORKOUT_HOUR = 12

WEEKEND_WARRIOR_RATIO = 1.5
CONSISTENT_GRINDER_SESSIONS = 150

CONSISTENT_SLEEPER_EFFICIENCY = 85
NIGHT_OWL_BEDTIME_HOUR = 23
EARLY_RISER_BEDTIME_HOUR = 22
DEFAULT_BEDTIME_HOUR = 23

MARATHON_KM = 42.195
FIVE_K_KM = 5
PIZZA_SLICE_KCAL = 285

MORNING_END_HOUR = 12
AFTERNOON_END_HOUR = 17

TREND_BAND = 0.05  # ±5% counts as "stable"

TOP_EXERCISES_PER_YEAR = 3
TOP_EXERCISES_ALL_TIME = 5

SEASONS = {"Q1": (1, 2, 3), "Q2": (4, 5, 6), "Q3": (7, 8, 9), "Q4": (10, 11, 12)}
