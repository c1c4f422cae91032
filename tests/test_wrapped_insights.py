"""
Tests for the heuristic wrapped classifications.

Every threshold is checked on both sides of its cut-off.
"""

import pytest

from analytics import wrapped_insights as wi
from models import MonthTrend


class TestPersonality:

    @pytest.mark.parametrize("hour,expected", [
        (6, "Early Bird"), (9.99, "Early Bird"), (10, "Balanced"), (12, "Balanced"),
        (17, "Balanced"), (17.5, "Night Owl"), (21, "Night Owl"),
    ])
    def test_fitness_type(self, hour, expected):
        assert wi.classify_fitness_type(hour) == expected

    def test_weekend_warrior(self):
        assert wi.classify_workout_style(weekend_sessions=4, weekday_sessions=2) == "Weekend Warrior"

    def test_ratio_is_strict(self):
        assert wi.classify_workout_style(weekend_sessions=3, weekday_sessions=2) == "Casual"

    def test_consistent_grinder(self):
        assert wi.classify_workout_style(60, 100) == "Consistent Grinder"
        assert wi.classify_workout_style(50, 100) == "Casual"

    def test_no_workouts_is_casual(self):
        assert wi.classify_workout_style(0, 0) == "Casual"

    @pytest.mark.parametrize("eff,bed,expected", [
        (90, 23, "Consistent Sleeper"),
        (85, 23.5, "Night Owl"),
        (80, 21.5, "Early Riser"),
        (80, 22, "Variable"),
        (80, 23, "Variable"),
    ])
    def test_sleep_archetype(self, eff, bed, expected):
        assert wi.classify_sleep_archetype(eff, bed) == expected


class TestNicheStats:

    def test_marathons(self):
        assert wi.marathons_walked(42.194) == 0
        assert wi.marathons_walked(42.195) == 1
        assert wi.marathons_walked(100) == 2

    def test_pizza_slices(self):
        assert wi.pizza_slices(284) == 0
        assert wi.pizza_slices(1000) == 3

    def test_full_days_slept(self):
        # 480 min/night × 30 nights = 14400 min = 10 days
        assert wi.full_days_slept(480, 30) == 10
        assert wi.full_days_slept(0, 0) == 0

    def test_most_active_hour_tie_goes_to_earliest(self):
        assert wi.most_active_hour([18, 7, 18, 7, 12]) == 7

    def test_most_active_hour_clear_winner(self):
        assert wi.most_active_hour([6, 18, 18]) == 18

    def test_most_active_hour_empty(self):
        assert wi.most_active_hour([]) == 0

    def test_favorite_weekday_sunday_first_scan(self):
        assert wi.favorite_weekday({"Saturday": 2, "Sunday": 2, "Monday": 1}) == "Sunday"

    def test_favorite_weekday_default(self):
        assert wi.favorite_weekday({}) == "Monday"
        assert wi.favorite_weekday({d: 0 for d in ("Sunday", "Friday")}) == "Monday"


class TestPatterns:

    def test_most_productive_month(self):
        trends = [MonthTrend("Jan", 10), MonthTrend("Feb", 30), MonthTrend("Mar", 30)]
        assert wi.most_productive_month(trends) == "Feb"

    def test_most_productive_month_defaults_to_jan(self):
        assert wi.most_productive_month([MonthTrend("Jun", 0)]) == "Jan"

    @pytest.mark.parametrize("hour,expected", [
        (0, "Morning"), (11, "Morning"), (12, "Afternoon"), (16, "Afternoon"),
        (17, "Evening"), (23, "Evening"),
    ])
    def test_best_workout_time(self, hour, expected):
        assert wi.best_workout_time(hour) == expected

    def test_sleep_trend_improving(self):
        assert wi.sleep_quality_trend([400, 400, 430, 440]) == "improving"

    def test_sleep_trend_declining(self):
        assert wi.sleep_quality_trend([480, 480, 440, 440]) == "declining"

    def test_sleep_trend_stable_within_band(self):
        assert wi.sleep_quality_trend([400, 400, 410, 410]) == "stable"

    def test_sleep_trend_empty(self):
        assert wi.sleep_quality_trend([]) == "stable"

    def test_trend_direction(self):
        assert wi.trend_direction(110, 100) == "up"
        assert wi.trend_direction(90, 100) == "down"
        assert wi.trend_direction(104, 100) == "stable"
        assert wi.trend_direction(0, 0) == "stable"
