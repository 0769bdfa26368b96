import pytest

from leqet.services.workouts import (
    calories_burned, infer_exercise_category, estimate_calories_per_minute, split_csv, weekly_sessions_target,
)


@pytest.mark.parametrize("intensity,expected", [("low", 240), ("medium", 300), ("high", 390), ("unknown", 300)])
def test_calories_burned_by_intensity(intensity, expected):
    assert calories_burned(10, 30, intensity) == expected


@pytest.mark.parametrize("intensity,short,long", [("low", 48, 96), ("medium", 60, 120), ("high", 78, 156)])
def test_calories_burned_grows_with_duration(intensity, short, long):
    assert calories_burned(6, 10, intensity) == short
    assert calories_burned(6, 20, intensity) == long


def test_calories_burned_orders_intensities():
    for minutes in (15, 45):
        low, medium, high = (calories_burned(7, minutes, level) for level in ("low", "medium", "high"))
        assert low < medium < high


@pytest.mark.parametrize("minutes", [0, -5])
def test_calories_burned_rejects_non_positive_duration(minutes):
    with pytest.raises(ValueError):
        calories_burned(10, minutes)


def test_infer_exercise_category():
    assert infer_exercise_category("Morning Run") == "cardio"
    assert infer_exercise_category("Bench Press") == "strength"
    assert infer_exercise_category("Yoga Flow") == "flexibility"
    assert infer_exercise_category("Boxing") == "sports"


def test_estimate_calories_per_minute():
    assert estimate_calories_per_minute({"duration": 30, "calories": 300}) == 10
    assert estimate_calories_per_minute({"type": "cardio"}) == 8
    assert estimate_calories_per_minute({"type": "strength"}) == 6
    assert estimate_calories_per_minute({}) == 5


def test_split_csv():
    assert split_csv("chest, triceps,,") == ["chest", "triceps"]
    assert split_csv(None) == []


def test_weekly_sessions_target():
    assert weekly_sessions_target(300) == 10
    assert weekly_sessions_target(45) == 2
    assert weekly_sessions_target(0) == 1
