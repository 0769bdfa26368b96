from datetime import datetime, timedelta

from leqet.services.analytics import (
    simple_adherence, trainer_adherence, progress_label, compliance_label, goal_bucket,
    week_over_week, member_weekly_adherence, days_since, activity_label, member_analytics,
)

NOW = datetime(2025, 3, 10, 12, 0)


def test_simple_adherence_is_capped():
    assert simple_adherence(2, 1) == 65
    assert simple_adherence(4, 3) == 100
    assert simple_adherence(None, None) == 0


def test_trainer_adherence_applies_recency_penalty():
    recent = {"workouts_this_week": 3, "meals_today": 3, "last_activity": NOW.isoformat()}
    stale = dict(recent, last_activity=(NOW - timedelta(days=4)).isoformat())
    assert trainer_adherence(recent, NOW) == 100
    assert trainer_adherence(stale, NOW) == 80


def test_labels():
    assert progress_label(95) == "Excellent"
    assert progress_label(85) == "Great"
    assert progress_label(10) == "Good"
    assert compliance_label(80) == "On track"
    assert compliance_label(60) == "Watch"
    assert compliance_label(59) == "At risk"


def test_goal_bucket():
    assert goal_bucket("weight_loss") == "Weight Loss"
    assert goal_bucket("Muscle Gain") == "Muscle Gain"
    assert goal_bucket("maintenance") == "Maintenance"
    assert goal_bucket("strength") == "Strength"
    assert goal_bucket(None) == "Other"


def test_week_over_week_needs_two_weeks():
    assert week_over_week([{"calories_consumed": 2000}] * 7) is None
    days = [{"calories_consumed": 2000}] * 7 + [{"calories_consumed": 2100}] * 7
    result = week_over_week(days)
    assert result["delta"] == 100
    assert result["pct"] == 5


def test_member_weekly_adherence():
    days = [{"calories_burned": 200}, {"calories_burned": 0}, {"calories_burned": 150}]
    assert member_weekly_adherence(days, 150) == {"workouts_completed": 2, "workouts_target": 5, "adherence": 40}
    assert member_weekly_adherence(days)["workouts_target"] == 5


def test_days_since_and_activity_label():
    assert days_since(None) == 999
    assert days_since("not a date") == 999
    assert days_since(NOW - timedelta(days=2), NOW) == 2
    assert activity_label(0) == "Today"
    assert activity_label(1) == "Yesterday"
    assert activity_label(3) == "3 days ago"
    assert activity_label(999) == "No activity yet"


def test_member_analytics_is_tagged_heuristic():
    result = member_analytics({"meals_today": 3, "workouts_this_week": 1}, [])
    assert result["basis"] == "heuristic"
    assert result["adherence"] == 90
    assert result["badge"] == "Excellent"
