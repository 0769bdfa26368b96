"""Read-side aggregates for member dashboards and coach overviews.

Rows come out of SQLAlchemy and are grouped per day/week with pandas. All
timestamps are naive UTC, matching how logs are written.
"""
from datetime import datetime, date, time, timedelta

import pandas as pd
from sqlalchemy import func

from leqet.extensions import db
from leqet.models import (
    User, MemberProfile, MemberGoals, TrainerAssignment, NutritionistAssignment,
    MealLog, MealLogItem, WorkoutLog, WorkoutLogItem, WeightLog,
)
from leqet.roles import Role
from leqet.services.nutrition import round_half_up, round_1dp
from leqet.services.workouts import weekly_sessions_target

DEFAULT_SUMMARY_DAYS = 14
MAX_SUMMARY_DAYS = 90
DEFAULT_CALORIE_TARGET = 2000
DEFAULT_WEEKLY_WORKOUT_MINUTES = 300
CALORIE_TOLERANCE = 0.1
WEIGHT_CHART_DAYS = 180
WORKOUT_CHART_WEEKS = 4
CALORIE_CHART_DAYS = 7

MACROS = ["calories", "protein", "carbs", "fat"]


def _now(now=None):
    return now or datetime.utcnow()


def _day_start(day):
    return datetime.combine(day, time.min)


def _week_start(day):
    return day - timedelta(days=day.weekday())


def _frame(rows, columns, numeric=()):
    frame = pd.DataFrame([tuple(row) for row in rows], columns=columns)
    if "logged_at" in frame.columns:
        frame["logged_at"] = pd.to_datetime(frame["logged_at"])
        frame["date"] = frame["logged_at"].dt.date
    for col in numeric:
        frame[col] = pd.to_numeric(frame[col], errors="coerce").fillna(0).astype(float)
    return frame


def _meal_items(member_id, since=None, until=None):
    query = (
        db.session.query(
            MealLog.id, MealLog.meal_type, MealLog.logged_at,
            MealLogItem.calories, MealLogItem.protein, MealLogItem.carbs, MealLogItem.fat,
        )
        .join(MealLogItem, MealLogItem.meal_log_id == MealLog.id)
        .filter(MealLog.member_id == member_id)
    )
    if since is not None:
        query = query.filter(MealLog.logged_at >= since)
    if until is not None:
        query = query.filter(MealLog.logged_at < until)
    return _frame(query.all(), ["meal_log_id", "meal_type", "logged_at"] + MACROS, numeric=MACROS)


def _workout_items(member_id, since=None):
    query = (
        db.session.query(WorkoutLog.id, WorkoutLog.logged_at, WorkoutLogItem.calories_burned)
        .join(WorkoutLogItem, WorkoutLogItem.workout_log_id == WorkoutLog.id)
        .filter(WorkoutLog.member_id == member_id)
    )
    if since is not None:
        query = query.filter(WorkoutLog.logged_at >= since)
    return _frame(query.all(), ["workout_log_id", "logged_at", "calories_burned"], numeric=["calories_burned"])


def _isoformat(value):
    if value is None:
        return None
    if isinstance(value, pd.Timestamp):
        value = value.to_pydatetime()
    return value.isoformat()


# Overview

def scoped_member_ids(user):
    """Member ids visible to a coach (assigned only) or an admin (all); None for others."""
    role = Role.parse(user.role)
    if role is Role.TRAINER:
        rows = db.session.query(TrainerAssignment.member_id).filter_by(trainer_id=user.id)
    elif role is Role.NUTRITIONIST:
        rows = db.session.query(NutritionistAssignment.member_id).filter_by(nutritionist_id=user.id)
    elif role is Role.ADMIN:
        rows = db.session.query(User.id).filter(User.role == Role.MEMBER.value)
    else:
        return None
    return [row[0] for row in rows.all()]


def member_overview(user, now=None):
    """Activity counts for every member ``user`` may oversee."""
    return overview_rows(scoped_member_ids(user) or [], now)


def member_snapshot(member_id, now=None):
    rows = overview_rows([member_id], now)
    return rows[0] if rows else None


def overview_rows(member_ids, now=None):
    now = _now(now)
    today = _day_start(now.date())
    if not member_ids:
        return []

    meals_today = dict(
        db.session.query(MealLog.member_id, func.count(func.distinct(MealLog.id)))
        .filter(MealLog.member_id.in_(member_ids), MealLog.logged_at >= today)
        .group_by(MealLog.member_id).all()
    )
    workouts_week = dict(
        db.session.query(WorkoutLog.member_id, func.count(func.distinct(WorkoutLog.id)))
        .filter(WorkoutLog.member_id.in_(member_ids), WorkoutLog.logged_at >= now - timedelta(days=7))
        .group_by(WorkoutLog.member_id).all()
    )
    calories_today = dict(
        db.session.query(MealLog.member_id, func.coalesce(func.sum(MealLogItem.calories), 0))
        .join(MealLogItem, MealLogItem.meal_log_id == MealLog.id)
        .filter(MealLog.member_id.in_(member_ids), MealLog.logged_at >= today)
        .group_by(MealLog.member_id).all()
    )
    last_meal = dict(
        db.session.query(MealLog.member_id, func.max(MealLog.logged_at))
        .filter(MealLog.member_id.in_(member_ids)).group_by(MealLog.member_id).all()
    )
    last_workout = dict(
        db.session.query(WorkoutLog.member_id, func.max(WorkoutLog.logged_at))
        .filter(WorkoutLog.member_id.in_(member_ids)).group_by(WorkoutLog.member_id).all()
    )

    members = (
        User.query.filter(User.id.in_(member_ids))
        .order_by(User.created_at.desc(), User.id.desc())
        .all()
    )
    result = []
    for member in members:
        stamps = [ts for ts in (last_meal.get(member.id), last_workout.get(member.id)) if ts]
        last_activity = max(stamps) if stamps else member.created_at
        result.append({
            "id": member.id,
            "full_name": member.full_name or "",
            "email": member.email or "",
            "created_at": _isoformat(member.created_at),
            "goal": member.profile.goal if member.profile else None,
            "trainer_id": member.trainer_id,
            "nutritionist_id": member.nutritionist_id,
            "meals_today": int(meals_today.get(member.id, 0)),
            "workouts_this_week": int(workouts_week.get(member.id, 0)),
            "last_activity": _isoformat(last_activity),
            "total_calories_today": float(calories_today.get(member.id, 0) or 0),
        })
    return result


# Dashboard summary

def clamp_summary_days(value):
    try:
        days = int(float(value))
    except (TypeError, ValueError):
        days = DEFAULT_SUMMARY_DAYS
    if days <= 0:
        days = DEFAULT_SUMMARY_DAYS
    return min(days, MAX_SUMMARY_DAYS)


def dashboard_summary(member_id, days=DEFAULT_SUMMARY_DAYS, now=None):
    """Per-day intake/burn totals and the raw activity list for the last ``days`` days."""
    now = _now(now)
    days = clamp_summary_days(days)
    since = _day_start(now.date() - timedelta(days=days - 1))

    meals = _meal_items(member_id, since=since)
    workouts = _workout_items(member_id, since=since)

    intake = meals.groupby("date")[MACROS].sum().rename(columns={"calories": "calories_consumed"})
    burned = workouts.groupby("date")[["calories_burned"]].sum()
    daily = intake.join(burned, how="outer").fillna(0).sort_index()

    days_out = []
    for day, row in daily.iterrows():
        days_out.append({
            "date": day.isoformat(),
            "label": f"{day:%b} {day.day}",
            "calories_consumed": float(row.get("calories_consumed", 0)),
            "calories_burned": float(row.get("calories_burned", 0)),
            "protein": float(row.get("protein", 0)),
            "carbs": float(row.get("carbs", 0)),
            "fat": float(row.get("fat", 0)),
        })

    activities = []
    for log in MealLog.query.filter(MealLog.member_id == member_id, MealLog.logged_at >= since).all():
        activities.append({
            "type": "meal",
            "id": log.id,
            "logged_at": log.logged_at,
            "meal_type": log.meal_type,
            "calories": float(sum(item.calories or 0 for item in log.items)),
        })
    for log in WorkoutLog.query.filter(WorkoutLog.member_id == member_id, WorkoutLog.logged_at >= since).all():
        activities.append({
            "type": "workout",
            "id": log.id,
            "logged_at": log.logged_at,
            "calories": float(sum(item.calories_burned or 0 for item in log.items)),
        })
    activities.sort(key=lambda a: (a["logged_at"] or datetime.min))
    for activity in activities:
        activity["logged_at"] = _isoformat(activity["logged_at"])

    return {"days": days_out, "activities": activities}


# Progress summary

def _targets(profile, goals):
    calorie_target = DEFAULT_CALORIE_TARGET
    if profile and profile.target_calories and profile.target_calories > 0:
        calorie_target = profile.target_calories

    weekly_minutes = DEFAULT_WEEKLY_WORKOUT_MINUTES
    if goals and goals.weekly_workout_minutes and goals.weekly_workout_minutes > 0:
        weekly_minutes = goals.weekly_workout_minutes

    weekly_sessions = weekly_sessions_target(weekly_minutes)
    return {
        "calorie_target": calorie_target,
        "weekly_workout_sessions_target": weekly_sessions,
        "monthly_workout_sessions_target": weekly_sessions * 4,
    }


def progress_summary(member_id, now=None):
    now = _now(now)
    today = now.date()
    profile = MemberProfile.query.filter_by(user_id=member_id).first()
    goals = MemberGoals.query.filter_by(member_id=member_id).first()
    targets = _targets(profile, goals)
    calorie_target = targets["calorie_target"]

    meals = _meal_items(member_id)
    workouts = _workout_items(member_id)
    weights = _frame(
        db.session.query(WeightLog.weight_kg, WeightLog.logged_at)
        .filter(WeightLog.member_id == member_id)
        .order_by(WeightLog.logged_at.asc(), WeightLog.id.asc())
        .all(),
        ["weight_kg", "logged_at"],
        numeric=["weight_kg"],
    )
    meal_log_count = MealLog.query.filter_by(member_id=member_id).count()

    stamps = pd.concat([meals["logged_at"], workouts["logged_at"], weights["logged_at"]], ignore_index=True)
    started_at = stamps.min() if not stamps.empty else None
    active_days = set(meals["date"]) | set(workouts["date"]) | set(weights["date"])
    days_active = len(active_days)

    this_month = workouts[workouts["logged_at"].apply(lambda ts: ts.year == now.year and ts.month == now.month)] \
        if not workouts.empty else workouts

    profile_weight = profile.weight_kg if profile and profile.weight_kg is not None else None
    start_weight = float(weights["weight_kg"].iloc[0]) if not weights.empty else profile_weight
    current_weight = float(weights["weight_kg"].iloc[-1]) if not weights.empty else profile_weight
    total_lost = None
    if start_weight is not None and current_weight is not None:
        total_lost = round_1dp(start_weight - current_weight)

    # Weight: daily mean over the last 180 days, or a start/current pair
    recent_weights = weights[weights["date"] >= today - timedelta(days=WEIGHT_CHART_DAYS)] \
        if not weights.empty else weights
    weight_chart = [
        {"date": day.isoformat(), "weight": float(value)}
        for day, value in recent_weights.groupby("date")["weight_kg"].mean().items()
    ]
    if not weight_chart and start_weight is not None and current_weight is not None:
        first_day = started_at.date().isoformat() if started_at is not None else today.isoformat()
        weight_chart = [
            {"date": first_day, "weight": start_weight},
            {"date": today.isoformat(), "weight": current_weight},
        ]

    # Workouts: sessions per week for the last four weeks
    sessions = workouts["date"].map(_week_start).value_counts() if not workouts.empty else {}
    this_week = _week_start(today)
    workout_chart = []
    for offset in range(WORKOUT_CHART_WEEKS - 1, -1, -1):
        week = this_week - timedelta(weeks=offset)
        workout_chart.append({"week_start": week.isoformat(), "sessions": int(sessions.get(week, 0))})

    # Calories: last seven days against the target
    intake = meals.groupby("date")["calories"].sum() if not meals.empty else {}
    calorie_chart = []
    for offset in range(CALORIE_CHART_DAYS - 1, -1, -1):
        day = today - timedelta(days=offset)
        calorie_chart.append({
            "date": day.isoformat(),
            "day": f"{day:%a}",
            "calories": float(intake.get(day, 0)),
            "target": calorie_target,
        })

    low, high = calorie_target * (1 - CALORIE_TOLERANCE), calorie_target * (1 + CALORIE_TOLERANCE)
    consistent = sum(1 for row in calorie_chart if low <= row["calories"] <= high)
    consistency = round_half_up(consistent / len(calorie_chart) * 100) if calorie_chart else 0

    return {
        "profile": {"is_private": bool(profile.is_private) if profile else False},
        "stats": {
            "started_at": _isoformat(started_at),
            "days_active": days_active,
            "start_weight_kg": start_weight,
            "current_weight_kg": current_weight,
            "total_weight_lost_kg": total_lost,
            "workouts_completed": int(len(workouts)),
            "workouts_this_month": int(len(this_month)),
            "meal_logs": meal_log_count,
            "meals_per_day_avg": round_1dp(meal_log_count / days_active) if days_active else 0,
            "calorie_consistency_percent": consistency,
        },
        "targets": targets,
        "charts": {
            "weight": weight_chart,
            "workouts": workout_chart,
            "calories": calorie_chart,
        },
    }


# Meal log reads

def meals_by_date(member_id, day):
    start = _day_start(day)
    meals = _meal_items(member_id, since=start, until=start + timedelta(days=1))
    if meals.empty:
        return []

    grouped = meals.groupby("meal_type").agg(
        meal_count=("meal_log_id", "nunique"),
        items_count=("meal_log_id", "size"),
        total_calories=("calories", "sum"),
        total_protein=("protein", "sum"),
        total_carbs=("carbs", "sum"),
        total_fat=("fat", "sum"),
    ).sort_index()

    return [
        {
            "meal_type": meal_type,
            "meal_count": int(row["meal_count"]),
            "items_count": int(row["items_count"]),
            "total_calories": float(row["total_calories"]),
            "total_protein": float(row["total_protein"]),
            "total_carbs": float(row["total_carbs"]),
            "total_fat": float(row["total_fat"]),
        }
        for meal_type, row in grouped.iterrows()
    ]


def meals_today(member_id, now=None):
    start = _day_start(_now(now).date())
    items = (
        MealLogItem.query.join(MealLog)
        .filter(MealLog.member_id == member_id, MealLog.logged_at >= start)
        .order_by(MealLog.logged_at.desc(), MealLogItem.id.desc())
        .all()
    )
    return [item.to_dict() for item in items]


def workouts_today(member_id, now=None):
    start = _day_start(_now(now).date())
    items = (
        WorkoutLogItem.query.join(WorkoutLog)
        .filter(WorkoutLog.member_id == member_id, WorkoutLog.logged_at >= start)
        .order_by(WorkoutLog.logged_at.desc(), WorkoutLogItem.id.desc())
        .all()
    )
    return [item.to_dict() for item in items]


def recent_meals(limit=10, member_ids=None):
    """Latest meal logs with their calorie totals; ``member_ids=None`` means everyone."""
    query = (
        db.session.query(
            MealLog.id, MealLog.member_id, User.full_name, MealLog.meal_type, MealLog.logged_at,
            func.coalesce(func.sum(MealLogItem.calories), 0),
        )
        .join(User, User.id == MealLog.member_id)
        .outerjoin(MealLogItem, MealLogItem.meal_log_id == MealLog.id)
        .group_by(MealLog.id, MealLog.member_id, User.full_name, MealLog.meal_type, MealLog.logged_at)
        .order_by(MealLog.logged_at.desc(), MealLog.id.desc())
    )
    if member_ids is not None:
        if not member_ids:
            return []
        query = query.filter(MealLog.member_id.in_(member_ids))

    return [
        {
            "meal_log_id": log_id,
            "member_id": member_id,
            "full_name": full_name,
            "meal_type": meal_type,
            "logged_at": _isoformat(logged_at),
            "total_calories": float(total or 0),
        }
        for log_id, member_id, full_name, meal_type, logged_at, total in query.limit(limit).all()
    ]


def parse_day(value):
    """``YYYY-MM-DD`` to a date, or None when malformed."""
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None
