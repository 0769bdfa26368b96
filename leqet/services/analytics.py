"""Display heuristics for coach and member dashboards.

These numbers are estimates derived from raw counts. Every payload built
here is returned under an ``estimated`` key tagged ``"basis": "heuristic"``
so callers never confuse it with the authoritative counts.
"""
from datetime import datetime, timedelta

from leqet.models import ScheduleSession
from leqet.services.nutrition import round_half_up
from leqet.services.workouts import weekly_sessions_target

HEURISTIC_BASIS = "heuristic"
UNKNOWN_DAYS = 999
WORKOUTS_TARGET = 3
MEALS_TARGET = 3
DEFAULT_WEEKLY_SESSIONS = 5
TOP_PERFORMERS = 3
GOAL_BUCKETS = ("Weight Loss", "Muscle Gain", "Maintenance", "Strength", "Other")


def clamp_percent(value):
    return max(0, min(100, value))


def days_since(value, now=None):
    """Whole days since an ISO timestamp or datetime; 999 when unknown."""
    if not value:
        return UNKNOWN_DAYS
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return UNKNOWN_DAYS
    if value.tzinfo is not None:
        value = value.replace(tzinfo=None)
    return max(0, ((now or datetime.utcnow()) - value).days)


def recency_penalty(days):
    return 0 if days <= 1 else min(40, days * 5)


def simple_adherence(meals_today, workouts_this_week):
    return min(100, (meals_today or 0) * 25 + (workouts_this_week or 0) * 15)


def adherence_badge(adherence):
    if adherence >= 80:
        return "Excellent"
    if adherence >= 60:
        return "Good"
    if adherence >= 40:
        return "Needs Focus"
    return "Inactive"


def _pct(count, target):
    return clamp_percent(round_half_up((count or 0) / target * 100))


def trainer_adherence(member, now=None):
    workout_pct = _pct(member.get("workouts_this_week"), WORKOUTS_TARGET)
    meal_pct = _pct(member.get("meals_today"), MEALS_TARGET)
    penalty = recency_penalty(days_since(member.get("last_activity"), now))
    return clamp_percent(round_half_up((workout_pct + meal_pct) / 2 - penalty))


def progress_label(adherence):
    if adherence >= 90:
        return "Excellent"
    if adherence >= 80:
        return "Great"
    return "Good"


def goal_bucket(goal):
    text = (goal or "").lower()
    if "loss" in text:
        return "Weight Loss"
    if "muscle" in text or "gain" in text:
        return "Muscle Gain"
    if "maint" in text:
        return "Maintenance"
    if "strength" in text:
        return "Strength"
    return "Other"


def nutrition_compliance(member, now=None):
    base = _pct(member.get("meals_today"), MEALS_TARGET)
    return clamp_percent(base - recency_penalty(days_since(member.get("last_activity"), now)))


def compliance_label(compliance):
    if compliance >= 80:
        return "On track"
    if compliance >= 60:
        return "Watch"
    return "At risk"


def week_over_week(days):
    """Mean daily intake of the first vs the last seven days; None under two weeks of data."""
    if len(days) < 14:
        return None
    first = sum(d.get("calories_consumed") or 0 for d in days[:7]) / 7
    second = sum(d.get("calories_consumed") or 0 for d in days[-7:]) / 7
    delta = second - first
    return {
        "first_avg": first,
        "second_avg": second,
        "delta": delta,
        "pct": (delta / first * 100) if first else 0,
    }


def activity_label(days):
    if days >= UNKNOWN_DAYS:
        return "No activity yet"
    if days <= 0:
        return "Today"
    if days == 1:
        return "Yesterday"
    return f"{days} days ago"


def member_weekly_adherence(summary_days, weekly_workout_minutes=None):
    """Share of this week's target sessions completed, counted as days with calories burned."""
    completed = sum(1 for d in summary_days if (d.get("calories_burned") or 0) > 0)
    target = weekly_sessions_target(weekly_workout_minutes) if weekly_workout_minutes else DEFAULT_WEEKLY_SESSIONS
    return {
        "workouts_completed": completed,
        "workouts_target": target,
        "adherence": round_half_up(completed / target * 100),
    }


def _session_stats(trainer_id, now):
    sessions = ScheduleSession.query.filter_by(trainer_id=trainer_id).all()

    month = [s for s in sessions
             if s.session_date and (s.session_date.year, s.session_date.month) == (now.year, now.month)]
    completed = sum(1 for s in month if s.status == "completed")

    this_week = now.date() - timedelta(days=now.weekday())
    weekly = []
    for idx, offset in enumerate(range(3, -1, -1), start=1):
        week_start = this_week - timedelta(weeks=offset)
        week_end = week_start + timedelta(days=7)
        in_week = [s for s in sessions if s.session_date and week_start <= s.session_date < week_end]
        weekly.append({
            "week": f"Week {idx}",
            "completed": sum(1 for s in in_week if s.status == "completed"),
            "cancelled": sum(1 for s in in_week if s.status == "cancelled"),
            "total": len(in_week),
        })

    return {
        "month_total": len(month),
        "month_completed": completed,
        "month_success_rate": round_half_up(completed / len(month) * 100) if month else 0,
        "weekly": weekly,
    }


def trainer_analytics(trainer_id, members, now=None):
    now = now or datetime.utcnow()
    performance = []
    for member in members:
        days = days_since(member.get("last_activity"), now)
        performance.append({
            "id": member["id"],
            "name": member.get("full_name") or "Member",
            "adherence": trainer_adherence(member, now),
            "days_since_activity": days,
        })
    performance.sort(key=lambda p: p["adherence"], reverse=True)

    goal_counts = {bucket: 0 for bucket in GOAL_BUCKETS}
    for member in members:
        goal_counts[goal_bucket(member.get("goal"))] += 1

    needs_attention = [
        {
            "id": p["id"],
            "name": p["name"],
            "adherence": p["adherence"],
            "last_activity": "unknown" if p["days_since_activity"] >= UNKNOWN_DAYS
            else f"{p['days_since_activity']} days ago",
            "issue": "Inactive" if p["days_since_activity"] >= 3 else "Low adherence",
        }
        for p in performance
        if p["adherence"] < 70 or p["days_since_activity"] >= 3
    ][:TOP_PERFORMERS]

    average = round_half_up(sum(p["adherence"] for p in performance) / len(performance)) if performance else 0
    return {
        "basis": HEURISTIC_BASIS,
        "average_adherence": average,
        "performance": performance,
        "top_performers": [
            {"id": p["id"], "name": p["name"], "adherence": p["adherence"], "progress": progress_label(p["adherence"])}
            for p in performance[:TOP_PERFORMERS]
        ],
        "needs_attention": needs_attention,
        "goal_distribution": {k: v for k, v in goal_counts.items() if v > 0},
        "sessions": _session_stats(trainer_id, now),
    }


def nutritionist_analytics(member, summary_days, now=None):
    compliance = nutrition_compliance(member, now)
    last = summary_days[-1] if summary_days else {}
    return {
        "basis": HEURISTIC_BASIS,
        "compliance": compliance,
        "compliance_label": compliance_label(compliance),
        "week_over_week": week_over_week(summary_days),
        "recent_activity": activity_label(days_since(member.get("last_activity"), now)),
        "latest_macros": {
            "protein": round_half_up(last.get("protein") or 0),
            "carbs": round_half_up(last.get("carbs") or 0),
            "fat": round_half_up(last.get("fat") or 0),
        },
    }


def member_analytics(member, summary_days, weekly_workout_minutes=None):
    adherence = simple_adherence(member.get("meals_today"), member.get("workouts_this_week"))
    weekly = member_weekly_adherence(summary_days, weekly_workout_minutes)
    return {
        "basis": HEURISTIC_BASIS,
        "adherence": adherence,
        "badge": adherence_badge(adherence),
        "weekly": weekly,
    }
