from datetime import datetime
from leqet.extensions import db


class MemberProfile(db.Model):
    __tablename__ = "member_profiles"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)

    age = db.Column(db.Integer)
    gender = db.Column(db.String(20))
    weight_kg = db.Column(db.Float)
    height_cm = db.Column(db.Float)
    goal = db.Column(db.String(120))
    activity_level = db.Column(db.String(30))

    # Coach-specific intake questionnaires
    trainer_intake = db.Column(db.JSON)
    nutrition_intake = db.Column(db.JSON)
    is_private = db.Column(db.Boolean, default=False, nullable=False)

    bmr = db.Column(db.Float)
    tdee = db.Column(db.Float)
    target_calories = db.Column(db.Float)

    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = db.relationship("User", back_populates="profile")


class MemberGoals(db.Model):
    __tablename__ = "member_goals"

    id = db.Column(db.Integer, primary_key=True)
    member_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)

    weekly_calorie_goal = db.Column(db.Float)
    weekly_workout_minutes = db.Column(db.Float)
    daily_steps_goal = db.Column(db.Integer)
    daily_water_liters = db.Column(db.Float)

    member = db.relationship("User", back_populates="goals")


def _num(value):
    return float(value) if value is not None else None


def profile_to_dict(member_id, profile, goals):
    """Camel-cased profile payload; either part may be missing."""
    return {
        "memberId": member_id,
        "age": profile.age if profile else None,
        "gender": (profile.gender or None) if profile else None,
        "weightKg": _num(profile.weight_kg) if profile else None,
        "heightCm": _num(profile.height_cm) if profile else None,
        "goal": (profile.goal or None) if profile else None,
        "activityLevel": (profile.activity_level or None) if profile else None,
        "trainerIntake": (profile.trainer_intake or None) if profile else None,
        "nutritionIntake": (profile.nutrition_intake or None) if profile else None,
        "isPrivate": bool(profile.is_private) if profile else False,
        "bmr": _num(profile.bmr) if profile else None,
        "tdee": _num(profile.tdee) if profile else None,
        "targetCalories": _num(profile.target_calories) if profile else None,
        "weeklyCalorieGoal": _num(goals.weekly_calorie_goal) if goals else None,
        "weeklyWorkoutMinutes": _num(goals.weekly_workout_minutes) if goals else None,
        "dailyStepsGoal": goals.daily_steps_goal if goals else None,
        "dailyWaterLiters": _num(goals.daily_water_liters) if goals else None,
    }
