from datetime import datetime
from leqet.extensions import db

MEAL_TYPES = ("breakfast", "lunch", "dinner", "snack")


class MealLog(db.Model):
    __tablename__ = "meal_logs"

    id = db.Column(db.Integer, primary_key=True)
    member_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    meal_type = db.Column(db.String(20), nullable=False)
    logged_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    member = db.relationship("User", back_populates="meal_logs")
    items = db.relationship("MealLogItem", back_populates="meal_log", cascade="all, delete-orphan")


class MealLogItem(db.Model):
    __tablename__ = "meal_log_items"

    id = db.Column(db.Integer, primary_key=True)
    meal_log_id = db.Column(db.Integer, db.ForeignKey("meal_logs.id", ondelete="CASCADE"), nullable=False, index=True)
    food_item_id = db.Column(db.Integer, db.ForeignKey("food_items.id", ondelete="SET NULL"), nullable=True)
    quantity = db.Column(db.Float, default=0)
    unit = db.Column(db.String(20), default="g")

    # Snapshot at the logged quantity
    calories = db.Column(db.Float, default=0)
    protein = db.Column(db.Float, default=0)
    carbs = db.Column(db.Float, default=0)
    fat = db.Column(db.Float, default=0)

    meal_log = db.relationship("MealLog", back_populates="items")
    food = db.relationship("FoodItem")

    def to_dict(self):
        log = self.meal_log
        return {
            "meal_log_id": log.id,
            "meal_type": log.meal_type,
            "logged_at": log.logged_at.isoformat() if log.logged_at else None,
            "item_id": self.id,
            "food_item_id": self.food_item_id,
            "food_name": self.food.name if self.food else None,
            "category": self.food.category if self.food else None,
            "quantity": self.quantity,
            "unit": self.unit,
            "calories": self.calories or 0,
            "protein": self.protein or 0,
            "carbs": self.carbs or 0,
            "fat": self.fat or 0,
        }


class WorkoutLog(db.Model):
    __tablename__ = "workout_logs"

    id = db.Column(db.Integer, primary_key=True)
    member_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    logged_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    member = db.relationship("User", back_populates="workout_logs")
    items = db.relationship("WorkoutLogItem", back_populates="workout_log", cascade="all, delete-orphan")


class WorkoutLogItem(db.Model):
    __tablename__ = "workout_log_items"

    id = db.Column(db.Integer, primary_key=True)
    workout_log_id = db.Column(db.Integer, db.ForeignKey("workout_logs.id", ondelete="CASCADE"), nullable=False, index=True)
    exercise_id = db.Column(db.Integer, db.ForeignKey("exercises.id", ondelete="SET NULL"), nullable=True)
    duration_minutes = db.Column(db.Float, nullable=False)
    calories_burned = db.Column(db.Float, default=0)
    weight_used = db.Column(db.Float, nullable=True)
    weight_unit = db.Column(db.String(10), nullable=True)

    workout_log = db.relationship("WorkoutLog", back_populates="items")
    exercise = db.relationship("Exercise")

    def to_dict(self):
        log = self.workout_log
        return {
            "workout_log_id": log.id,
            "logged_at": log.logged_at.isoformat() if log.logged_at else None,
            "item_id": self.id,
            "exercise_id": self.exercise_id,
            "exercise_name": self.exercise.name if self.exercise else "",
            "duration_minutes": self.duration_minutes,
            "calories_burned": self.calories_burned or 0,
            "weight_used": self.weight_used,
            "weight_unit": self.weight_unit,
        }


class WeightLog(db.Model):
    __tablename__ = "weight_logs"

    id = db.Column(db.Integer, primary_key=True)
    member_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    weight_kg = db.Column(db.Float, nullable=False)
    logged_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    member = db.relationship("User", back_populates="weight_logs")


class CheckIn(db.Model):
    __tablename__ = "member_check_ins"

    id = db.Column(db.Integer, primary_key=True)
    member_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    adherence = db.Column(db.Float)
    fatigue = db.Column(db.Float)
    pain = db.Column(db.Float)
    weight_kg = db.Column(db.Float)
    notes = db.Column(db.Text)
    logged_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    member = db.relationship("User", back_populates="check_ins")

    def to_dict(self):
        return {
            "id": self.id,
            "member_id": self.member_id,
            "adherence": self.adherence,
            "fatigue": self.fatigue,
            "pain": self.pain,
            "weight_kg": self.weight_kg,
            "notes": self.notes,
            "logged_at": self.logged_at.isoformat() if self.logged_at else None,
        }
