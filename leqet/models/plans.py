from datetime import datetime
from leqet.extensions import db


class DietPlan(db.Model):
    __tablename__ = "diet_plans"

    id = db.Column(db.Integer, primary_key=True)
    member_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    nutritionist_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    name = db.Column(db.String(150), nullable=False)
    goal = db.Column(db.String(120))
    daily_calories = db.Column(db.Float, default=0)
    daily_protein = db.Column(db.Float, default=0)
    daily_carbs = db.Column(db.Float, default=0)
    daily_fat = db.Column(db.Float, default=0)
    is_active = db.Column(db.Boolean, default=True, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    member = db.relationship("User", foreign_keys=[member_id], back_populates="diet_plans")
    nutritionist = db.relationship("User", foreign_keys=[nutritionist_id])
    meals = db.relationship(
        "DietPlanMeal", back_populates="plan", order_by="DietPlanMeal.id", cascade="all, delete-orphan"
    )


class DietPlanMeal(db.Model):
    __tablename__ = "diet_plan_meals"

    id = db.Column(db.Integer, primary_key=True)
    diet_plan_id = db.Column(db.Integer, db.ForeignKey("diet_plans.id", ondelete="CASCADE"), nullable=False, index=True)
    meal_type = db.Column(
        db.String(20),
        db.CheckConstraint("meal_type IN ('breakfast','lunch','dinner','snack')"),
        nullable=False,
    )
    name = db.Column(db.String(150))
    notes = db.Column(db.Text)

    plan = db.relationship("DietPlan", back_populates="meals")
    items = db.relationship(
        "DietPlanMealItem", back_populates="meal", order_by="DietPlanMealItem.id", cascade="all, delete-orphan"
    )


class DietPlanMealItem(db.Model):
    __tablename__ = "diet_plan_meal_items"

    id = db.Column(db.Integer, primary_key=True)
    diet_plan_meal_id = db.Column(db.Integer, db.ForeignKey("diet_plan_meals.id", ondelete="CASCADE"), nullable=False)
    food_item_id = db.Column(db.Integer, db.ForeignKey("food_items.id", ondelete="SET NULL"), nullable=True)
    quantity = db.Column(db.Float, default=0)
    unit = db.Column(db.String(20), default="g")
    calories = db.Column(db.Float, default=0)
    protein = db.Column(db.Float, default=0)
    carbs = db.Column(db.Float, default=0)
    fat = db.Column(db.Float, default=0)

    meal = db.relationship("DietPlanMeal", back_populates="items")
    food = db.relationship("FoodItem")


class WorkoutPlan(db.Model):
    __tablename__ = "workout_plans"

    id = db.Column(db.Integer, primary_key=True)
    member_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    trainer_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    name = db.Column(db.String(150), nullable=False)
    goal = db.Column(db.String(120))
    weekly_days = db.Column(db.Integer)
    estimated_duration = db.Column(db.Integer)
    difficulty = db.Column(db.String(40))
    is_active = db.Column(db.Boolean, default=True, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    member = db.relationship("User", foreign_keys=[member_id], back_populates="workout_plans")
    trainer = db.relationship("User", foreign_keys=[trainer_id])
    days = db.relationship(
        "WorkoutPlanDay", back_populates="plan", order_by="WorkoutPlanDay.id", cascade="all, delete-orphan"
    )


class WorkoutPlanDay(db.Model):
    __tablename__ = "workout_plan_days"

    id = db.Column(db.Integer, primary_key=True)
    workout_plan_id = db.Column(db.Integer, db.ForeignKey("workout_plans.id", ondelete="CASCADE"), nullable=False, index=True)
    day_of_week = db.Column(db.String(20))
    name = db.Column(db.String(150))
    duration_minutes = db.Column(db.Float)
    difficulty = db.Column(db.String(40))
    focus = db.Column(db.String(255))  # comma separated
    tips = db.Column(db.Text)

    plan = db.relationship("WorkoutPlan", back_populates="days")
    exercises = db.relationship(
        "WorkoutPlanExercise", back_populates="day", order_by="WorkoutPlanExercise.id", cascade="all, delete-orphan"
    )


class WorkoutPlanExercise(db.Model):
    __tablename__ = "workout_plan_exercises"

    id = db.Column(db.Integer, primary_key=True)
    workout_plan_day_id = db.Column(db.Integer, db.ForeignKey("workout_plan_days.id", ondelete="CASCADE"), nullable=False)
    exercise_id = db.Column(db.Integer, db.ForeignKey("exercises.id", ondelete="SET NULL"), nullable=True)
    name = db.Column(db.String(150), nullable=False)
    sets = db.Column(db.Integer)
    reps = db.Column(db.String(40))
    rest = db.Column(db.String(40))
    duration_minutes = db.Column(db.Float)
    instructions = db.Column(db.Text)
    target_muscles = db.Column(db.String(255))  # comma separated

    day = db.relationship("WorkoutPlanDay", back_populates="exercises")
