"""Diet and workout plan builders.

Builders only add rows to ``db.session``; the calling view owns the commit
so a whole plan lands in one transaction or not at all.
"""
from sqlalchemy import func

from leqet.extensions import db
from leqet.models import (
    FoodItem, DietPlan, DietPlanMeal, DietPlanMealItem,
    WorkoutPlan, WorkoutPlanDay, WorkoutPlanExercise, MemberProfile,
)
from leqet.models.logs import MEAL_TYPES
from leqet.services.nutrition import (
    Food, _as_float, goal_key, goal_label, default_macro_targets, per_100g_from_item, round_half_up,
    scale_to_quantity,
)
from leqet.services.workouts import split_csv


class PlanValidationError(ValueError):
    pass


def _text(value):
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _number(value):
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _positive_id(value):
    number = _number(value)
    if number is None or number <= 0:
        return None
    return int(number)


def normalize_meal_type(value):
    meal_type = (value or "").lower() if isinstance(value, str) else ""
    return meal_type if meal_type in MEAL_TYPES else "snack"


def deactivate_plans(model, member_id):
    model.query.filter_by(member_id=member_id).update({"is_active": False})


def _resolve_food(item):
    """Food id for a plan item, creating a catalogue row for unknown names."""
    food_id = _positive_id(item.get("foodId"))
    if food_id:
        return food_id

    name = _text(item.get("name"))
    if not name:
        return None

    existing = FoodItem.query.filter(func.lower(FoodItem.name) == name.lower()).first()
    if existing:
        return existing.id

    base = per_100g_from_item(
        item.get("quantity"), item.get("calories"), item.get("protein"), item.get("carbs"), item.get("fat")
    )
    food = FoodItem(
        name=name,
        category=_text(item.get("category")),
        is_local=False,
        source_api="manual_plan",
        **base,
    )
    db.session.add(food)
    db.session.flush()
    return food.id


def _item_snapshot(item, food_id):
    """Nutrients for a plan item: the values it was sent with, or else the
    catalogue food scaled to the item's quantity."""
    keys = ("calories", "protein", "carbs", "fat")
    if any(item.get(key) not in (None, "") for key in keys):
        return {key: _as_float(item.get(key)) for key in keys}

    row = db.session.get(FoodItem, food_id) if food_id else None
    if row is None:
        return {key: 0.0 for key in keys}
    food = Food(
        name=row.name,
        calories=_as_float(row.calories),
        protein=_as_float(row.protein),
        carbs=_as_float(row.carbs),
        fat=_as_float(row.fat),
    )
    return scale_to_quantity(food, _as_float(item.get("quantity")))


def _usable_diet_items(meal):
    items = meal.get("items") if isinstance(meal, dict) else None
    if not isinstance(items, list):
        return []
    return [
        item for item in items
        if isinstance(item, dict) and (_positive_id(item.get("foodId")) or _text(item.get("name")))
    ]


def build_manual_diet_plan(member_id, author, payload):
    """Replace the member's active diet plan with ``payload``.

    ``author`` is the nutritionist writing the plan, or None for an admin.
    """
    payload = payload or {}
    meals = payload.get("meals") if isinstance(payload.get("meals"), list) else []
    prepared = [(meal, _usable_diet_items(meal)) for meal in meals if isinstance(meal, dict)]
    if not any(items for _, items in prepared):
        raise PlanValidationError("At least one meal must contain a food item")

    deactivate_plans(DietPlan, member_id)
    plan = DietPlan(
        member_id=member_id,
        nutritionist_id=author.id if author else None,
        name=_text(payload.get("name")) or "Custom diet plan",
        goal=_text(payload.get("goal")) or "custom",
        is_active=True,
    )
    db.session.add(plan)

    totals = {"calories": 0.0, "protein": 0.0, "carbs": 0.0, "fat": 0.0}
    for meal, items in prepared:
        if not items:
            continue
        meal_type = normalize_meal_type(meal.get("mealType"))
        plan_meal = DietPlanMeal(
            meal_type=meal_type,
            name=_text(meal.get("name")) or meal_type,
            notes=_text(meal.get("notes")),
        )
        plan.meals.append(plan_meal)

        for item in items:
            food_id = _resolve_food(item)
            snapshot = _item_snapshot(item, food_id)
            plan_meal.items.append(DietPlanMealItem(
                food_item_id=food_id,
                quantity=_as_float(item.get("quantity")),
                unit=_text(item.get("unit")) or "g",
                **snapshot,
            ))
            for key, value in snapshot.items():
                totals[key] += value

    plan.daily_calories = totals["calories"]
    plan.daily_protein = totals["protein"]
    plan.daily_carbs = totals["carbs"]
    plan.daily_fat = totals["fat"]
    db.session.flush()
    return plan


def _combine_instructions(instructions, intensity):
    if instructions and intensity:
        return f"{instructions} | Intensity: {intensity}"
    return instructions or intensity


def _usable_exercises(day):
    exercises = day.get("exercises") if isinstance(day, dict) else None
    if not isinstance(exercises, list):
        return []
    return [ex for ex in exercises if isinstance(ex, dict) and _text(ex.get("name"))]


def build_manual_workout_plan(member_id, author, payload):
    """Replace the member's active workout plan with ``payload``.

    ``author`` is the trainer writing the plan, or None for an admin.
    """
    payload = payload or {}
    days = payload.get("days") if isinstance(payload.get("days"), list) else []
    prepared = [(day, _usable_exercises(day)) for day in days if isinstance(day, dict)]
    if not any(exercises for _, exercises in prepared):
        raise PlanValidationError("At least one day must contain an exercise")

    deactivate_plans(WorkoutPlan, member_id)
    plan = WorkoutPlan(
        member_id=member_id,
        trainer_id=author.id if author else None,
        name=_text(payload.get("name")) or "Custom workout plan",
        goal=_text(payload.get("goal")) or "custom",
        weekly_days=len(prepared) or None,
        is_active=True,
    )
    db.session.add(plan)

    for day, exercises in prepared:
        plan_day = WorkoutPlanDay(
            day_of_week=_text(day.get("dayOfWeek")),
            name=_text(day.get("name")),
            duration_minutes=_number(day.get("durationMinutes")),
            difficulty=_text(day.get("difficulty")),
            focus=_text(day.get("focus")),
            tips=_text(day.get("tips")),
        )
        plan.days.append(plan_day)

        for ex in exercises:
            sets = _number(ex.get("sets"))
            plan_day.exercises.append(WorkoutPlanExercise(
                exercise_id=_positive_id(ex.get("exerciseId")),
                name=_text(ex.get("name")),
                sets=int(sets) if sets is not None else None,
                reps=_text(ex.get("reps")),
                rest=_text(ex.get("rest")),
                duration_minutes=_number(ex.get("durationMinutes")),
                instructions=_combine_instructions(_text(ex.get("instructions")), _text(ex.get("intensity"))),
                target_muscles=_text(ex.get("targetMuscles")) or _text(ex.get("category")),
            ))

    db.session.flush()
    return plan


def _profile_goal(member_id):
    profile = MemberProfile.query.filter_by(user_id=member_id).first()
    intake = profile.nutrition_intake if profile and isinstance(profile.nutrition_intake, dict) else {}
    goal_text = intake.get("primaryGoal") or (profile.goal if profile else None)
    return profile, goal_key(str(goal_text) if goal_text else None)


def generate_default_diet_plan(member_id, author=None):
    """Macro-only plan derived from the member's profile; it has no meals."""
    profile, key = _profile_goal(member_id)
    targets = default_macro_targets(
        key,
        profile.target_calories if profile else None,
        profile.weight_kg if profile else None,
    )
    label = goal_label(key)

    deactivate_plans(DietPlan, member_id)
    plan = DietPlan(
        member_id=member_id,
        nutritionist_id=author.id if author else None,
        name=f"{label.title()} Diet Plan",
        goal=label,
        daily_calories=targets["calories"],
        daily_protein=targets["protein"],
        daily_carbs=targets["carbs"],
        daily_fat=targets["fat"],
        is_active=True,
    )
    db.session.add(plan)
    db.session.flush()
    return plan


# (day_of_week, name, focus, [(exercise, sets, reps, rest, target muscles)])
_FULL_BODY = [
    ("Monday", "Full Body A", "strength,core", [
        ("Goblet Squat", 3, "10-12", "60s", "legs,glutes"),
        ("Push-up", 3, "8-12", "60s", "chest,triceps"),
        ("Dumbbell Row", 3, "10-12", "60s", "back,biceps"),
        ("Plank", 3, "30-45s", "45s", "core"),
    ]),
    ("Wednesday", "Conditioning", "cardio", [
        ("Brisk Walk", 1, "30 min", "-", "cardio"),
        ("Bodyweight Lunge", 3, "10 each leg", "60s", "legs"),
    ]),
    ("Friday", "Full Body B", "strength,mobility", [
        ("Romanian Deadlift", 3, "8-10", "90s", "hamstrings,glutes"),
        ("Overhead Press", 3, "8-10", "90s", "shoulders"),
        ("Lat Pulldown", 3, "10-12", "60s", "back"),
        ("Stretching", 1, "10 min", "-", "flexibility"),
    ]),
]

WORKOUT_TEMPLATES = {
    "fat_loss": ("Beginner", 45, [
        ("Monday", "Cardio Intervals", "cardio", [
            ("Stationary Bike Intervals", 8, "30s hard / 90s easy", "-", "cardio"),
            ("Bodyweight Squat", 3, "15", "45s", "legs"),
        ]),
        ("Wednesday", "Circuit", "strength,cardio", [
            ("Kettlebell Swing", 3, "15", "45s", "glutes,hamstrings"),
            ("Push-up", 3, "10-12", "45s", "chest"),
            ("Mountain Climber", 3, "30s", "30s", "core"),
        ]),
        ("Friday", "Steady State", "cardio", [
            ("Incline Walk", 1, "35 min", "-", "cardio"),
        ]),
        ("Saturday", "Mobility", "flexibility", [
            ("Yoga Flow", 1, "20 min", "-", "flexibility"),
        ]),
    ]),
    "muscle_gain": ("Intermediate", 60, [
        ("Monday", "Push", "chest,shoulders,triceps", [
            ("Bench Press", 4, "6-8", "120s", "chest"),
            ("Overhead Press", 3, "8-10", "90s", "shoulders"),
            ("Triceps Dip", 3, "10-12", "60s", "triceps"),
        ]),
        ("Tuesday", "Pull", "back,biceps", [
            ("Deadlift", 4, "5", "150s", "back,hamstrings"),
            ("Pull-up", 3, "6-10", "90s", "back"),
            ("Barbell Curl", 3, "10-12", "60s", "biceps"),
        ]),
        ("Thursday", "Legs", "legs", [
            ("Back Squat", 4, "6-8", "120s", "quads,glutes"),
            ("Leg Press", 3, "10-12", "90s", "quads"),
            ("Calf Raise", 3, "12-15", "60s", "calves"),
        ]),
        ("Saturday", "Upper Accessory", "chest,back", [
            ("Incline Dumbbell Press", 3, "8-12", "90s", "chest"),
            ("Seated Cable Row", 3, "10-12", "60s", "back"),
        ]),
    ]),
    "strength": ("Intermediate", 60, [
        ("Monday", "Squat Day", "legs", [
            ("Back Squat", 5, "5", "180s", "quads,glutes"),
            ("Plank", 3, "45s", "60s", "core"),
        ]),
        ("Wednesday", "Press Day", "chest,shoulders", [
            ("Bench Press", 5, "5", "180s", "chest"),
            ("Overhead Press", 3, "5", "150s", "shoulders"),
        ]),
        ("Friday", "Pull Day", "back", [
            ("Deadlift", 5, "3", "180s", "back,hamstrings"),
            ("Barbell Row", 3, "6-8", "120s", "back"),
        ]),
    ]),
    "endurance": ("Beginner", 50, [
        ("Monday", "Easy Run", "cardio", [("Easy Run", 1, "30 min", "-", "cardio")]),
        ("Wednesday", "Bike", "cardio", [("Cycling", 1, "40 min", "-", "cardio")]),
        ("Saturday", "Long Run", "cardio", [("Long Run", 1, "50 min", "-", "cardio")]),
    ]),
    "flexibility": ("Beginner", 30, [
        ("Tuesday", "Yoga", "flexibility", [("Yoga Flow", 1, "30 min", "-", "flexibility")]),
        ("Thursday", "Mobility", "flexibility", [("Full Body Stretch", 1, "25 min", "-", "flexibility")]),
        ("Sunday", "Yoga", "flexibility", [("Yin Yoga", 1, "30 min", "-", "flexibility")]),
    ]),
}
DEFAULT_WORKOUT_TEMPLATE = ("Beginner", 45, _FULL_BODY)


def generate_default_workout_plan(member_id, author=None):
    """Template workout plan keyed by the member's goal."""
    _, key = _profile_goal(member_id)
    difficulty, duration, days = WORKOUT_TEMPLATES.get(key, DEFAULT_WORKOUT_TEMPLATE)
    label = goal_label(key)

    deactivate_plans(WorkoutPlan, member_id)
    plan = WorkoutPlan(
        member_id=member_id,
        trainer_id=author.id if author else None,
        name=f"{label.title()} Workout Plan",
        goal=label,
        weekly_days=len(days),
        estimated_duration=duration,
        difficulty=difficulty,
        is_active=True,
    )
    db.session.add(plan)
    for day_of_week, name, focus, exercises in days:
        plan_day = WorkoutPlanDay(
            day_of_week=day_of_week, name=name, duration_minutes=duration,
            difficulty=difficulty, focus=focus,
        )
        for ex_name, sets, reps, rest, muscles in exercises:
            plan_day.exercises.append(WorkoutPlanExercise(
                name=ex_name, sets=sets, reps=reps, rest=rest, target_muscles=muscles,
            ))
        plan.days.append(plan_day)
    db.session.flush()
    return plan


def active_plan(model, member_id):
    return (
        model.query.filter(model.member_id == member_id, model.is_active.isnot(False))
        .order_by(model.created_at.desc(), model.id.desc())
        .first()
    )


def serialize_diet_plan(plan):
    if plan is None:
        return None

    meals = []
    for meal in plan.meals:
        foods = []
        for item in meal.items:
            foods.append({
                "name": item.food.name if item.food else "",
                "quantity": item.quantity or 0,
                "calories": item.calories or 0,
                "protein": item.protein or 0,
                "carbs": item.carbs or 0,
                "fat": item.fat or 0,
            })
        entry = {
            "id": str(meal.id),
            "mealType": (meal.meal_type or "").lower(),
            "foods": foods,
            "totalCalories": sum(f["calories"] for f in foods),
            "totalProtein": sum(f["protein"] for f in foods),
            "totalCarbs": sum(f["carbs"] for f in foods),
            "totalFat": sum(f["fat"] for f in foods),
        }
        if meal.notes and meal.notes.strip():
            entry["tips"] = meal.notes
        meals.append(entry)

    data = {
        "id": str(plan.id),
        "name": plan.name or "",
        "type": "trainer" if plan.nutritionist_id else "system",
        "goal": plan.goal or "",
        "dailyCalories": plan.daily_calories or 0,
        "dailyProtein": plan.daily_protein or 0,
        "dailyCarbs": plan.daily_carbs or 0,
        "dailyFat": plan.daily_fat or 0,
        "meals": meals,
        "createdAt": plan.created_at.isoformat() if plan.created_at else None,
        "active": plan.is_active is not False,
    }
    if plan.nutritionist_id and plan.nutritionist:
        data["createdBy"] = plan.nutritionist.full_name
    return data


def serialize_workout_plan(plan):
    if plan is None:
        return None

    workouts = []
    for day in plan.days:
        exercises = []
        for ex in day.exercises:
            entry = {
                "name": ex.name or "",
                "sets": ex.sets or 0,
                "reps": ex.reps or "",
                "rest": ex.rest or "",
                "targetMuscles": split_csv(ex.target_muscles),
            }
            if ex.duration_minutes is not None:
                entry["duration"] = ex.duration_minutes
            if ex.instructions:
                entry["instructions"] = ex.instructions
            exercises.append(entry)

        workout = {
            "id": str(day.id),
            "day": day.day_of_week or "",
            "name": day.name or "",
            "duration": day.duration_minutes or 0,
            "difficulty": day.difficulty or "",
            "focus": split_csv(day.focus),
            "exercises": exercises,
        }
        if day.tips and day.tips.strip():
            workout["tips"] = day.tips
        workouts.append(workout)

    weekly_days = plan.weekly_days or len(workouts)

    estimated = plan.estimated_duration or 0
    if estimated <= 0:
        durations = [w["duration"] for w in workouts if w["duration"] > 0]
        estimated = round_half_up(sum(durations) / len(durations)) if durations else 0

    difficulty = (plan.difficulty or "").strip()
    if not difficulty:
        difficulty = next((w["difficulty"] for w in workouts if w["difficulty"].strip()), "Custom")

    data = {
        "id": str(plan.id),
        "name": plan.name or "",
        "type": "trainer" if plan.trainer_id else "system",
        "goal": plan.goal or "",
        "weeklyDays": weekly_days,
        "estimatedDuration": estimated,
        "difficulty": difficulty,
        "workouts": workouts,
        "createdAt": plan.created_at.isoformat() if plan.created_at else None,
        "active": plan.is_active is not False,
    }
    if plan.trainer_id and plan.trainer:
        data["createdBy"] = plan.trainer.full_name
    return data
