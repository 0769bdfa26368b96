from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

NUTRIENTS = ("calories", "protein", "carbs", "fat", "fiber")

DEFAULT_DAILY_CALORIES = 2000
DEFAULT_DAILY_PROTEIN = 120
FAT_CALORIE_SHARE = 0.25

PROTEIN_PER_KG: Dict[str, float] = {
    "muscle_gain": 1.8,
    "fat_loss": 1.6,
}
DEFAULT_PROTEIN_PER_KG = 1.4

ACTIVITY_FACTORS: Dict[str, float] = {
    "sedentary": 1.2,
    "light": 1.375,
    "moderate": 1.55,
    "active": 1.725,
    "very_active": 1.9,
}


class NutritionError(ValueError):
    pass


@dataclass(frozen=True)
class Food:
    """Per-100g nutrient values of a catalogue or custom food."""
    name: str
    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0
    id: Optional[str] = None
    category: Optional[str] = None

    @classmethod
    def from_mapping(cls, data) -> "Food":
        return cls(
            name=str(data.get("name") or ""),
            calories=_as_float(data.get("calories")),
            protein=_as_float(data.get("protein")),
            carbs=_as_float(data.get("carbs")),
            fat=_as_float(data.get("fat")),
            fiber=_as_float(data.get("fiber")),
            id=str(data["id"]) if data.get("id") is not None else None,
            category=data.get("category"),
        )


@dataclass(frozen=True)
class Ingredient:
    food: Food
    quantity_grams: float


def _as_float(value) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like JavaScript's Math.round (halves go towards +inf)."""
    scale = 10 ** digits
    rounded = math.floor(value * scale + 0.5) / scale
    return int(rounded) if digits == 0 else rounded


def round_1dp(value: float) -> float:
    return round_half_up(value, 1)


def combined_totals(ingredients: Iterable[Ingredient]) -> Dict[str, float]:
    totals = {key: 0.0 for key in NUTRIENTS}
    for ing in ingredients:
        multiplier = ing.quantity_grams / 100
        for key in NUTRIENTS:
            totals[key] += getattr(ing.food, key) * multiplier
    return totals


def compose_food(ingredients: Iterable[Ingredient]) -> Dict[str, float]:
    """Per-100g nutrients of a mix of ingredients.

    Each nutrient is summed as ``value * qty / 100`` and scaled by
    ``100 / total_weight``. Calories are rounded to an integer, the rest to
    one decimal. A mix with no weight has no per-100g value, so it is
    rejected.
    """
    ingredients = list(ingredients)
    total_weight = sum(ing.quantity_grams for ing in ingredients)
    if total_weight <= 0:
        raise NutritionError("Total ingredient weight must be greater than 0")

    totals = combined_totals(ingredients)
    factor = 100 / total_weight
    return {
        "calories": round_half_up(totals["calories"] * factor),
        "protein": round_1dp(totals["protein"] * factor),
        "carbs": round_1dp(totals["carbs"] * factor),
        "fat": round_1dp(totals["fat"] * factor),
        "fiber": round_1dp(totals["fiber"] * factor),
        "total_weight": total_weight,
    }


def save_custom_food(name: str, ingredients: Iterable[Ingredient], now_ms: Optional[int] = None) -> Food:
    """Build the custom food emitted on save. Persisting it is the caller's job."""
    name = (name or "").strip()
    if not name:
        raise NutritionError("Custom food name is required")
    nutrition = compose_food(ingredients)
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return Food(
        id=f"custom_{stamp}",
        name=name,
        category="custom",
        calories=nutrition["calories"],
        protein=nutrition["protein"],
        carbs=nutrition["carbs"],
        fat=nutrition["fat"],
        fiber=nutrition["fiber"],
    )


def scale_to_quantity(food: Food, quantity_grams: float) -> Dict[str, float]:
    """Nutrient snapshot of ``quantity_grams`` of a per-100g food."""
    multiplier = quantity_grams / 100
    return {
        "calories": round_half_up(food.calories * multiplier),
        "protein": round_1dp(food.protein * multiplier),
        "carbs": round_1dp(food.carbs * multiplier),
        "fat": round_1dp(food.fat * multiplier),
    }


def per_100g_from_item(quantity, calories, protein, carbs, fat) -> Dict[str, float]:
    """Back-compute per-100g values from an item snapshot (quantity defaults to 100g)."""
    quantity = _as_float(quantity)
    base = quantity if quantity > 0 else 100
    factor = 100 / base
    return {
        "calories": round_1dp(_as_float(calories) * factor),
        "protein": round_1dp(_as_float(protein) * factor),
        "carbs": round_1dp(_as_float(carbs) * factor),
        "fat": round_1dp(_as_float(fat) * factor),
    }


def goal_key(goal_text: Optional[str]) -> str:
    text = (goal_text or "general_fitness").lower()
    if "loss" in text or "fat" in text:
        return "fat_loss"
    if "muscle" in text or "gain" in text:
        return "muscle_gain"
    if "strength" in text:
        return "strength"
    if "endurance" in text:
        return "endurance"
    if "flex" in text:
        return "flexibility"
    return "general_fitness"


def goal_label(key: str) -> str:
    return key.replace("_", " ")


def default_macro_targets(key: str, target_calories=None, weight_kg=None) -> Dict[str, int]:
    calories = _as_float(target_calories)
    daily_calories = round_half_up(calories) if calories > 0 else DEFAULT_DAILY_CALORIES

    weight = _as_float(weight_kg)
    per_kg = PROTEIN_PER_KG.get(key, DEFAULT_PROTEIN_PER_KG)
    protein = round_half_up(weight * per_kg) if weight > 0 else DEFAULT_DAILY_PROTEIN
    fat = round_half_up(daily_calories * FAT_CALORIE_SHARE / 9)
    carbs = max(0, round_half_up((daily_calories - protein * 4 - fat * 9) / 4))
    return {
        "calories": daily_calories,
        "protein": protein,
        "carbs": carbs,
        "fat": fat,
    }


def bmr_mifflin(gender: Optional[str], weight_kg, height_cm, age) -> Optional[float]:
    """Mifflin-St Jeor basal metabolic rate, or None when stats are missing."""
    weight, height, years = _as_float(weight_kg), _as_float(height_cm), _as_float(age)
    if weight <= 0 or height <= 0 or years <= 0:
        return None
    base = 10 * weight + 6.25 * height - 5 * years
    offset = -161 if (gender or "").lower().startswith("f") else 5
    return round_half_up(base + offset)


def tdee(bmr: Optional[float], activity_level: Optional[str]) -> Optional[float]:
    if bmr is None:
        return None
    factor = ACTIVITY_FACTORS.get((activity_level or "").lower(), ACTIVITY_FACTORS["sedentary"])
    return round_half_up(bmr * factor)


GOAL_CALORIE_ADJUSTMENT: Dict[str, int] = {
    "weight_loss": -500,
    "muscle_gain": 300,
}


def target_calories_for_goal(tdee_value: Optional[float], goal: Optional[str]) -> Optional[float]:
    if tdee_value is None:
        return None
    return round_half_up(tdee_value + GOAL_CALORIE_ADJUSTMENT.get((goal or "").lower(), 0))


def derive_energy_targets(gender, weight_kg, height_cm, age, activity_level, goal) -> Dict[str, Optional[float]]:
    """BMR, TDEE and daily target calories from profile stats (all None if incomplete)."""
    bmr = bmr_mifflin(gender, weight_kg, height_cm, age)
    total = tdee(bmr, activity_level)
    return {
        "bmr": bmr,
        "tdee": total,
        "target_calories": target_calories_for_goal(total, goal),
    }
