import pytest

from leqet.services.nutrition import (
    Food, Ingredient, NutritionError, compose_food, save_custom_food, scale_to_quantity,
    per_100g_from_item, goal_key, default_macro_targets, bmr_mifflin, tdee, round_half_up,
    derive_energy_targets,
)

INJERA = Food(name="Injera", calories=166, protein=6, carbs=33, fat=1, fiber=4)
EGG = Food(name="Boiled Egg", calories=155, protein=13, carbs=1.1, fat=11, fiber=0)


def test_round_half_up_matches_js_math_round():
    assert round_half_up(2.5) == 3
    assert round_half_up(-2.5) == -2
    assert round_half_up(0.25, 1) == 0.3


def test_compose_food_normalises_to_100g():
    result = compose_food([Ingredient(INJERA, 200), Ingredient(EGG, 50)])
    assert result["calories"] == 164
    assert result["protein"] == 7.4
    assert result["carbs"] == 26.6
    assert result["fat"] == 3.0
    assert result["fiber"] == 3.2
    assert result["total_weight"] == 250


def test_compose_food_two_ingredient_mix():
    a = Food(name="A", calories=200, protein=10, carbs=20, fat=5)
    b = Food(name="B", calories=100, protein=5, carbs=10, fat=2)
    result = compose_food([Ingredient(a, 100), Ingredient(b, 50)])
    # 250 kcal over 150 g
    assert result["calories"] == 167
    assert result["protein"] == 8.3
    assert result["carbs"] == 16.7
    assert result["fat"] == 4.0
    assert result["total_weight"] == 150


def test_compose_food_rounds_halves_up():
    result = compose_food([Ingredient(Food(name="Half", calories=100.5, protein=0.25), 100)])
    assert result["calories"] == 101
    assert result["protein"] == 0.3
    assert scale_to_quantity(Food(name="Odd", calories=101), 50)["calories"] == 51


def test_compose_food_rejects_zero_weight():
    with pytest.raises(NutritionError):
        compose_food([])
    with pytest.raises(NutritionError):
        compose_food([Ingredient(INJERA, 0)])


def test_save_custom_food_assigns_synthetic_id():
    food = save_custom_food("  Injera with egg ", [Ingredient(INJERA, 100)], now_ms=1700000000000)
    assert food.id == "custom_1700000000000"
    assert food.category == "custom"
    assert food.name == "Injera with egg"
    assert food.calories == 166


def test_save_custom_food_requires_name():
    with pytest.raises(NutritionError):
        save_custom_food("   ", [Ingredient(INJERA, 100)])


def test_scale_to_quantity():
    assert scale_to_quantity(INJERA, 150) == {"calories": 249, "protein": 9.0, "carbs": 49.5, "fat": 1.5}


def test_per_100g_from_item_defaults_quantity():
    assert per_100g_from_item(200, 300, 20, 40, 10) == {"calories": 150.0, "protein": 10.0, "carbs": 20.0, "fat": 5.0}
    assert per_100g_from_item(None, 80, 2, 3, 1)["calories"] == 80.0


@pytest.mark.parametrize("text,key", [
    ("Weight Loss", "fat_loss"),
    ("muscle gain", "muscle_gain"),
    ("Strength", "strength"),
    ("endurance", "endurance"),
    ("Flexibility", "flexibility"),
    (None, "general_fitness"),
])
def test_goal_key(text, key):
    assert goal_key(text) == key


def test_default_macro_targets():
    assert default_macro_targets("muscle_gain", 2500, 80) == {"calories": 2500, "protein": 144, "carbs": 326, "fat": 69}
    assert default_macro_targets("general_fitness") == {"calories": 2000, "protein": 120, "carbs": 254, "fat": 56}


def test_bmr_and_tdee():
    assert bmr_mifflin("male", 80, 180, 30) == 1780
    assert bmr_mifflin("female", 80, 180, 30) == 1614
    assert bmr_mifflin("male", None, 180, 30) is None
    assert tdee(1780, "moderate") == 2759
    assert tdee(None, "moderate") is None


def test_derive_energy_targets_incomplete_profile():
    assert derive_energy_targets("male", 80, None, 30, "active", "weight_loss") == {
        "bmr": None, "tdee": None, "target_calories": None,
    }
