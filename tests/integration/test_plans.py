from leqet.extensions import db
from leqet.models import DietPlan, FoodItem, WorkoutPlan, MemberProfile

DIET_PAYLOAD = {
    "name": "Cut phase",
    "goal": "fat loss",
    "meals": [
        {"mealType": "Breakfast", "items": [
            {"name": "Oat Porridge", "quantity": 200, "calories": 300, "protein": 10, "carbs": 50, "fat": 6},
            {"name": "", "quantity": 50},
        ]},
        {"mealType": "elevenses", "items": [
            {"name": "Banana", "quantity": 120, "calories": 107, "protein": 1.3, "carbs": 27.6, "fat": 0.4},
        ]},
        {"mealType": "dinner", "items": []},
    ],
}

WORKOUT_PAYLOAD = {
    "name": "Strength block",
    "days": [
        {"dayOfWeek": "Monday", "name": "Push", "durationMinutes": 50, "difficulty": "Intermediate",
         "exercises": [
             {"name": "Bench Press", "sets": 4, "reps": "8", "instructions": "Slow descent", "intensity": "High"},
             {"name": "   "},
         ]},
        {"dayOfWeek": "Thursday", "name": "Pull", "durationMinutes": 40,
         "exercises": [{"name": "Row", "sets": 3, "reps": "10", "category": "back"}]},
    ],
}


def test_nutritionist_saves_manual_diet_plan(client, member, nutritionist, auth_headers):
    resp = client.post(f"/api/members/{member.id}/diet-plan/manual", json=DIET_PAYLOAD,
                       headers=auth_headers(nutritionist))
    assert resp.status_code == 201, resp.get_json()

    plan = db.session.get(DietPlan, resp.get_json()["id"])
    assert plan.daily_calories == 407
    assert [m.meal_type for m in plan.meals] == ["breakfast", "snack"]

    # unknown foods are added to the catalogue per 100g
    oats = FoodItem.query.filter_by(name="Oat Porridge").one()
    assert oats.calories == 150.0 and oats.protein == 5.0

    resp = client.get(f"/api/members/{member.id}/diet-plan", headers=auth_headers(member))
    data = resp.get_json()["plan"]
    assert data["type"] == "trainer"
    assert data["meals"][0]["totalCalories"] == 300
    assert data["createdBy"] == nutritionist.full_name


def test_catalogue_item_without_nutrients_is_scaled_by_quantity(client, member, nutritionist, auth_headers):
    injera = FoodItem(name="Injera", calories=166, protein=4.5, carbs=34.8, fat=0.9)
    db.session.add(injera)
    db.session.commit()

    payload = {"meals": [{"mealType": "lunch", "items": [
        {"foodId": injera.id, "name": "Injera", "quantity": 200},
        {"name": "injera", "quantity": 50},
    ]}]}
    resp = client.post(f"/api/members/{member.id}/diet-plan/manual", json=payload,
                       headers=auth_headers(nutritionist))
    assert resp.status_code == 201, resp.get_json()

    plan = client.get(f"/api/members/{member.id}/diet-plan", headers=auth_headers(member)).get_json()["plan"]
    foods = plan["meals"][0]["foods"]
    assert [(f["calories"], f["protein"]) for f in foods] == [(332, 9.0), (83, 2.3)]
    assert plan["dailyCalories"] == 415
    assert FoodItem.query.count() == 1


def test_new_diet_plan_deactivates_previous(client, member, nutritionist, auth_headers):
    headers = auth_headers(nutritionist)
    client.post(f"/api/members/{member.id}/diet-plan/manual", json=DIET_PAYLOAD, headers=headers)
    client.post(f"/api/members/{member.id}/diet-plan/manual", json=DIET_PAYLOAD, headers=headers)
    assert DietPlan.query.filter_by(member_id=member.id, is_active=True).count() == 1


def test_manual_diet_plan_without_items_writes_nothing(client, member, nutritionist, auth_headers):
    payload = {"meals": [{"mealType": "lunch", "items": [{"name": ""}]}]}
    resp = client.post(f"/api/members/{member.id}/diet-plan/manual", json=payload, headers=auth_headers(nutritionist))
    assert resp.status_code == 400
    assert DietPlan.query.count() == 0


def test_diet_plan_requires_assigned_nutritionist(client, member, make_user, trainer, auth_headers):
    stranger = make_user("nutritionist")
    resp = client.post(f"/api/members/{member.id}/diet-plan/manual", json=DIET_PAYLOAD, headers=auth_headers(stranger))
    assert resp.status_code == 403
    resp = client.post(f"/api/members/{member.id}/diet-plan/manual", json=DIET_PAYLOAD, headers=auth_headers(trainer))
    assert resp.status_code == 403


def test_admin_plan_for_missing_member_is_404(client, admin, auth_headers):
    resp = client.post("/api/members/999/diet-plan/manual", json=DIET_PAYLOAD, headers=auth_headers(admin))
    assert resp.status_code == 404


def test_trainer_saves_manual_workout_plan(client, member, trainer, auth_headers):
    resp = client.post(f"/api/members/{member.id}/workout-plan/manual", json=WORKOUT_PAYLOAD,
                       headers=auth_headers(trainer))
    assert resp.status_code == 201, resp.get_json()

    data = client.get(f"/api/members/{member.id}/workout-plan", headers=auth_headers(member)).get_json()["plan"]
    assert data["type"] == "trainer"
    assert data["weeklyDays"] == 2
    assert data["estimatedDuration"] == 45
    assert data["difficulty"] == "Intermediate"
    push = data["workouts"][0]
    assert len(push["exercises"]) == 1
    assert push["exercises"][0]["instructions"] == "Slow descent | Intensity: High"
    assert data["workouts"][1]["exercises"][0]["targetMuscles"] == ["back"]


def test_manual_workout_plan_without_exercises_is_rejected(client, member, trainer, auth_headers):
    payload = {"days": [{"dayOfWeek": "Monday", "exercises": [{"name": ""}]}]}
    resp = client.post(f"/api/members/{member.id}/workout-plan/manual", json=payload, headers=auth_headers(trainer))
    assert resp.status_code == 400
    assert WorkoutPlan.query.count() == 0


def test_member_generates_default_plans(client, member, auth_headers):
    db.session.add(MemberProfile(user_id=member.id, goal="weight_loss", weight_kg=80, target_calories=2200))
    db.session.commit()
    headers = auth_headers(member)

    resp = client.post(f"/api/members/{member.id}/diet-plan/generate-default", headers=headers)
    assert resp.status_code == 201
    plan = client.get(f"/api/members/{member.id}/diet-plan", headers=headers).get_json()["plan"]
    assert plan["name"] == "Fat Loss Diet Plan"
    assert plan["type"] == "system"
    assert plan["dailyCalories"] == 2200
    assert plan["dailyProtein"] == 128
    assert plan["meals"] == []

    resp = client.post(f"/api/members/{member.id}/workout-plan/generate-default", headers=headers)
    assert resp.status_code == 201
    plan = client.get(f"/api/members/{member.id}/workout-plan", headers=headers).get_json()["plan"]
    assert plan["workouts"]


def test_member_cannot_generate_for_someone_else(client, member, make_user, auth_headers):
    other = make_user("member")
    resp = client.post(f"/api/members/{member.id}/diet-plan/generate-default", headers=auth_headers(other))
    assert resp.status_code == 403


def test_plan_reads_without_plan(client, member, auth_headers):
    resp = client.get(f"/api/members/{member.id}/diet-plan", headers=auth_headers(member))
    assert resp.status_code == 200
    assert resp.get_json()["plan"] is None
