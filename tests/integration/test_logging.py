from leqet.extensions import db
from leqet.models import Exercise, FoodItem, MealLog, WorkoutLog


def _log_meal(client, headers, member_id, **overrides):
    payload = {
        "member_id": member_id, "meal_type": "lunch", "quantity": 150,
        "calories": 249, "protein": 9.0, "carbs": 49.5, "fat": 1.5,
    }
    payload.update(overrides)
    return client.post("/api/meals", json=payload, headers=headers)


def test_meal_log_read_and_delete(client, member, auth_headers):
    headers = auth_headers(member)
    food = FoodItem(name="Injera", calories=166, protein=6, carbs=33, fat=1)
    db.session.add(food)
    db.session.commit()

    resp = _log_meal(client, headers, member.id, food_item_id=food.id)
    assert resp.status_code == 201, resp.get_json()
    item_id = resp.get_json()["item_id"]

    meals = client.get(f"/api/meals/today?member_id={member.id}", headers=headers).get_json()["meals"]
    assert len(meals) == 1
    assert meals[0]["food_name"] == "Injera"
    assert meals[0]["calories"] == 249

    assert client.delete(f"/api/meals/items/{item_id}", headers=headers).status_code == 204
    # the emptied parent log goes too
    assert MealLog.query.count() == 0
    assert client.delete(f"/api/meals/items/{item_id}", headers=headers).status_code == 404


def test_meal_validation(client, member, auth_headers):
    headers = auth_headers(member)
    assert _log_meal(client, headers, member.id, meal_type=None).status_code == 400
    resp = _log_meal(client, headers, member.id, meal_type="brunch")
    assert resp.status_code == 400
    assert "meal_type must be one of" in resp.get_json()["msg"]


def test_member_cannot_log_for_someone_else(client, member, make_user, auth_headers):
    other = make_user("member")
    resp = _log_meal(client, auth_headers(other), member.id)
    assert resp.status_code == 403
    assert resp.get_json() == {"msg": "Forbidden"}


def test_assigned_trainer_can_log_for_member(client, member, trainer, auth_headers):
    assert _log_meal(client, auth_headers(trainer), member.id).status_code == 201


def test_meals_by_date_groups_by_meal_type(client, member, auth_headers):
    headers = auth_headers(member)
    _log_meal(client, headers, member.id, meal_type="breakfast", calories=300)
    _log_meal(client, headers, member.id, meal_type="lunch", calories=500)
    _log_meal(client, headers, member.id, meal_type="lunch", calories=200)
    today = MealLog.query.first().logged_at.date().isoformat()

    resp = client.get(f"/api/meals/by-date?member_id={member.id}&date={today}", headers=headers)
    assert resp.status_code == 200
    groups = {row["meal_type"]: row for row in resp.get_json()["meals"]}
    assert groups["lunch"]["meal_count"] == 2
    assert groups["lunch"]["total_calories"] == 700
    assert groups["breakfast"]["total_calories"] == 300

    resp = client.get(f"/api/meals/by-date?member_id={member.id}&date=yesterday", headers=headers)
    assert resp.status_code == 400


def test_recent_meals_are_scoped_for_members(client, member, make_user, auth_headers, admin):
    other = make_user("member")
    _log_meal(client, auth_headers(member), member.id)
    _log_meal(client, auth_headers(other), other.id)

    mine = client.get("/api/meals/recent", headers=auth_headers(member)).get_json()["meals"]
    assert {m["member_id"] for m in mine} == {member.id}

    everyone = client.get("/api/meals/recent?limit=500", headers=auth_headers(admin)).get_json()["meals"]
    assert {m["member_id"] for m in everyone} == {member.id, other.id}


def test_workout_by_name_creates_exercise(client, member, auth_headers):
    headers = auth_headers(member)
    resp = client.post("/api/workouts", json={
        "member_id": member.id, "exercise_name": "Hill Run", "duration_minutes": 30, "calories_burned": 300,
    }, headers=headers)
    assert resp.status_code == 201, resp.get_json()

    exercise = Exercise.query.filter_by(name="Hill Run").one()
    assert exercise.calories_per_min == 10
    assert exercise.category == "cardio"

    # same name, different case, reuses the row
    client.post("/api/workouts", json={
        "member_id": member.id, "exercise_name": "hill run", "duration_minutes": 20,
    }, headers=headers)
    assert Exercise.query.count() == 1

    workouts = client.get(f"/api/workouts/today?member_id={member.id}", headers=headers).get_json()["workouts"]
    assert len(workouts) == 2


def test_workout_validation(client, member, auth_headers):
    headers = auth_headers(member)
    base = {"member_id": member.id, "exercise_name": "Squat", "duration_minutes": 20}

    resp = client.post("/api/workouts", json=dict(base, duration_minutes=0), headers=headers)
    assert resp.get_json()["msg"] == "duration_minutes must be > 0"
    resp = client.post("/api/workouts", json=dict(base, weight_used=-5), headers=headers)
    assert resp.get_json()["msg"] == "weight_used must be >= 0"
    resp = client.post("/api/workouts", json=dict(base, exercise_name=""), headers=headers)
    assert resp.get_json()["msg"] == "exercise_id or exercise_name is required"

    resp = client.post("/api/workouts", json=dict(base, calories_burned=-40), headers=headers)
    assert resp.status_code == 201
    assert WorkoutLog.query.one().items[0].calories_burned == 0


def test_delete_workout_item(client, member, auth_headers):
    headers = auth_headers(member)
    resp = client.post("/api/workouts", json={
        "member_id": member.id, "exercise_name": "Plank", "duration_minutes": 5,
    }, headers=headers)
    item_id = resp.get_json()["item_id"]
    assert client.delete(f"/api/workouts/items/{item_id}", headers=headers).status_code == 204
    assert WorkoutLog.query.count() == 0
