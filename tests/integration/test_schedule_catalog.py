from leqet.extensions import db
from leqet.models import FoodItem, Exercise
from leqet.routes.api import catalog
from leqet.services.external import ExternalApiError


def test_trainer_schedules_assigned_member(client, member, trainer, auth_headers):
    headers = auth_headers(trainer)
    for day, time in (("2025-05-02", "09:00"), ("2025-05-01", "18:30"), ("2025-06-01", "07:00")):
        resp = client.post("/api/trainer/schedule", json={
            "member_id": member.id, "session_type": "personal", "session_date": day, "session_time": time,
        }, headers=headers)
        assert resp.status_code == 201, resp.get_json()

    sessions = client.get("/api/trainer/schedule?from=2025-05-01&to=2025-05-31", headers=headers).get_json()["sessions"]
    assert [s["session_date"] for s in sessions] == ["2025-05-01", "2025-05-02"]
    assert sessions[0]["member_name"] == member.full_name
    assert sessions[0]["status"] == "scheduled"

    mine = client.get(f"/api/members/{member.id}/schedule", headers=auth_headers(member)).get_json()["sessions"]
    assert len(mine) == 3
    assert mine[0]["trainer_name"] == trainer.full_name


def test_schedule_validation_and_access(client, member, trainer, make_user, auth_headers):
    resp = client.post("/api/trainer/schedule", json={
        "member_id": member.id, "session_type": "party", "session_date": "2025-05-01", "session_time": "10:00",
    }, headers=auth_headers(trainer))
    assert resp.status_code == 400
    assert resp.get_json()["errors"]["session_type"] == ["Valid session_type is required"]

    stranger = make_user("trainer")
    resp = client.post("/api/trainer/schedule", json={
        "member_id": member.id, "session_type": "online", "session_date": "2025-05-01", "session_time": "10:00",
    }, headers=auth_headers(stranger))
    assert resp.status_code == 403

    assert client.get("/api/trainer/schedule", headers=auth_headers(member)).status_code == 403


def test_food_listing_and_local_search(client):
    db.session.add_all([FoodItem(name="Shiro Wot", calories=180), FoodItem(name="Injera", calories=166)])
    db.session.commit()

    foods = client.get("/api/foods").get_json()["foods"]
    assert [f["name"] for f in foods] == ["Injera", "Shiro Wot"]

    foods = client.get("/api/foods?q=shiro").get_json()["foods"]
    assert foods[0]["source"] == "local"


def test_food_search_falls_back_to_external_and_caches(client, monkeypatch):
    monkeypatch.setattr(catalog, "search_edamam_foods", lambda q: [
        {"id": "edamam-1", "name": "Teff Flour", "calories": 367, "protein": 13, "carbs": 73, "fat": 2.4,
         "source": "edamam"},
    ])
    foods = client.get("/api/foods?q=teff").get_json()["foods"]
    assert foods[0]["source"] == "edamam"
    assert FoodItem.query.filter_by(name="Teff Flour").one().is_local is False


def test_food_search_external_error(client, monkeypatch):
    def fail(q):
        raise ExternalApiError("down")

    monkeypatch.setattr(catalog, "search_edamam_foods", fail)
    resp = client.get("/api/foods?q=teff")
    assert resp.status_code == 500
    assert resp.get_json()["msg"] == "Failed to search for foods"


def test_create_food(client, member, auth_headers):
    headers = auth_headers(member)
    resp = client.post("/api/foods", json={"name": "Kitfo", "calories": 250, "protein": -3}, headers=headers)
    assert resp.status_code == 201
    food = db.session.get(FoodItem, resp.get_json()["id"])
    assert food.protein == 0
    assert food.is_local is True

    assert client.post("/api/foods", json={"name": " "}, headers=headers).status_code == 400


def test_create_food_with_taken_name_conflicts(client, member, auth_headers):
    headers = auth_headers(member)
    assert client.post("/api/foods", json={"name": "Kitfo", "calories": 250}, headers=headers).status_code == 201

    for name in ("Kitfo", " kitfo "):
        resp = client.post("/api/foods", json={"name": name, "calories": 100}, headers=headers)
        assert resp.status_code == 409
        assert resp.get_json()["msg"] == "A food with this name already exists"
    assert FoodItem.query.count() == 1


def test_create_composed_food(client, member, auth_headers):
    headers = auth_headers(member)
    injera = FoodItem(name="Injera", calories=166, protein=6, carbs=33, fat=1, fiber=4)
    db.session.add(injera)
    db.session.commit()

    resp = client.post("/api/foods", json={
        "name": "Injera with egg",
        "ingredients": [
            {"foodId": injera.id, "quantity": 200},
            {"food": {"name": "Egg", "calories": 155, "protein": 13, "carbs": 1.1, "fat": 11}, "quantity": 50},
        ],
    }, headers=headers)
    assert resp.status_code == 201
    food = db.session.get(FoodItem, resp.get_json()["id"])
    assert food.category == "custom"
    assert food.calories == 164
    assert food.protein == 7.4

    resp = client.post("/api/foods", json={"name": "Nothing", "ingredients": [{"foodId": injera.id, "quantity": 0}]},
                       headers=headers)
    assert resp.status_code == 400


def test_exercise_endpoints(client, monkeypatch):
    db.session.add(Exercise(name="Jump Rope", category="cardio", calories_per_min=12))
    db.session.commit()

    exercises = client.get("/api/exercises").get_json()["exercises"]
    assert exercises[0]["caloriesPerMinute"] == 12.0

    assert client.get("/api/exercises/search").status_code == 400
    assert client.get("/api/exercises/search?q=rope").get_json()[0]["source"] == "local"

    monkeypatch.setattr(catalog, "search_api_ninjas_exercises", lambda q: [
        {"id": "api-0", "name": "Sled Push", "description": "", "caloriesPerMinute": 6, "source": "api-ninjas"},
    ])
    results = client.get("/api/exercises/search?q=sled").get_json()
    assert results[0]["name"] == "Sled Push"
    assert Exercise.query.filter_by(name="Sled Push").count() == 1


def test_health(client):
    assert client.get("/api/health").get_json() == {"ok": True}
