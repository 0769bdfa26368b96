from leqet.models import User, FoodItem, TrainerAssignment


def test_dashboard_without_token_redirects_to_login(client):
    resp = client.get("/dashboard")
    assert resp.status_code == 401
    assert resp.get_json() == {"redirect": "/login"}


def test_dashboard_resolves_view_per_role(client, member, trainer, admin, auth_headers):
    assert client.get("/dashboard", headers=auth_headers(member)).get_json()["view"] == "MemberDashboard"
    assert client.get("/dashboard", headers=auth_headers(trainer)).get_json()["view"] == "TrainerDashboard"

    data = client.get("/dashboard/users", headers=auth_headers(admin)).get_json()
    assert data == {"view": "AdminUserManagement", "role": "admin", "path": "users"}

    data = client.get("/dashboard/workout-plan/builder", headers=auth_headers(trainer)).get_json()
    assert data["view"] == "TrainerWorkoutPlanBuilder"


def test_dashboard_unknown_path_goes_back_to_root(client, member, auth_headers):
    resp = client.get("/dashboard/users", headers=auth_headers(member))
    assert resp.status_code == 200
    assert resp.get_json() == {"redirect": "/dashboard"}


def test_dashboard_rejects_suspended_and_malformed(client, make_user, auth_headers):
    suspended = make_user("member", status="suspended")
    assert client.get("/dashboard", headers=auth_headers(suspended)).status_code == 401

    resp = client.get("/dashboard", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401
    assert resp.get_json() == {"redirect": "/login"}


def test_seed_demo_is_idempotent(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["seed-demo", "--password", "demo1234"])
    assert result.exit_code == 0, result.output
    assert "Demo data ready." in result.output

    member = User.query.filter_by(email="member@leqet.local").one()
    assert member.check_password("demo1234")
    assert TrainerAssignment.query.filter_by(member_id=member.id).count() == 1

    foods = FoodItem.query.count()
    result = runner.invoke(args=["seed-demo"])
    assert "already exists, skipping" in result.output
    assert FoodItem.query.count() == foods
    assert User.query.count() == 4
