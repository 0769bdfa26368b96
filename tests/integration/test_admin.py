from datetime import datetime, timedelta

from leqet.extensions import db
from leqet.models import (
    User, SystemLog, TrainerAssignment, NutritionistAssignment, WorkoutPlan, TrainerFeedback, ScheduleSession,
)
from leqet.routes.admin import maintenance


def test_admin_routes_require_admin(client, member, trainer, auth_headers):
    assert client.get("/api/admin/users").status_code == 401
    for user in (member, trainer):
        resp = client.get("/api/admin/users", headers=auth_headers(user))
        assert resp.status_code == 403
        assert resp.get_json() == {"msg": "Forbidden"}


def test_invite_user(client, admin, auth_headers):
    headers = auth_headers(admin)
    resp = client.post("/api/admin/users/invite", json={
        "full_name": "Abebe Kebede", "email": " Abebe@Leqet.test ", "role": "trainer",
    }, headers=headers)
    assert resp.status_code == 201
    user = db.session.get(User, resp.get_json()["id"])
    assert user.email == "abebe@leqet.test"
    assert user.status == "pending"
    assert user.password_hash is None
    assert SystemLog.query.filter_by(log_type="info").count() == 1

    resp = client.post("/api/admin/users/invite", json={
        "full_name": "Someone Else", "email": "abebe@leqet.test", "role": "member",
    }, headers=headers)
    assert resp.status_code == 409

    resp = client.post("/api/admin/users/invite", json={"full_name": "X", "email": "x@leqet.test"}, headers=headers)
    assert resp.status_code == 400
    resp = client.post("/api/admin/users/invite", json={
        "full_name": "X", "email": "x@leqet.test", "role": "owner",
    }, headers=headers)
    assert resp.status_code == 400


def test_list_and_get_users(client, admin, member, auth_headers):
    headers = auth_headers(admin)
    users = client.get("/api/admin/users", headers=headers).get_json()
    by_id = {u["id"]: u for u in users}
    assert by_id[member.id]["trainerId"] is not None
    assert by_id[member.id]["isActivated"] is True

    assert client.get(f"/api/admin/users/{member.id}", headers=headers).get_json()["email"] == member.email
    assert client.get("/api/admin/users/999", headers=headers).status_code == 404


def test_update_user_assignments(client, admin, member, trainer, make_user, auth_headers):
    headers = auth_headers(admin)
    new_trainer = make_user("trainer")

    resp = client.put(f"/api/admin/users/{member.id}", json={"trainerId": new_trainer.id, "nutritionistId": None},
                      headers=headers)
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["trainerId"] == new_trainer.id
    assert data["nutritionistId"] is None
    assert NutritionistAssignment.query.count() == 0

    resp = client.put(f"/api/admin/users/{member.id}", json={"trainerId": admin.id}, headers=headers)
    assert resp.status_code == 400
    assert resp.get_json()["msg"] == "trainerId must reference a trainer"
    assert db.session.get(TrainerAssignment, member.id).trainer_id == new_trainer.id

    resp = client.put(f"/api/admin/users/{member.id}", json={"role": "trainer"}, headers=headers)
    assert resp.get_json()["role"] == "trainer"


def test_assignments_only_apply_to_members(client, admin, trainer, nutritionist, make_user, auth_headers):
    headers = auth_headers(admin)
    other_trainer = make_user("trainer")

    resp = client.put(f"/api/admin/users/{other_trainer.id}", json={"trainerId": trainer.id}, headers=headers)
    assert resp.status_code == 400
    assert resp.get_json()["msg"] == "trainerId can only be set on a member"

    resp = client.put(f"/api/admin/users/{admin.id}", json={"nutritionistId": nutritionist.id}, headers=headers)
    assert resp.status_code == 400
    assert TrainerAssignment.query.count() == 0
    assert NutritionistAssignment.query.count() == 0

    # clearing is still allowed
    resp = client.put(f"/api/admin/users/{other_trainer.id}", json={"trainerId": None}, headers=headers)
    assert resp.status_code == 200


def test_delete_user_detaches_related_rows(client, admin, member, trainer, auth_headers):
    client.post(f"/api/members/{member.id}/workout-plan/manual", json={
        "days": [{"exercises": [{"name": "Squat"}]}],
    }, headers=auth_headers(trainer))
    client.post(f"/api/members/{member.id}/trainer-feedback", json={"message": "Nice"}, headers=auth_headers(trainer))
    client.post("/api/trainer/schedule", json={
        "member_id": member.id, "session_type": "group", "session_date": "2025-05-01", "session_time": "10:00",
    }, headers=auth_headers(trainer))

    headers = auth_headers(admin)
    assert client.delete(f"/api/admin/users/{trainer.id}", headers=headers).status_code == 204

    assert db.session.get(User, trainer.id) is None
    plan = WorkoutPlan.query.filter_by(member_id=member.id).one()
    assert plan.trainer_id is None
    assert TrainerFeedback.query.count() == 0
    assert ScheduleSession.query.count() == 0
    assert TrainerAssignment.query.count() == 0

    assert client.delete(f"/api/admin/users/{admin.id}", headers=headers).status_code == 400
    assert client.delete("/api/admin/users/999", headers=headers).status_code == 404


def test_backup_in_memory_database_fails_cleanly(client, admin, auth_headers):
    resp = client.post("/api/admin/maintenance/backup", headers=auth_headers(admin))
    assert resp.status_code == 500
    assert resp.get_json()["success"] is False


def test_backup_records_system_log(client, admin, monkeypatch, auth_headers):
    monkeypatch.setattr(maintenance, "create_backup", lambda now: "leqet_2025-01-01T00-00-00.sqlite")
    headers = auth_headers(admin)

    resp = client.post("/api/admin/maintenance/backup", headers=headers)
    assert resp.status_code == 200
    assert resp.get_json()["filename"] == "leqet_2025-01-01T00-00-00.sqlite"

    stats = client.get("/api/admin/system/stats", headers=headers).get_json()
    assert stats["lastBackup"] is not None
    assert stats["dbSizeBytes"] >= 0
    assert stats["uptimeSeconds"] >= 0


def test_health_check_and_clear_cache(client, admin, member, auth_headers):
    headers = auth_headers(admin)
    resp = client.post("/api/admin/maintenance/health-check", headers=headers).get_json()
    assert resp["success"] is True and resp["dbOk"] is True
    assert resp["users"] == User.query.count()

    db.session.add_all([
        SystemLog(log_type="info", message="old", created_at=datetime.utcnow() - timedelta(days=40)),
        SystemLog(log_type="info", message="fresh"),
    ])
    db.session.commit()
    resp = client.post("/api/admin/maintenance/clear-cache", headers=headers).get_json()
    assert resp == {"success": True, "cleared": 1}
    assert [log.message for log in SystemLog.query.all()] == ["fresh"]


def test_system_monitor(client, admin, auth_headers):
    db.session.add_all([
        SystemLog(log_type="error", message="boom"),
        SystemLog(log_type="warning", message="slow"),
        SystemLog(log_type="error", message="ancient", created_at=datetime.utcnow() - timedelta(days=2)),
    ])
    db.session.commit()

    data = client.get("/api/admin/system/monitor", headers=auth_headers(admin)).get_json()
    assert data["status"] == "healthy"
    assert data["errorsLast24h"] == 1
    assert data["warningsLast24h"] == 1
    assert len(data["recentLogs"]) == 3
    assert "performance" in data
    assert 0 <= data["storagePercent"] <= 100
