from leqet.models import Notification, PlanMessage
from leqet.services import notifications as notification_service


def _post(client, headers, member_id, plan_type, message="How many sets?"):
    return client.post(f"/api/members/{member_id}/plan-messages",
                       json={"planType": plan_type, "message": message}, headers=headers)


def test_member_message_notifies_coach_and_admins(client, member, trainer, admin, auth_headers):
    resp = _post(client, auth_headers(member), member.id, "workout")
    assert resp.status_code == 201
    message = resp.get_json()["message"]
    assert message["sender_role"] == "member"
    assert message["coach_id"] is None

    trainer_notes = Notification.query.filter_by(user_id=trainer.id).all()
    assert [n.message for n in trainer_notes] == ["New message from member about their workout plan"]
    admin_notes = Notification.query.filter_by(user_id=admin.id).all()
    assert admin_notes[0].message == f"New workout plan message for member #{member.id}"


def test_coach_message_notifies_member(client, member, nutritionist, auth_headers):
    resp = _post(client, auth_headers(nutritionist), member.id, "diet", "Add more protein")
    assert resp.status_code == 201
    assert resp.get_json()["message"]["coach_id"] == nutritionist.id
    notes = Notification.query.filter_by(user_id=member.id).all()
    assert [n.message for n in notes] == ["New message about your diet plan"]


def test_coaches_are_limited_to_their_thread(client, member, trainer, nutritionist, auth_headers):
    resp = _post(client, auth_headers(trainer), member.id, "diet")
    assert resp.status_code == 403
    assert resp.get_json()["msg"] == "Trainers can only post to workout plan messages"
    resp = _post(client, auth_headers(nutritionist), member.id, "workout")
    assert resp.status_code == 403


def test_message_validation(client, member, auth_headers):
    headers = auth_headers(member)
    assert _post(client, headers, member.id, "cardio").status_code == 400
    assert _post(client, headers, member.id, "diet", "   ").status_code == 400
    resp = client.get(f"/api/members/{member.id}/plan-messages", headers=headers)
    assert resp.status_code == 400


def test_notification_failure_does_not_fail_post(client, member, monkeypatch, auth_headers):
    def explode(message, sender_id):
        raise RuntimeError("notification store down")

    monkeypatch.setattr("leqet.routes.api.messages.notify_plan_message", explode)
    resp = _post(client, auth_headers(member), member.id, "diet")
    assert resp.status_code == 201
    assert PlanMessage.query.count() == 1


def test_thread_is_listed_oldest_first(client, member, trainer, auth_headers):
    _post(client, auth_headers(member), member.id, "workout", "first")
    _post(client, auth_headers(trainer), member.id, "workout", "second")
    _post(client, auth_headers(member), member.id, "diet", "other thread")

    resp = client.get(f"/api/members/{member.id}/plan-messages?planType=workout&limit=1000",
                      headers=auth_headers(trainer))
    assert [m["message"] for m in resp.get_json()["messages"]] == ["first", "second"]


def test_notifications_read_flow(client, member, nutritionist, trainer, auth_headers):
    _post(client, auth_headers(nutritionist), member.id, "diet")
    headers = auth_headers(member)

    notes = client.get("/api/notifications?only_unread=1", headers=headers).get_json()["notifications"]
    assert len(notes) == 1 and notes[0]["isRead"] is False

    # someone else's notification id is ignored
    client.post(f"/api/notifications/{notes[0]['id']}/read", headers=auth_headers(trainer))
    assert len(client.get("/api/notifications?only_unread=true", headers=headers).get_json()["notifications"]) == 1

    resp = client.post(f"/api/notifications/{notes[0]['id']}/read", headers=headers)
    assert resp.get_json() == {"ok": True}
    assert client.get("/api/notifications?only_unread=1", headers=headers).get_json()["notifications"] == []
    assert len(client.get("/api/notifications", headers=headers).get_json()["notifications"]) == 1


def test_plan_label():
    assert notification_service.plan_label("diet") == "diet plan"
    assert notification_service.plan_label("workout") == "workout plan"
