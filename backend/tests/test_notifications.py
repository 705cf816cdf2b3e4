"""알림 목록/읽음/삭제 API가 수신자 본인에게만 동작하는지 검증하는 테스트입니다."""

from app.services import notification_service
from tests.conftest import auth_headers


def _notify(db, recipient, sender, title="알림"):
    return notification_service.create_notification(
        db,
        recipient_id=recipient.user_id,
        sender_id=sender.user_id,
        noti_type="task_assigned",
        title=title,
        message="메시지",
        related_task_id=1,
    )


def test_list_returns_unread_count_and_items(client, db, seed_users):
    member, admin = seed_users["member"], seed_users["admin"]
    for i in range(3):
        _notify(db, member, admin, title=f"알림 {i}")
    _notify(db, admin, member)

    body = client.get("/api/notifications", headers=auth_headers(member)).json()
    assert body["unread_count"] == 3
    assert len(body["items"]) == 3
    assert {item["recipient_id"] for item in body["items"]} == {member.user_id}
    assert body["items"][0]["sender_name"] == "Alice Admin"

    limited = client.get("/api/notifications", params={"limit": 2}, headers=auth_headers(member)).json()
    assert len(limited["items"]) == 2
    assert limited["unread_count"] == 3


def test_mark_read_sets_read_at_and_is_recipient_only(client, db, seed_users):
    member, admin = seed_users["member"], seed_users["admin"]
    noti = _notify(db, member, admin)

    foreign = client.patch(f"/api/notifications/{noti.noti_id}/read", headers=auth_headers(admin))
    assert foreign.status_code == 404

    resp = client.patch(f"/api/notifications/{noti.noti_id}/read", headers=auth_headers(member))
    assert resp.status_code == 200
    assert resp.json()["is_read"] is True
    assert resp.json()["read_at"] is not None

    body = client.get("/api/notifications", params={"unread_only": True}, headers=auth_headers(member)).json()
    assert body == {"unread_count": 0, "items": []}


def test_mark_all_read(client, db, seed_users):
    member, admin = seed_users["member"], seed_users["admin"]
    _notify(db, member, admin)
    _notify(db, member, admin)
    _notify(db, admin, member)

    resp = client.post("/api/notifications/read-all", headers=auth_headers(member))
    assert resp.status_code == 200
    assert resp.json()["updated"] == 2
    assert client.get("/api/notifications", headers=auth_headers(admin)).json()["unread_count"] == 1


def test_delete_notification(client, db, seed_users):
    member, admin = seed_users["member"], seed_users["admin"]
    noti = _notify(db, member, admin)
    noti_id = noti.noti_id

    assert client.delete(f"/api/notifications/{noti_id}", headers=auth_headers(admin)).status_code == 404
    assert client.delete(f"/api/notifications/{noti_id}", headers=auth_headers(member)).status_code == 200
    assert client.delete(f"/api/notifications/{noti_id}", headers=auth_headers(member)).status_code == 404
