"""작업 API(목록/생성/수정/보관/하위 작업/지연 목록)와 후처리 결과를 검증하는 테스트입니다."""

from datetime import datetime, timedelta

from app.models.history import History
from app.models.notification import Notification
from app.main import app
from app.services.notification_sink import get_notification_sink
from tests.conftest import FailingSink, auth_headers


def _create_task(client, headers, project_id, **payload):
    body = {"project_id": project_id, "title": "작업"}
    body.update(payload)
    resp = client.post("/api/tasks", json=body, headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()


def test_create_task_records_history_and_notifies_assignees(client, db, sink, seed_users, seed_project):
    admin, member = seed_users["admin"], seed_users["member"]
    task = _create_task(
        client,
        auth_headers(admin),
        seed_project.project_id,
        title="API 설계",
        priority="high",
        assignee_ids=[member.user_id, admin.user_id],
    )

    assert task["assignee_ids"] == sorted([member.user_id, admin.user_id])
    assert task["project_name"] == "고객 포털"
    assert task["warnings"] == []

    history = db.query(History).filter(History.entity_type == "task", History.entity_id == task["task_id"]).all()
    assert [h.action for h in history] == ["created"]
    assert history[0].entity_name == "API 설계"

    notis = db.query(Notification).all()
    assert [(n.recipient_id, n.noti_type) for n in notis] == [(member.user_id, "task_assigned")]
    assert [e["recipient"] for e in sink.events] == [member.user_id]


def test_team_member_can_create_task_but_outsider_cannot_see_project(client, seed_users, seed_project):
    _create_task(client, auth_headers(seed_users["member"]), seed_project.project_id)

    resp = client.post(
        "/api/tasks",
        json={"project_id": seed_project.project_id, "title": "외부인 작업"},
        headers=auth_headers(seed_users["outsider"]),
    )
    assert resp.status_code == 404


def test_reassignment_notifies_only_new_assignee(client, db, seed_users, seed_project):
    admin = seed_users["admin"]
    a, b, c = seed_users["member"], seed_users["member2"], seed_users["outsider"]
    headers = auth_headers(admin)
    task = _create_task(client, headers, seed_project.project_id, assignee_ids=[a.user_id, b.user_id])
    db.query(Notification).delete()
    db.commit()

    resp = client.put(
        f"/api/tasks/{task['task_id']}",
        json={"assignee_ids": [b.user_id, c.user_id]},
        headers=headers,
    )
    assert resp.status_code == 200
    assert resp.json()["assignee_ids"] == sorted([b.user_id, c.user_id])

    notis = db.query(Notification).all()
    assert [(n.recipient_id, n.noti_type) for n in notis] == [(c.user_id, "task_assigned")]

    latest = db.query(History).order_by(History.history_id.desc()).first()
    assert latest.action == "assigned"
    assert latest.changes == [{"field": "assignee_ids", "old": [a.user_id, b.user_id], "new": [b.user_id, c.user_id]}]


def test_status_completion_notifies_assignees_and_records_completed(client, db, seed_users, seed_project):
    member, member2 = seed_users["member"], seed_users["member2"]
    task = _create_task(
        client, auth_headers(seed_users["admin"]), seed_project.project_id, assignee_ids=[member.user_id, member2.user_id]
    )
    db.query(Notification).delete()
    db.commit()

    resp = client.put(
        f"/api/tasks/{task['task_id']}",
        json={"status": "completed"},
        headers=auth_headers(member),
    )
    assert resp.status_code == 200
    assert resp.json()["completed_at"] is not None
    assert resp.json()["completion_percentage"] == 100

    notis = db.query(Notification).all()
    assert [(n.recipient_id, n.noti_type) for n in notis] == [(member2.user_id, "task_updated")]
    latest = db.query(History).order_by(History.history_id.desc()).first()
    assert latest.action == "completed"
    assert latest.user_id == member.user_id


def test_list_tasks_filters(client, seed_users, seed_project):
    admin, member = seed_users["admin"], seed_users["member"]
    admin_headers = auth_headers(admin)
    member_headers = auth_headers(member)
    mine = _create_task(client, admin_headers, seed_project.project_id, title="내 작업", assignee_ids=[member.user_id])
    created = _create_task(client, member_headers, seed_project.project_id, title="내가 만든 작업")
    _create_task(client, admin_headers, seed_project.project_id, title="기타", priority="low")

    all_resp = client.get("/api/tasks", headers=member_headers)
    assert sorted(t["title"] for t in all_resp.json()) == ["내 작업", "내가 만든 작업"]

    assigned = client.get("/api/tasks", params={"filter_type": "assigned_to_me"}, headers=member_headers).json()
    assert [t["task_id"] for t in assigned] == [mine["task_id"]]

    created_only = client.get(
        "/api/tasks", params={"filter_type": "created_by_me_not_assigned"}, headers=member_headers
    ).json()
    assert [t["task_id"] for t in created_only] == [created["task_id"]]

    low = client.get("/api/tasks", params={"priority": "low"}, headers=admin_headers).json()
    assert [t["title"] for t in low] == ["기타"]
    assert client.get("/api/tasks", params={"priority": "low"}, headers=member_headers).json() == []

    bad = client.get("/api/tasks", params={"filter_type": "everything"}, headers=member_headers)
    assert bad.status_code == 400

    assert client.get("/api/tasks", headers=auth_headers(seed_users["outsider"])).json() == []


def test_archive_and_unarchive(client, seed_users, seed_project):
    headers = auth_headers(seed_users["member"])
    task = _create_task(client, headers, seed_project.project_id)

    archived = client.patch(f"/api/tasks/{task['task_id']}/archive", headers=headers)
    assert archived.status_code == 200
    assert archived.json()["archived"] is True
    assert client.get("/api/tasks", headers=headers).json() == []
    assert len(client.get("/api/tasks", params={"archived": True}, headers=headers).json()) == 1

    restored = client.patch(f"/api/tasks/{task['task_id']}/unarchive", headers=headers)
    assert restored.json()["archived"] is False


def test_subtasks_drive_completion_percentage(client, seed_users, seed_project):
    headers = auth_headers(seed_users["member"])
    task = _create_task(client, headers, seed_project.project_id, status="in_progress")
    task_id = task["task_id"]

    for title in ("a", "b", "c", "d"):
        resp = client.post(f"/api/tasks/{task_id}/subtasks", json={"title": title}, headers=headers)
        assert resp.status_code == 200
    subtask_ids = [st["subtask_id"] for st in resp.json()["subtasks"]]

    for subtask_id in subtask_ids[:3]:
        resp = client.patch(f"/api/tasks/{task_id}/subtasks/{subtask_id}", headers=headers)
        assert resp.status_code == 200

    body = resp.json()
    assert body["completion_percentage"] == 75
    assert body["is_overdue"] is False

    blank = client.post(f"/api/tasks/{task_id}/subtasks", json={"title": "  "}, headers=headers)
    assert blank.status_code == 400
    missing = client.patch(f"/api/tasks/{task_id}/subtasks/99999", headers=headers)
    assert missing.status_code == 404


def test_parent_task_nesting_is_limited_to_one_level(client, seed_users, seed_project):
    headers = auth_headers(seed_users["admin"])
    parent = _create_task(client, headers, seed_project.project_id, title="상위")
    child = _create_task(client, headers, seed_project.project_id, title="하위", parent_task_id=parent["task_id"])
    assert child["parent_task_id"] == parent["task_id"]

    resp = client.post(
        "/api/tasks",
        json={"project_id": seed_project.project_id, "title": "손자", "parent_task_id": child["task_id"]},
        headers=headers,
    )
    assert resp.status_code == 400

    other = _create_task(client, headers, seed_project.project_id, title="다른 작업")
    move = client.put(f"/api/tasks/{parent['task_id']}", json={"parent_task_id": other["task_id"]}, headers=headers)
    assert move.status_code == 400


def test_delete_task_keeps_name_snapshot_in_history(client, db, seed_users, seed_project):
    headers = auth_headers(seed_users["member"])
    task = _create_task(client, headers, seed_project.project_id, title="삭제될 작업")

    resp = client.delete(f"/api/tasks/{task['task_id']}", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["warnings"] == []
    assert client.get(f"/api/tasks/{task['task_id']}", headers=headers).status_code == 404

    deleted = db.query(History).filter(History.action == "deleted").one()
    assert deleted.entity_name == "삭제될 작업"
    assert deleted.project_id == seed_project.project_id


def test_overdue_list_uses_report_visibility(client, seed_users, seed_project):
    admin, member = seed_users["admin"], seed_users["member"]
    past = (datetime.now() - timedelta(days=2)).isoformat()
    overdue = _create_task(
        client, auth_headers(admin), seed_project.project_id, title="지연", due_date=past, assignee_ids=[member.user_id]
    )
    _create_task(client, auth_headers(admin), seed_project.project_id, title="남의 지연", due_date=past)

    member_list = client.get("/api/tasks/overdue", headers=auth_headers(member)).json()
    assert [t["task_id"] for t in member_list] == [overdue["task_id"]]
    assert member_list[0]["is_overdue"] is True

    root_list = client.get("/api/tasks/overdue", headers=auth_headers(seed_users["root"])).json()
    assert len(root_list) == 2


def test_teammate_task_is_hidden_from_list_but_reachable_by_id(client, seed_users, seed_project):
    member, member2 = seed_users["member"], seed_users["member2"]
    other = _create_task(
        client, auth_headers(member2), seed_project.project_id, title="동료 작업", assignee_ids=[member2.user_id]
    )

    assert client.get("/api/tasks", headers=auth_headers(member)).json() == []

    detail = client.get(f"/api/tasks/{other['task_id']}", headers=auth_headers(member))
    assert detail.status_code == 200
    assert detail.json()["title"] == "동료 작업"

    updated = client.put(f"/api/tasks/{other['task_id']}", json={"priority": "high"}, headers=auth_headers(member))
    assert updated.status_code == 200

    root_titles = [t["title"] for t in client.get("/api/tasks", headers=auth_headers(seed_users["root"])).json()]
    assert root_titles == ["동료 작업"]


def test_status_change_with_reassignment_notifies_new_assignee_twice(client, db, seed_users, seed_project):
    admin, member, member2 = seed_users["admin"], seed_users["member"], seed_users["member2"]
    headers = auth_headers(admin)
    task = _create_task(client, headers, seed_project.project_id, assignee_ids=[member.user_id])
    db.query(Notification).delete()
    db.commit()

    resp = client.put(
        f"/api/tasks/{task['task_id']}",
        json={"status": "in_progress", "assignee_ids": [member.user_id, member2.user_id]},
        headers=headers,
    )
    assert resp.status_code == 200

    notis = db.query(Notification).order_by(Notification.noti_id).all()
    assert [(n.recipient_id, n.noti_type) for n in notis] == [
        (member2.user_id, "task_assigned"),
        (member.user_id, "task_updated"),
        (member2.user_id, "task_updated"),
    ]


def test_push_failure_returns_short_warning(client, db, seed_users, seed_project):
    app.dependency_overrides[get_notification_sink] = lambda: FailingSink()
    task = _create_task(
        client, auth_headers(seed_users["admin"]), seed_project.project_id, assignee_ids=[seed_users["member"].user_id]
    )

    assert task["warnings"] == ["push: 알림을 전송하지 못했습니다."]
    assert db.query(Notification).count() == 1
