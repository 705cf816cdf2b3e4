"""댓글 API와 멘션/댓글 알림 발송 규칙을 검증하는 테스트입니다."""

from app.models.history import History
from app.models.notification import Notification
from app.models.task import Task
from tests.conftest import auth_headers


def _task(db, project, creator, assignees):
    task = Task(project_id=project.project_id, title="리뷰 요청", created_by=creator.user_id)
    task.assignees = list(assignees)
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


def test_comment_mentioning_assignee_creates_two_notifications(client, db, sink, seed_users, seed_project):
    assignee, author = seed_users["member"], seed_users["member2"]
    task = _task(db, seed_project, seed_users["admin"], [assignee, author])

    resp = client.post(
        "/api/comments",
        json={"task_id": task.task_id, "content": "확인 부탁드려요 @mina.kim"},
        headers=auth_headers(author),
    )
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["mention_ids"] == [assignee.user_id]
    assert body["warnings"] == []

    notis = db.query(Notification).order_by(Notification.noti_id).all()
    assert [(n.recipient_id, n.noti_type) for n in notis] == [
        (assignee.user_id, "comment_added"),
        (assignee.user_id, "mention"),
    ]
    assert all(n.recipient_id != author.user_id for n in notis)
    assert len(sink.events) == 2

    history = db.query(History).one()
    assert history.action == "commented"
    assert history.entity_type == "task"
    assert history.entity_name == "리뷰 요청"


def test_explicit_mentions_are_merged_with_text_mentions(client, db, seed_users, seed_project):
    task = _task(db, seed_project, seed_users["admin"], [])
    resp = client.post(
        "/api/comments",
        json={
            "task_id": task.task_id,
            "content": "@Park 확인해 주세요",
            "mention_ids": [seed_users["admin2"].user_id, 99999],
        },
        headers=auth_headers(seed_users["member"]),
    )
    assert resp.status_code == 200
    assert sorted(resp.json()["mention_ids"]) == sorted([seed_users["admin2"].user_id, seed_users["member2"].user_id])

    mention_recipients = {n.recipient_id for n in db.query(Notification).filter(Notification.noti_type == "mention")}
    assert mention_recipients == {seed_users["admin2"].user_id, seed_users["member2"].user_id}


def test_only_author_can_edit_or_delete_comment(client, db, seed_users, seed_project):
    task = _task(db, seed_project, seed_users["admin"], [])
    author_headers = auth_headers(seed_users["member"])
    created = client.post(
        "/api/comments", json={"task_id": task.task_id, "content": "처음 내용"}, headers=author_headers
    ).json()
    comment_id = created["comment_id"]

    other = client.put(
        f"/api/comments/{comment_id}", json={"content": "남이 수정"}, headers=auth_headers(seed_users["member2"])
    )
    assert other.status_code == 403

    outsider = client.delete(f"/api/comments/{comment_id}", headers=auth_headers(seed_users["outsider"]))
    assert outsider.status_code == 404

    edited = client.put(f"/api/comments/{comment_id}", json={"content": "수정한 내용"}, headers=author_headers)
    assert edited.status_code == 200
    assert edited.json()["is_edited"] is True
    assert edited.json()["edited_at"] is not None

    listed = client.get(f"/api/comments/task/{task.task_id}", headers=auth_headers(seed_users["member2"])).json()
    assert [c["content"] for c in listed] == ["수정한 내용"]

    deleted = client.delete(f"/api/comments/{comment_id}", headers=author_headers)
    assert deleted.status_code == 200
    assert client.get(f"/api/comments/task/{task.task_id}", headers=author_headers).json() == []

    actions = [(h.entity_type, h.action) for h in db.query(History).order_by(History.history_id)]
    assert actions == [("task", "commented"), ("comment", "updated"), ("comment", "deleted")]


def test_comment_on_invisible_task_is_not_found(client, db, seed_users, seed_project):
    task = _task(db, seed_project, seed_users["admin"], [])
    resp = client.post(
        "/api/comments",
        json={"task_id": task.task_id, "content": "외부인"},
        headers=auth_headers(seed_users["outsider"]),
    )
    assert resp.status_code == 404
