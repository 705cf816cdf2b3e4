"""사용자 조회/역할 변경 API와 인증 처리를 검증하는 테스트입니다."""

from tests.conftest import auth_headers


def test_requests_without_valid_token_are_rejected(client, seed_users):
    assert client.get("/api/users/me").status_code == 401
    bad = client.get("/api/users/me", headers={"Authorization": "Bearer not-a-token"})
    assert bad.status_code == 401


def test_me_returns_current_user(client, seed_users):
    resp = client.get("/api/users/me", headers=auth_headers(seed_users["member"]))
    assert resp.status_code == 200
    assert resp.json()["full_name"] == "Mina Kim"


def test_user_list_is_admin_only(client, seed_users):
    assert client.get("/api/users", headers=auth_headers(seed_users["member"])).status_code == 403
    resp = client.get("/api/users", headers=auth_headers(seed_users["admin"]))
    assert resp.status_code == 200
    assert len(resp.json()) == len(seed_users)


def test_member_can_only_view_self(client, seed_users):
    member = seed_users["member"]
    assert client.get(f"/api/users/{member.user_id}", headers=auth_headers(member)).status_code == 200
    other = client.get(f"/api/users/{seed_users['admin'].user_id}", headers=auth_headers(member))
    assert other.status_code == 403


def test_admin_can_switch_between_member_and_admin_only(client, seed_users):
    admin_headers = auth_headers(seed_users["admin"])
    member_id = seed_users["member"].user_id

    promoted = client.patch(f"/api/users/{member_id}/role", json={"role": "admin"}, headers=admin_headers)
    assert promoted.status_code == 200
    assert promoted.json()["role"] == "admin"

    escalate = client.patch(f"/api/users/{member_id}/role", json={"role": "superadmin"}, headers=admin_headers)
    assert escalate.status_code == 403

    demote_root = client.patch(
        f"/api/users/{seed_users['root'].user_id}/role", json={"role": "member"}, headers=admin_headers
    )
    assert demote_root.status_code == 403


def test_superadmin_role_rules(client, seed_users):
    root_headers = auth_headers(seed_users["root"])
    member_id = seed_users["member"].user_id

    resp = client.patch(f"/api/users/{member_id}/role", json={"role": "superadmin"}, headers=root_headers)
    assert resp.status_code == 200

    invalid = client.patch(f"/api/users/{member_id}/role", json={"role": "owner"}, headers=root_headers)
    assert invalid.status_code == 422

    client.patch(f"/api/users/{member_id}/role", json={"role": "member"}, headers=root_headers)
    last = client.patch(
        f"/api/users/{seed_users['root'].user_id}/role", json={"role": "member"}, headers=root_headers
    )
    assert last.status_code == 400


def test_member_cannot_change_roles(client, seed_users):
    resp = client.patch(
        f"/api/users/{seed_users['member'].user_id}/role",
        json={"role": "admin"},
        headers=auth_headers(seed_users["member"]),
    )
    assert resp.status_code == 403


def test_admin_updates_profile_and_deactivates_member(client, seed_users):
    admin_headers = auth_headers(seed_users["admin"])
    member = seed_users["member"]

    resp = client.put(
        f"/api/users/{member.user_id}",
        json={"first_name": " Mina ", "last_name": "Lee", "email": "Mina.Lee@company.com"},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["full_name"] == "Mina Lee"
    assert resp.json()["email"] == "mina.lee@company.com"

    off = client.put(f"/api/users/{member.user_id}", json={"is_active": False}, headers=admin_headers)
    assert off.status_code == 200
    assert off.json()["is_active"] is False

    assert client.get("/api/users/me", headers=auth_headers(member)).status_code == 401
    active_ids = [u["user_id"] for u in client.get("/api/users", headers=admin_headers).json()]
    assert member.user_id not in active_ids
    all_ids = [
        u["user_id"]
        for u in client.get("/api/users", params={"include_inactive": True}, headers=admin_headers).json()
    ]
    assert member.user_id in all_ids

    on = client.put(f"/api/users/{member.user_id}", json={"is_active": True}, headers=admin_headers)
    assert on.json()["is_active"] is True
    assert client.get("/api/users/me", headers=auth_headers(member)).status_code == 200


def test_user_update_rules(client, seed_users):
    admin_headers = auth_headers(seed_users["admin"])
    member = seed_users["member"]

    by_member = client.put(
        f"/api/users/{seed_users['member2'].user_id}", json={"first_name": "X"}, headers=auth_headers(member)
    )
    assert by_member.status_code == 403

    on_root = client.put(f"/api/users/{seed_users['root'].user_id}", json={"is_active": False}, headers=admin_headers)
    assert on_root.status_code == 403

    duplicate = client.put(
        f"/api/users/{member.user_id}", json={"email": "admin@company.com"}, headers=admin_headers
    )
    assert duplicate.status_code == 400

    blank = client.put(f"/api/users/{member.user_id}", json={"last_name": "  "}, headers=admin_headers)
    assert blank.status_code == 400

    self_off = client.put(
        f"/api/users/{seed_users['admin'].user_id}", json={"is_active": False}, headers=admin_headers
    )
    assert self_off.status_code == 400

    missing = client.put("/api/users/99999", json={"first_name": "X"}, headers=auth_headers(seed_users["root"]))
    assert missing.status_code == 404
