import uuid

import pytest
from sqlmodel import Session

from prompt_gallery.models.user import User

API = "/api/v1"


def register(client, username: str) -> dict:
    response = client.post(
        f"{API}/auth/register",
        json={
            "username": username,
            "email": f"{username}@example.com",
            "password": "password123",
            "full_name": username.title(),
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def alice_token(client):
    return register(client, "alice")["token"]


@pytest.fixture
def bob_token(client):
    return register(client, "bob")["token"]


@pytest.fixture
def admin_token(client, engine):
    body = register(client, "root")
    with Session(engine) as session:
        user = session.get(User, uuid.UUID(body["user"]["id"]))
        user.role = "admin"
        session.add(user)
        session.commit()
    response = client.post(
        f"{API}/auth/login", json={"email": "root@example.com", "password": "password123"}
    )
    return response.json()["token"]


def upload_gif(client, token, tags: str | None = None):
    data = {
        "project_title": "Looping tide",
        "prompt": "ocean waves, seamless loop",
        "creator_credit": "alice",
    }
    if tags is not None:
        data["tags"] = tags
    return client.post(
        f"{API}/gifs/upload",
        headers=bearer(token),
        files={"file": ("tide.gif", b"GIF89a-bytes", "image/gif")},
        data=data,
    )


def test_root_health(client):
    assert client.get("/").json()["status"] == "ok"


def test_register_login_and_profile(client):
    register(client, "alice")

    login = client.post(
        f"{API}/auth/login", json={"email": "alice@example.com", "password": "password123"}
    )
    assert login.status_code == 200
    token = login.json()["token"]

    profile = client.get(f"{API}/profile", headers=bearer(token))
    assert profile.status_code == 200
    assert profile.json()["username"] == "alice"
    assert "password_hash" not in profile.json()

    updated = client.put(
        f"{API}/profile/interests", headers=bearer(token), json={"interests": '["anime"]'}
    )
    assert updated.status_code == 200
    assert client.get(f"{API}/profile", headers=bearer(token)).json()["interests"] == '["anime"]'


def test_duplicate_registration_conflicts(client):
    register(client, "alice")
    response = client.post(
        f"{API}/auth/register",
        json={"username": "alice", "email": "other@example.com", "password": "password123"},
    )
    assert response.status_code == 409
    assert response.json() == {"detail": "Username already exists"}


def test_protected_route_requires_valid_token(client):
    assert client.get(f"{API}/profile").status_code == 401
    assert client.get(f"{API}/profile", headers=bearer("not-a-jwt")).status_code == 401


def test_deactivated_user_is_forbidden(client, alice_token, admin_token):
    alice_id = client.get(f"{API}/profile", headers=bearer(alice_token)).json()["id"]

    response = client.put(
        f"{API}/admin/users/{alice_id}/status",
        headers=bearer(admin_token),
        json={"is_active": False},
    )
    assert response.status_code == 200

    assert client.get(f"{API}/profile", headers=bearer(alice_token)).status_code == 403


def test_otp_signup_flow(client, email_sender):
    email = "fresh@example.com"

    sent = client.post(f"{API}/auth/send-otp", json={"email": email, "purpose": "signup"})
    assert sent.status_code == 200
    code = email_sender.last_code(email)

    signup = {
        "username": "fresh",
        "email": email,
        "password": "password123",
        "full_name": "Fresh User",
        "otp": code,
    }
    # Not verified yet
    assert client.post(f"{API}/auth/signup-with-otp", json=signup).status_code == 401

    verified = client.post(f"{API}/auth/verify-otp", json={"email": email, "otp": code})
    assert verified.status_code == 200

    created = client.post(f"{API}/auth/signup-with-otp", json=signup)
    assert created.status_code == 201
    assert created.json()["user"]["email_verified"] is True


def test_send_otp_email_failure_is_bad_gateway(client, email_sender):
    email_sender.fail = True
    response = client.post(
        f"{API}/auth/send-otp", json={"email": "fresh@example.com", "purpose": "signup"}
    )
    assert response.status_code == 502


def test_verify_otp_rejects_malformed_code(client):
    response = client.post(
        f"{API}/auth/verify-otp", json={"email": "fresh@example.com", "otp": "12ab"}
    )
    assert response.status_code == 422


def test_gif_moderation_flow(client, alice_token, bob_token, admin_token, stores):
    created = upload_gif(client, alice_token)
    assert created.status_code == 201, created.text
    body = created.json()
    assert body["status"] == "pending"
    assert body["is_published"] is False
    assert body["media_url"].startswith(stores["gif"].uploads[0])
    gif_id = body["id"]

    publish = client.put(f"{API}/admin/gifs/{gif_id}/publish", headers=bearer(admin_token))
    assert publish.status_code == 400

    forbidden = client.put(f"{API}/admin/gifs/{gif_id}/approve", headers=bearer(alice_token))
    assert forbidden.status_code == 403

    approve = client.put(f"{API}/admin/gifs/{gif_id}/approve", headers=bearer(admin_token))
    assert approve.json()["status"] == "approved"

    publish = client.put(f"{API}/admin/gifs/{gif_id}/publish", headers=bearer(admin_token))
    assert publish.status_code == 200
    assert publish.json()["is_published"] is True

    listed = client.get(f"{API}/gifs", params={"status": "approved"})
    assert [item["id"] for item in listed.json()] == [gif_id]

    denied = client.delete(f"{API}/gifs/{gif_id}", headers=bearer(bob_token))
    assert denied.status_code == 403

    deleted = client.delete(f"{API}/gifs/{gif_id}", headers=bearer(admin_token))
    assert deleted.status_code == 200
    assert stores["gif"].deletes == [stores["gif"].uploads[0]]
    assert client.get(f"{API}/gifs/{gif_id}").status_code == 404


def test_reject_with_reason(client, alice_token, admin_token):
    gif_id = upload_gif(client, alice_token).json()["id"]

    rejected = client.put(
        f"{API}/admin/gifs/{gif_id}/reject",
        headers=bearer(admin_token),
        json={"reason": "watermark"},
    )
    assert rejected.status_code == 200
    assert rejected.json()["rejection_reason"] == "watermark"

    no_body = client.put(f"{API}/admin/gifs/{gif_id}/reject", headers=bearer(admin_token))
    assert no_body.status_code == 200


def test_upload_requires_auth(client):
    response = client.post(
        f"{API}/images/upload",
        files={"file": ("a.png", b"png", "image/png")},
        data={"project_title": "t", "prompt": "p", "creator_credit": "c"},
    )
    assert response.status_code == 401


def test_upload_wrong_type_is_bad_request(client, alice_token):
    response = client.post(
        f"{API}/videos/upload",
        headers=bearer(alice_token),
        files={"file": ("a.png", b"png", "image/png")},
        data={"project_title": "t", "prompt": "p", "creator_credit": "c"},
    )
    assert response.status_code == 400


def test_upload_with_tags(client, alice_token, admin_token):
    tag = client.post(
        f"{API}/admin/tags",
        headers=bearer(admin_token),
        json={"name": "seascape", "category": "Theme"},
    )
    assert tag.status_code == 201
    tag_id = tag.json()["id"]

    created = upload_gif(client, alice_token, tags=f"{tag_id}, ")
    assert [t["name"] for t in created.json()["tags"]] == ["seascape"]

    assert upload_gif(client, alice_token, tags="not-a-uuid").status_code == 400


def test_tag_admin_routes_are_guarded(client, alice_token):
    response = client.post(
        f"{API}/admin/tags",
        headers=bearer(alice_token),
        json={"name": "seascape", "category": "Theme"},
    )
    assert response.status_code == 403


def test_tag_search_without_query(client):
    assert client.get(f"{API}/tags/search").status_code == 400


def test_admin_cannot_delete_self(client, admin_token):
    admin_id = client.get(f"{API}/profile", headers=bearer(admin_token)).json()["id"]
    response = client.delete(f"{API}/admin/users/{admin_id}", headers=bearer(admin_token))
    assert response.status_code == 403


def test_admin_cannot_delete_user_who_owns_uploads(client, alice_token, admin_token):
    alice_id = client.get(f"{API}/profile", headers=bearer(alice_token)).json()["id"]
    assert upload_gif(client, alice_token).status_code == 201

    response = client.delete(f"{API}/admin/users/{alice_id}", headers=bearer(admin_token))

    assert response.status_code == 409
    assert response.json() == {"detail": "User still owns submissions"}
    assert client.get(f"{API}/profile", headers=bearer(alice_token)).status_code == 200
