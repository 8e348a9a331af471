"""Notes API tests: anonymous guests, signed-in users and login-time claiming.

- GET /api/notes - list (scoped to current owner)
- POST /api/notes - create
- PUT /api/notes/by-slug/<slug> - upsert
- GET/PATCH/DELETE /api/notes/<id>
- POST /api/notes/<id>/release
- GET /api/notes/<id>/owner
"""

from __future__ import annotations

import pytest
from flask_jwt_extended import create_access_token

pytestmark = pytest.mark.integration

from guestkit.core.auth.password import hash_password
from guestkit.core.guests.models import GuestIdentity
from guestkit.core.users.models import User
from guestkit.domains.notes.models import Note
from guestkit.extensions import db

COOKIE = "guest_token"


# ==================== Fixtures ====================


@pytest.fixture
def user(app):
    user = User(email="notes@example.com", password_hash=hash_password("secret123"))
    db.session.add(user)
    db.session.commit()
    return user


def _auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(identity=str(user.id))}"}


def _create(client, title: str, **kwargs):
    return client.post("/api/notes", json={"title": title, "body": "text"}, **kwargs)


# ==================== Guest flows ====================


def test_guest_creates_and_lists_notes(app, client):
    resp = _create(client, "first")
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["note"]["owner_kind"] == "guest"

    token = client.get_cookie(COOKIE).value
    guest = GuestIdentity.query.filter_by(token=token).one()

    _create(client, "second")
    listed = client.get("/api/notes").get_json()
    assert listed["total"] == 2
    assert {n["title"] for n in listed["items"]} == {"first", "second"}
    # Same cookie, same guest across requests.
    assert GuestIdentity.query.count() == 1
    assert all(n.guest_id == guest.id for n in Note.query.all())


def test_guest_cookie_is_renewed_with_lifetime(app, client):
    client.get("/api/identity")
    resp = client.get("/api/identity")
    set_cookie = resp.headers.get("Set-Cookie", "")
    assert set_cookie.startswith(f"{COOKIE}=")
    assert "Max-Age=31536000" in set_cookie
    assert "HttpOnly" in set_cookie


def test_other_visitor_sees_nothing(app, client):
    created = _create(client, "private").get_json()["note"]

    stranger = app.test_client()
    listed = stranger.get("/api/notes").get_json()
    assert listed["items"] == []
    assert stranger.get(f"/api/notes/{created['id']}").status_code == 404
    assert stranger.delete(f"/api/notes/{created['id']}").status_code == 404
    assert GuestIdentity.query.count() == 2


def test_guest_updates_releases_and_deletes(app, client):
    note_id = _create(client, "draft").get_json()["note"]["id"]

    patched = client.patch(f"/api/notes/{note_id}", json={"title": "final"})
    assert patched.get_json()["note"]["title"] == "final"

    owner = client.get(f"/api/notes/{note_id}/owner").get_json()
    guest = GuestIdentity.query.filter_by(token=client.get_cookie(COOKIE).value).one()
    assert owner == {"ok": True, "kind": "guest", "guest_id": guest.id}

    released = client.post(f"/api/notes/{note_id}/release")
    assert released.get_json()["note"]["owner_kind"] == "none"
    # Released notes belong to nobody, not even their former guest.
    assert client.get(f"/api/notes/{note_id}").status_code == 404
    assert client.delete(f"/api/notes/{note_id}").status_code == 404

    other_id = _create(client, "gone").get_json()["note"]["id"]
    assert client.delete(f"/api/notes/{other_id}").status_code == 200
    assert db.session.get(Note, other_id) is None


def test_upsert_by_slug(app, client):
    first = client.put("/api/notes/by-slug/groceries", json={"title": "Milk"}).get_json()["note"]
    second = client.put("/api/notes/by-slug/groceries", json={"title": "Milk, eggs"}).get_json()["note"]
    assert first["id"] == second["id"]
    assert second["title"] == "Milk, eggs"
    assert second["slug"] == "groceries"


def test_create_validation_error(app, client):
    resp = client.post("/api/notes", json={"title": ""})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "validation_error"


# ==================== Signed-in flows ====================


def test_user_notes_are_scoped_by_principal(app, client, user):
    headers = _auth_headers(user)
    resp = _create(client, "mine", headers=headers)
    assert resp.get_json()["note"]["owner_kind"] == "user"
    assert client.get_cookie(COOKIE) is None
    assert GuestIdentity.query.count() == 0

    anonymous = app.test_client()
    assert anonymous.get("/api/notes").get_json()["items"] == []
    assert client.get("/api/notes", headers=headers).get_json()["total"] == 1


def test_user_note_owner_endpoint(app, client, user):
    headers = _auth_headers(user)
    note_id = _create(client, "mine", headers=headers).get_json()["note"]["id"]
    owner = client.get(f"/api/notes/{note_id}/owner", headers=headers).get_json()
    assert owner == {"ok": True, "kind": "user", "user_id": user.id}


def test_invalid_bearer_token_is_treated_as_guest(app, client):
    resp = _create(client, "anon", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 201
    assert resp.get_json()["note"]["owner_kind"] == "guest"


def test_identity_endpoint(app, client, user):
    guest_view = client.get("/api/identity").get_json()
    assert guest_view["kind"] == "guest"

    user_view = client.get("/api/identity", headers=_auth_headers(user)).get_json()
    assert user_view == {"ok": True, "kind": "user", "user_id": user.id}


def test_end_guest_session(app, client):
    client.get("/api/identity")
    assert client.delete("/api/identity/guest").get_json()["deleted"] is True
    assert client.get_cookie(COOKIE) is None
    assert GuestIdentity.query.count() == 0


def test_ended_guest_notes_are_not_inherited_by_next_visitor(app, client):
    note_id = _create(client, "private").get_json()["note"]["id"]
    old_guest_id = db.session.get(Note, note_id).guest_id
    assert client.delete("/api/identity/guest").get_json()["deleted"] is True

    newcomer = app.test_client()
    assert newcomer.get("/api/notes").get_json()["items"] == []
    assert newcomer.get(f"/api/notes/{note_id}").status_code == 404

    db.session.expire_all()
    assert db.session.get(Note, note_id).guest_id is None
    new_guest = GuestIdentity.query.filter_by(token=newcomer.get_cookie(COOKIE).value).one()
    assert new_guest.id != old_guest_id


# ==================== Login claims guest notes ====================


def test_login_claims_guest_notes_and_ends_guest(app, client, user):
    _create(client, "before login")
    _create(client, "also before login")
    assert GuestIdentity.query.count() == 1

    resp = client.post("/auth/login", json={"email": "notes@example.com", "password": "secret123"})
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["claimed_guest_resources"] is True
    assert body["access_token"]

    db.session.expire_all()
    assert GuestIdentity.query.count() == 0
    assert client.get_cookie(COOKIE) is None
    notes = Note.query.all()
    assert len(notes) == 2
    assert all(n.user_id == user.id and n.guest_id is None for n in notes)

    headers = {"Authorization": f"Bearer {body['access_token']}"}
    assert client.get("/api/notes", headers=headers).get_json()["total"] == 2


def test_login_without_guest_session(app, client, user):
    resp = client.post("/auth/login", json={"email": "notes@example.com", "password": "secret123"})
    assert resp.status_code == 200
    assert resp.get_json()["claimed_guest_resources"] is False
    assert GuestIdentity.query.count() == 0


def test_login_rejects_bad_password(app, client, user):
    _create(client, "stays with guest")
    resp = client.post("/auth/login", json={"email": "notes@example.com", "password": "wrong-pass"})
    assert resp.status_code == 401
    db.session.expire_all()
    assert Note.query.one().guest_id is not None
