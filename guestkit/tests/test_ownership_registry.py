"""Ownership registry and login-time claiming of guest resources."""

from __future__ import annotations

import pytest

pytestmark = pytest.mark.integration

from guestkit.core.guests.models import GuestIdentity
from guestkit.core.ownership.registry import OwnershipRegistry, claim_guest_resources, ownership_registry
from guestkit.domains.notes.models import Note
from guestkit.domains.notes.services import note_ownership
from guestkit.extensions import db


def test_registry_lookup_by_table_name(resolver):
    registry = OwnershipRegistry()
    assert registry.get("note") is None

    assert registry.register(resolver) is resolver
    assert registry.get("note") is resolver
    assert list(registry.list()) == [resolver]


def test_note_resolver_is_registered_globally():
    assert ownership_registry.get("note") is note_ownership


def test_claim_is_a_noop_for_anonymous_requests(resolver, manager, request_ctx, make_guest):
    guest = make_guest("abc123")
    db.session.add(Note(title="kept", body="", guest_id=guest.id))
    db.session.commit()

    with request_ctx("abc123") as ctx:
        assert claim_guest_resources(ctx.request, resolvers=[resolver], guests=manager) is False

    assert db.session.query(GuestIdentity).count() == 1
    assert db.session.query(Note).one().guest_id == guest.id


def test_claim_moves_rows_and_ends_guest(resolver, manager, auth, request_ctx, make_user, make_guest):
    guest = make_guest("abc123")
    db.session.add_all([Note(title=f"n{i}", body="", guest_id=guest.id) for i in range(2)])
    db.session.commit()
    user = make_user()

    auth.principal = user
    with request_ctx("abc123") as ctx:
        assert claim_guest_resources(ctx.request, resolvers=[resolver], guests=manager) is True

    db.session.expire_all()
    assert db.session.query(GuestIdentity).count() == 0
    assert {(n.user_id, n.guest_id) for n in db.session.query(Note).all()} == {(user.id, None)}


def test_claim_without_guest_rows_still_ends_guest(resolver, manager, auth, request_ctx, make_user, make_guest):
    make_guest("abc123")
    auth.principal = make_user()

    with request_ctx("abc123") as ctx:
        assert claim_guest_resources(ctx.request, resolvers=[resolver], guests=manager) is False

    assert db.session.query(GuestIdentity).count() == 0
