"""Tests for the reclaim-guests CLI command."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

pytestmark = pytest.mark.integration

from guestkit.core.guests.models import GuestIdentity
from guestkit.extensions import db


def test_reclaim_guests_command_deletes_stale(app, make_guest):
    make_guest("stale", last_seen_at=datetime.utcnow() - timedelta(hours=3))
    make_guest("active", last_seen_at=datetime.utcnow())

    runner = app.test_cli_runner()
    result = runner.invoke(args=["reclaim-guests", "--stale-after-minutes", "60"])

    assert result.exit_code == 0, result.output
    assert "deleted=1" in result.output
    assert [g.token for g in db.session.query(GuestIdentity).all()] == ["active"]


def test_reclaim_guests_command_default_threshold(app, make_guest):
    make_guest("recent", last_seen_at=datetime.utcnow() - timedelta(days=30))

    result = app.test_cli_runner().invoke(args=["reclaim-guests"])

    assert result.exit_code == 0, result.output
    assert "deleted=0" in result.output
    assert "stale_after_minutes=525600" in result.output


def test_reclaim_guests_command_rejects_negative(app):
    result = app.test_cli_runner().invoke(args=["reclaim-guests", "--stale-after-minutes", "-5"])
    assert result.exit_code != 0
