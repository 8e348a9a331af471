import os
import sys
import tempfile
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config as AlembicConfig

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# TestingConfig reads the URL at import time, so this must precede guestkit imports.
_TEST_DB_DIR = tempfile.mkdtemp(prefix="guestkit-tests-")
os.environ.setdefault("TEST_DATABASE_URL", f"sqlite:///{_TEST_DB_DIR}/test.db")

from guestkit import create_app
from guestkit.core.auth.context import load_user
from guestkit.core.guests.config import GuestConfig
from guestkit.core.guests.models import GuestIdentity
from guestkit.core.guests.services import GuestIdentityManager
from guestkit.core.ownership.resolver import OwnershipResolver
from guestkit.core.users.models import User
from guestkit.domains.notes.models import Note
from guestkit.extensions import db

COOKIE_NAME = "guest_token"


# ==================== Pytest Markers ====================
def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (database, API)")


def _alembic_config() -> AlembicConfig:
    cfg = AlembicConfig(str(ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(ROOT / "guestkit" / "migrations"))
    cfg.set_main_option("guestkit_env", "testing")
    cfg.set_main_option("sqlalchemy.url", os.environ["TEST_DATABASE_URL"])
    return cfg


@pytest.fixture(scope="session", autouse=True)
def migrated_db():
    """Apply migrations once per session to mirror production schema."""
    cfg = _alembic_config()
    command.upgrade(cfg, "head")
    yield
    try:
        command.downgrade(cfg, "base")
    except Exception:
        # Downgrade is optional for local/CI runs; ignore failures to avoid hiding test results.
        pass


@pytest.fixture()
def app(migrated_db):
    """Per-test app; every table is emptied afterwards."""
    app = create_app("testing")
    ctx = app.app_context()
    ctx.push()
    try:
        yield app
    finally:
        db.session.rollback()
        for table in reversed(db.metadata.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        db.session.remove()
        ctx.pop()


@pytest.fixture()
def client(app):
    return app.test_client()


class StubAuthContext:
    """Auth context whose principal is set directly by the test."""

    def __init__(self, principal=None):
        self.principal = principal

    def current_principal(self, request=None):
        return self.principal

    def load_principal(self, principal_id):
        return load_user(principal_id)


@pytest.fixture()
def auth():
    return StubAuthContext()


@pytest.fixture()
def manager(app, auth):
    return GuestIdentityManager(GuestConfig(cookie_name=COOKIE_NAME), auth=auth)


@pytest.fixture()
def resolver(manager):
    return OwnershipResolver(Note, guests=manager)


@pytest.fixture()
def make_user(app):
    counter = {"n": 0}

    def _make(email: str | None = None) -> User:
        counter["n"] += 1
        user = User(email=email or f"user{counter['n']}@example.com", password_hash="x")
        db.session.add(user)
        db.session.commit()
        return user

    return _make


@pytest.fixture()
def make_guest(app):
    def _make(token: str, **fields) -> GuestIdentity:
        guest = GuestIdentity(token=token, **fields)
        db.session.add(guest)
        db.session.commit()
        return guest

    return _make


@pytest.fixture()
def request_ctx(app):
    """Factory for request contexts carrying the guest cookie (or none)."""

    def _ctx(token: str | None = None, **kwargs):
        headers = dict(kwargs.pop("headers", {}) or {})
        if token:
            headers["Cookie"] = f"{COOKIE_NAME}={token}"
        return app.test_request_context("/", headers=headers, **kwargs)

    return _ctx
