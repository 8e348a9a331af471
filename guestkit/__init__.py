"""guestkit application factory and bootstrap."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from flask import Flask

from guestkit.config import config_by_name
from guestkit.extensions import init_extensions, login_manager


def create_app(config_name: Optional[str] = None) -> Flask:
    """Create and configure the guestkit Flask application."""
    env_name = (config_name or os.environ.get("APP_ENV") or "development").lower()
    project_root = Path(__file__).resolve().parent.parent
    instance_root = project_root / "instance"

    app = Flask(__name__, instance_path=str(instance_root), instance_relative_config=True)
    config_cls = config_by_name.get(env_name, config_by_name["development"])
    app.config.from_object(config_cls)

    instance_root.mkdir(parents=True, exist_ok=True)

    # Normalize sqlite path to absolute to avoid "unable to open database file"
    db_uri = app.config.get("SQLALCHEMY_DATABASE_URI")
    if db_uri and db_uri.startswith("sqlite:///"):
        db_path = db_uri.replace("sqlite:///", "", 1)
        abs_path = project_root / db_path
        abs_path.parent.mkdir(parents=True, exist_ok=True)
        app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{abs_path}"

    init_extensions(app)
    _register_blueprints(app)
    _register_error_handlers(app)
    _register_auth_handlers(app)

    @app.get("/health")
    def health():
        return {"ok": True}, 200

    from guestkit.scripts.reclaim_guests import register_commands

    register_commands(app)

    return app


def _register_blueprints(app: Flask) -> None:
    """Lazy import and register all controllers."""
    from guestkit.core.auth.controllers import auth_bp  # local import to avoid circulars
    from guestkit.core.guests.controllers import identity_api_bp
    from guestkit.domains.notes.controllers import notes_api_bp

    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(identity_api_bp, url_prefix="/api/identity")
    app.register_blueprint(notes_api_bp, url_prefix="/api/notes")


def _register_error_handlers(app: Flask) -> None:
    """Basic JSON error responses."""
    from werkzeug.exceptions import HTTPException

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        return {"ok": False, "error": exc.description}, exc.code

    @app.errorhandler(Exception)
    def _generic_error(exc: Exception):
        app.logger.exception("Unhandled error: %s", exc)
        # In debug/testing, surface the exception message to speed up diagnosis
        if app.debug or app.testing:
            return {"ok": False, "error": str(exc)}, 500
        return {"ok": False, "error": "unexpected_error"}, 500


def _register_auth_handlers(app: Flask) -> None:
    """Session-based principal loading for LoginManagerAuthContext."""

    @login_manager.user_loader
    def _load_user(user_id: str):
        from guestkit.core.auth.context import load_user

        return load_user(user_id) if user_id else None
