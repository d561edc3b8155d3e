"""Bazaar accounts application factory and bootstrap."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from flask import Flask, g, request

from bazaar.config import config_by_name
from bazaar.core.errors import AuthenticationError, BazaarError, TransientError
from bazaar.core.events.event_bus import event_bus
from bazaar.extensions import db, init_extensions, login_manager


def create_app(config_name: Optional[str] = None) -> Flask:
    """Create and configure the Bazaar accounts Flask application."""
    env_name = (config_name or os.environ.get("APP_ENV") or "development").lower()
    project_root = Path(__file__).resolve().parent.parent
    instance_root = project_root / "instance"

    app = Flask(__name__, instance_path=str(instance_root), instance_relative_config=True)
    config_cls = config_by_name.get(env_name, config_by_name["development"])
    app.config.from_object(config_cls)

    # Normalize sqlite path to absolute to avoid "unable to open database file"
    db_uri = app.config.get("SQLALCHEMY_DATABASE_URI") or ""
    if db_uri.startswith("sqlite:///") and not db_uri.startswith("sqlite:////"):
        abs_path = project_root / db_uri.replace("sqlite:///", "", 1)
        abs_path.parent.mkdir(parents=True, exist_ok=True)
        app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{abs_path}"

    app.logger.setLevel(getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO))

    init_extensions(app)
    _register_blueprints(app)
    _register_error_handlers(app)
    _register_auth_handlers(app)

    app.extensions["event_bus"] = event_bus

    @app.get("/health")
    def health():
        return {"success": True, "status": "ok"}, 200

    from bazaar.scripts.commands import register_commands

    register_commands(app)

    return app


def _register_blueprints(app: Flask) -> None:
    """Lazy import and register all controllers."""
    from bazaar.core.auth.admin_controllers import admin_bp
    from bazaar.core.auth.controllers import auth_bp  # local import to avoid circulars

    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(admin_bp, url_prefix="/auth")


def _register_error_handlers(app: Flask) -> None:
    """JSON error envelopes: {"success": false, "error": ..., "message": ...}."""
    from pydantic import ValidationError as PydanticValidationError
    from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
    from sqlalchemy.exc import TimeoutError as PoolTimeoutError
    from werkzeug.exceptions import HTTPException

    from bazaar.core.errors import ValidationError
    from bazaar.core.utils.validation import first_error_message, jsonable_errors

    def _rollback() -> None:
        try:
            db.session.rollback()
        except Exception:  # connection may already be gone
            app.logger.debug("rollback after error failed", exc_info=True)

    @app.errorhandler(BazaarError)
    def _bazaar_error(exc: BazaarError):
        _rollback()
        return exc.to_dict(), exc.status_code

    @app.errorhandler(PydanticValidationError)
    def _pydantic_error(exc: PydanticValidationError):
        errors = jsonable_errors(exc)
        err = ValidationError(first_error_message(errors), details=errors)
        return err.to_dict(), err.status_code

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        return {
            "success": False,
            "error": (exc.name or "error").lower().replace(" ", "_"),
            "message": exc.description,
        }, exc.code

    @app.errorhandler(OperationalError)
    @app.errorhandler(PoolTimeoutError)
    def _storage_unavailable(exc: Exception):
        _rollback()
        app.logger.error("storage unavailable: %s", exc.__class__.__name__)
        err = TransientError()
        return err.to_dict(), err.status_code

    @app.errorhandler(DBAPIError)
    def _dbapi_error(exc: DBAPIError):
        if isinstance(exc, IntegrityError):
            return _generic_error(exc)
        _rollback()
        app.logger.exception("database error")
        err = TransientError()
        return err.to_dict(), err.status_code

    @app.errorhandler(Exception)
    def _generic_error(exc: Exception):
        _rollback()
        app.logger.exception("Unhandled error: %s", exc)
        # In debug/testing, surface the exception message to speed up diagnosis
        message = str(exc) if (app.debug or app.testing) else "Something went wrong"
        return {"success": False, "error": "unexpected_error", "message": message}, 500


def _register_auth_handlers(app: Flask) -> None:
    """Resolve the session cookie into ``current_user`` once per request."""
    from bazaar.core.auth.constants import SESSION_STATE_ACTIVE
    from bazaar.core.auth.session_services import (
        IssuedSession,
        SessionManager,
        clear_session_cookie,
        read_session_cookie,
        set_session_cookie,
    )

    @login_manager.request_loader
    def load_account_from_cookie(req):
        token = read_session_cookie(req)
        if not token:
            return None
        resolution = SessionManager().resolve_session(token)
        if not resolution.is_active:
            g.auth_cookie_invalid = True
            return None
        g.auth_session = resolution.session
        g.auth_role = resolution.role
        g.auth_cookie_slid = bool(app.config.get("SESSION_SLIDING_EXPIRATION", True))
        return resolution.account

    @login_manager.unauthorized_handler
    def unauthorized():
        err = AuthenticationError()
        return err.to_dict(), err.status_code

    @app.after_request
    def drop_dead_cookie(response):
        # A cookie that resolved to nothing is cleared unless this request issued a new one.
        if g.get("auth_cookie_invalid") and not g.get("auth_cookie_issued") and read_session_cookie(request):
            clear_session_cookie(response)
        return response

    @app.after_request
    def extend_slid_cookie(response):
        # The browser copy of a slid session gets the new expiry too.
        session = g.get("auth_session")
        if not g.get("auth_cookie_slid") or session is None or session.lifecycle_state != SESSION_STATE_ACTIVE:
            return response
        token = read_session_cookie(request)
        cookie_name = app.config["AUTH_COOKIE_NAME"]
        already_set = any(h.startswith(f"{cookie_name}=") for h in response.headers.getlist("Set-Cookie"))
        if token and not already_set:
            set_session_cookie(response, IssuedSession(token=token, session=session))
        return response
