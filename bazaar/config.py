"""Application configuration for the Bazaar accounts service."""

from __future__ import annotations

import os
from typing import Dict, Type

from dotenv import load_dotenv
from sqlalchemy.engine.url import make_url

load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


def _engine_options_from_uri(uri: str) -> dict:
    url = make_url(uri)
    # Always keep pool_pre_ping, vary connect_args by dialect.
    if url.get_backend_name() == "sqlite":
        return {
            "pool_pre_ping": True,
            "connect_args": {"timeout": 30},
        }
    if url.get_backend_name() in {"postgresql", "postgres"}:
        timeout = int(os.environ.get("DB_CONNECT_TIMEOUT_SECONDS", "10"))
        statement_timeout_ms = int(os.environ.get("DB_STATEMENT_TIMEOUT_MS", "5000"))
        return {
            "pool_pre_ping": True,
            "pool_timeout": timeout,
            "connect_args": {
                "connect_timeout": timeout,
                "options": f"-c statement_timeout={statement_timeout_ms}",
            },
        }
    return {"pool_pre_ping": True}


class BaseConfig:
    """Base configuration loaded for all environments."""

    SECRET_KEY = os.environ.get("SECRET_KEY", "change-me")
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///instance/bazaar.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = _engine_options_from_uri(SQLALCHEMY_DATABASE_URI)

    # Opaque server-side session cookie (not Flask's signed session cookie); always HttpOnly.
    AUTH_COOKIE_NAME = os.environ.get("AUTH_COOKIE_NAME", "bazaar_session")
    AUTH_COOKIE_DOMAIN = os.environ.get("AUTH_COOKIE_DOMAIN") or None
    AUTH_COOKIE_SAMESITE = os.environ.get("AUTH_COOKIE_SAMESITE", "Lax")
    AUTH_COOKIE_SECURE = _env_flag("AUTH_COOKIE_SECURE", "false")
    SESSION_TTL_SECONDS = int(os.environ.get("SESSION_TTL_SECONDS", str(24 * 60 * 60)))
    SESSION_REMEMBER_TTL_SECONDS = int(
        os.environ.get("SESSION_REMEMBER_TTL_SECONDS", str(90 * 24 * 60 * 60))
    )
    ADMIN_SESSION_TTL_SECONDS = int(os.environ.get("ADMIN_SESSION_TTL_SECONDS", str(8 * 60 * 60)))
    ADMIN_SESSION_REMEMBER_TTL_SECONDS = int(
        os.environ.get("ADMIN_SESSION_REMEMBER_TTL_SECONDS", str(30 * 24 * 60 * 60))
    )
    SESSION_SLIDING_EXPIRATION = _env_flag("SESSION_SLIDING_EXPIRATION", "true")

    BCRYPT_LOG_ROUNDS = int(os.environ.get("BCRYPT_LOG_ROUNDS", "10"))
    ADMIN_MAX_LOGIN_ATTEMPTS = int(os.environ.get("ADMIN_MAX_LOGIN_ATTEMPTS", "5"))
    ADMIN_LOCKOUT_SECONDS = int(os.environ.get("ADMIN_LOCKOUT_SECONDS", str(2 * 60 * 60)))

    CORS_ORIGINS = [
        origin.strip()
        for origin in (os.environ.get("CORS_ORIGINS") or "https://bhavyabazaar.com").split(",")
        if origin.strip()
    ]

    RATELIMIT_DEFAULT = "200/hour"
    RATELIMIT_STORAGE_URI = os.environ.get("REDIS_URL", "memory://")
    RATELIMIT_ENABLED = _env_flag("RATELIMIT_ENABLED", "true")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    MAX_CONTENT_LENGTH = int(os.environ.get("MAX_CONTENT_LENGTH", str(1024 * 1024)))


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    ENV = "development"
    CORS_ORIGINS = BaseConfig.CORS_ORIGINS + ["http://localhost:3000"]


class TestingConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.environ.get("TEST_DATABASE_URL", "sqlite://")
    SQLALCHEMY_ENGINE_OPTIONS = _engine_options_from_uri(SQLALCHEMY_DATABASE_URI)
    AUTH_COOKIE_DOMAIN = None
    AUTH_COOKIE_SECURE = False
    BCRYPT_LOG_ROUNDS = 4
    RATELIMIT_ENABLED = False
    RATELIMIT_STORAGE_URI = "memory://"


class ProductionConfig(BaseConfig):
    ENV = "production"
    AUTH_COOKIE_SECURE = True
    # Frontend is served from a sibling origin; cross-site cookies need None+Secure.
    AUTH_COOKIE_SAMESITE = os.environ.get("AUTH_COOKIE_SAMESITE", "None")
    AUTH_COOKIE_DOMAIN = os.environ.get("AUTH_COOKIE_DOMAIN", ".bhavyabazaar.com")


config_by_name: Dict[str, Type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    # CI pipelines set APP_ENV=ci; map to testing defaults.
    "ci": TestingConfig,
}
