"""Alembic environment for the Bazaar accounts service.

Runs under ``flask db ...`` (the CLI has already pushed an app context) or
under plain ``alembic -c bazaar/migrations/alembic.ini ...``, in which case
the app is built from ``APP_ENV``.
"""

from __future__ import annotations

import sys
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from flask import current_app, has_app_context
from sqlalchemy import engine_from_config, pool

sys.path.append(str(Path(__file__).resolve().parents[2]))

from bazaar.extensions import db

config = context.config

if config.config_file_name:
    try:
        fileConfig(config.config_file_name)
    except KeyError:
        # ini without logging sections
        pass


def _flask_app():
    if has_app_context():
        return current_app._get_current_object()
    from bazaar import create_app

    return create_app()


app = _flask_app()

# Model modules register their tables on db.metadata.
with app.app_context():
    from bazaar.core.accounts import models as _account_models  # noqa: F401
    from bazaar.core.auth import models as _session_models  # noqa: F401
    from bazaar.core.events import event_models as _event_models  # noqa: F401

target_metadata = db.metadata
database_url = app.config["SQLALCHEMY_DATABASE_URI"]


def _configure_args(dialect_name: str) -> dict:
    migrate_ext = app.extensions.get("migrate")
    args = dict(migrate_ext.configure_args) if migrate_ext else {}
    args.setdefault("compare_type", True)
    # SQLite cannot ALTER most constraints in place.
    args["render_as_batch"] = dialect_name == "sqlite"
    return args


def run_migrations_offline() -> None:
    context.configure(
        url=database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_args(database_url.split(":", 1)[0].split("+", 1)[0]),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    section = config.get_section(config.config_ini_section) or {}
    section["sqlalchemy.url"] = database_url
    connectable = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            **_configure_args(connection.dialect.name),
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
