"""Flask extension singletons, bound to an app by ``init_extensions``."""

from pathlib import Path

from flask_bcrypt import Bcrypt
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import LoginManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"

# Accounts and sessions stay readable after the request's commit.
db = SQLAlchemy(session_options={"expire_on_commit": False})
migrate = Migrate()
bcrypt = Bcrypt()
cors = CORS()

# Principal lookup only; the auth cookie is resolved by a request loader and
# Flask's own signed session is never consulted.
login_manager = LoginManager()
login_manager.session_protection = None

# Limits, storage and on/off come from RATELIMIT_* config keys.
limiter = Limiter(key_func=get_remote_address)


def init_extensions(app) -> None:
    db.init_app(app)
    migrate.init_app(app, db, directory=str(MIGRATIONS_DIR), compare_type=True)
    login_manager.init_app(app)
    bcrypt.init_app(app)
    # Credentialed requests only from the storefront origins.
    cors.init_app(
        app,
        resources={r"/auth/*": {"origins": app.config.get("CORS_ORIGINS", [])}},
        supports_credentials=True,
        allow_headers=["Content-Type"],
        expose_headers=["Retry-After"],
    )
    limiter.init_app(app)
