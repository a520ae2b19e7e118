# config.py
import os
import logging

from dotenv import load_dotenv

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

DEV_SECRET = "dev-secret-change-me"
SESSION_BACKENDS = ("signed", "memory")

logger = logging.getLogger(__name__)


def _env_bool(name, default=False):
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def load_config(dotenv_path=None):
    """Build the application settings once from the environment.

    `.env` next to this file is loaded first; real environment variables win.
    """
    load_dotenv(dotenv_path=dotenv_path or os.path.join(BASE_DIR, ".env"))

    secret = os.environ.get("SESSION_SECRET") or os.environ.get("FLASK_SECRET")
    if not secret:
        logger.warning("SESSION_SECRET is not set; using the development secret")
        secret = DEV_SECRET

    backend = os.environ.get("SESSION_BACKEND", "signed").strip().lower()
    if backend not in SESSION_BACKENDS:
        raise ValueError(f"Unknown SESSION_BACKEND {backend!r}; expected one of {SESSION_BACKENDS}")

    config = {
        "SECRET_KEY": secret,
        "AUTH_SECRET": secret,
        "AUTH_SESSION_TTL": int(os.environ.get("SESSION_TTL_SECONDS", 60 * 60 * 12)),
        "AUTH_SESSION_BACKEND": backend,
        "AUTH_COOKIE_NAME": "sessionId",
        "AUTH_COOKIE_SECURE": _env_bool("SESSION_COOKIE_SECURE"),
        "SQLALCHEMY_DATABASE_URI": os.environ.get(
            "DATABASE_URI", f"sqlite:///{os.path.join(BASE_DIR, 'app.db')}"
        ),
        "SQLALCHEMY_TRACK_MODIFICATIONS": False,
        # relative paths resolve against the project, not the working directory
        "UPLOAD_FOLDER": os.path.join(BASE_DIR, os.environ.get("UPLOAD_FOLDER", "uploads")),
        "UPLOAD_RATE_LIMIT": os.environ.get("UPLOAD_RATE_LIMIT", "30 per minute"),
        "MAX_CONTENT_LENGTH": int(os.environ.get("MAX_CONTENT_LENGTH", 1_000_000)),
        "RATELIMIT_STORAGE_URI": os.environ.get("RATELIMIT_STORAGE_URI", "memory://"),
        "LOG_LEVEL": os.environ.get("LOG_LEVEL", "INFO").upper(),
    }
    # no default limits unless the operator asks for them
    if os.environ.get("RATELIMIT_DEFAULT"):
        config["RATELIMIT_DEFAULT"] = os.environ["RATELIMIT_DEFAULT"]
    return config
