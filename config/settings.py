"""
VaxLedger – Django Settings (Infrastructure Only)
==================================================
Django hosts the ORM-backed event store. The ledger itself is a plain
Python library; nothing here decides ledger behaviour.

Environment:
    VAXLEDGER_SECRET_KEY  Django secret key
    VAXLEDGER_DEBUG       "1"/"true" enables debug
    VAXLEDGER_DB_ENGINE   Django database backend
    VAXLEDGER_DB_NAME     Database name (sqlite file path by default)
    VAXLEDGER_LOG_LEVEL   Level for the vaxledger.* loggers (INFO)
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get(
    "VAXLEDGER_SECRET_KEY",
    "vaxledger-dev-key-replace-before-deployment",
)

DEBUG = os.environ.get("VAXLEDGER_DEBUG", "1").lower() in ("1", "true", "yes")

ALLOWED_HOSTS = []

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.contenttypes",
    # ── VaxLedger Modules ─────────────────────────────────
    "core.event_store",
]

# ── Database ──────────────────────────────────────────────────
# SQLite for development. Production DB configured via environment.
DATABASES = {
    "default": {
        "ENGINE": os.environ.get(
            "VAXLEDGER_DB_ENGINE", "django.db.backends.sqlite3"
        ),
        "NAME": os.environ.get(
            "VAXLEDGER_DB_NAME", str(BASE_DIR / "db.sqlite3")
        ),
    }
}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# ── Default Primary Key ──────────────────────────────────────
# Ledger events use UUIDs explicitly. This is a Django fallback only.
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "ledger": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "ledger",
        },
    },
    "loggers": {
        "vaxledger": {
            "handlers": ["console"],
            "level": os.environ.get("VAXLEDGER_LOG_LEVEL", "INFO"),
            "propagate": True,
        },
    },
}
