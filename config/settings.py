"""
Tailorbook – Django Settings (Infrastructure Only)
====================================================
Django serves as the framework container for Tailorbook.
The engines never read settings directly; shop configuration is handed
to them as a ShopRules value built from ``TAILORBOOK`` below.
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
# BASE_DIR = project root (where config/ lives)
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get("TAILORBOOK_SECRET_KEY", "tailorbook-dev-key-replace-before-deployment")

DEBUG = os.environ.get("TAILORBOOK_DEBUG", "1") == "1"

ALLOWED_HOSTS = ["localhost", "127.0.0.1", "testserver"]

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.contenttypes",
    # ── Tailorbook Modules ────────────────────────────────
    "core.store",
]

# ── Middleware ────────────────────────────────────────────────
MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

# ── URL & WSGI ────────────────────────────────────────────────
ROOT_URLCONF = "config.urls"

# ── Database ──────────────────────────────────────────────────
# SQLite for development. Production DB configured separately.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }
}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── Shop Rules ────────────────────────────────────────────────
# Read once by core.config.rules.load_shop_rules().
TAILORBOOK = {
    "app_id": os.environ.get("TAILORBOOK_APP_ID", "default-theron-app"),
    "bill_prefix": "TH",
    "currency": "INR",
    "default_payment_method": "Cash",
    "max_upload_bytes": 5 * 1024 * 1024,
    "time_zone": os.environ.get("TAILORBOOK_TIME_ZONE", "Asia/Kolkata"),
}

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "plain"},
    },
    "loggers": {
        "tailorbook": {
            "handlers": ["console"],
            "level": os.environ.get("TAILORBOOK_LOG_LEVEL", "INFO"),
            "propagate": True,
        },
    },
}
