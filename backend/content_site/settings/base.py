"""
Django settings for the content_site project.

Environment variables override the defaults below; see the HTMLCACHE_*
settings at the end of this module for the page cache configuration.
"""

import os
from pathlib import Path


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


BASE_DIR = Path(__file__).resolve().parent.parent.parent

SECRET_KEY = os.getenv("SECRET_KEY", "django-insecure-content-site-dev-key")

DEBUG = _env_bool("DEBUG", False)

ALLOWED_HOSTS = [host for host in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if host]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.sites",
    "django.contrib.staticfiles",
    "rest_framework",
    "drf_spectacular",
    "htmlcache",
    "articles",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    "htmlcache.middleware.HtmlCacheMiddleware",
]

ROOT_URLCONF = "content_site.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "content_site.wsgi.application"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.getenv("SQLITE_PATH", str(BASE_DIR / "db.sqlite3")),
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"

SITE_ID = int(os.getenv("SITE_ID", "1"))

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework.authentication.SessionAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.IsAdminUser",
    ],
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
}

SPECTACULAR_SETTINGS = {
    "TITLE": "Content Site API",
    "DESCRIPTION": "Page cache control endpoints",
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
}

# Runtime storage (cache bodies live under STORAGE_PATH/runtime/htmlcache)
STORAGE_PATH = os.getenv("STORAGE_PATH", str(BASE_DIR / "storage"))

# Logging
LOGGING_LEVEL = os.getenv("LOGGING_LEVEL", "INFO").upper()
LOG_DIR = os.getenv("LOG_DIR", str(BASE_DIR / "logs"))
os.makedirs(LOG_DIR, exist_ok=True)

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        },
        "htmlcache_file": {
            "class": "concurrent_log_handler.ConcurrentRotatingFileHandler",
            "filename": os.path.join(LOG_DIR, "htmlcache.log"),
            "mode": "a",
            "maxBytes": 1 * 1024 * 1024,
            "backupCount": 10,
            "formatter": "standard",
        },
    },
    "loggers": {
        "htmlcache": {
            "handlers": ["console", "htmlcache_file"],
            "level": LOGGING_LEVEL,
            "propagate": False,
        },
        "django": {
            "handlers": ["console"],
            "level": "INFO",
        },
    },
}

# HTML page cache
HTMLCACHE_ENABLED = _env_bool("HTMLCACHE_ENABLED", True)
HTMLCACHE_FORCE_ON = _env_bool("HTMLCACHE_FORCE_ON", False)
HTMLCACHE_DURATION = int(os.getenv("HTMLCACHE_DURATION", "3600"))
HTMLCACHE_MAINTENANCE_MODE = _env_bool("MAINTENANCE_MODE", False)
HTMLCACHE_DIRECTORY = os.getenv("HTMLCACHE_DIRECTORY") or None
HTMLCACHE_ADMIN_PREFIXES = ("admin",)
HTMLCACHE_ACTION_PREFIXES = ("actions", "api")
HTMLCACHE_TRACKED_MODELS = ("articles.Article",)
