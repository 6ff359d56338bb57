import os
from pathlib import Path

from django.core.exceptions import ImproperlyConfigured

BASE_DIR = Path(__file__).resolve().parent.parent.parent

_UNSET = object()


def get_env(name, default=_UNSET, required=False, cast=None):
    """
    Read a setting from the environment.
    Missing required values fail at import time so misconfiguration shows up on boot.
    """
    value = os.environ.get(name)
    if value is None or value == "":
        if required:
            raise ImproperlyConfigured(f"Environment variable {name} is required.")
        if default is _UNSET:
            return None
        value = default
    if cast is bool and isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    if cast is not None and value is not None:
        return cast(value)
    return value


SECRET_KEY = get_env("SECRET_KEY", "insecure-base-secret-key")

DEBUG = get_env("DEBUG", False, cast=bool)

ALLOWED_HOSTS = [host for host in get_env("ALLOWED_HOSTS", "").split(",") if host]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "sugih",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "whitenoise.middleware.WhiteNoiseMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "config.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "config.wsgi.application"

DATABASE_ENGINE = get_env("DATABASE_ENGINE", "sqlite")

if DATABASE_ENGINE == "postgres":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": get_env("DATABASE_NAME", "sugih"),
            "USER": get_env("DATABASE_USER", "sugih"),
            "PASSWORD": get_env("DATABASE_PASSWORD", ""),
            "HOST": get_env("DATABASE_HOST", "localhost"),
            "PORT": get_env("DATABASE_PORT", 5432, cast=int),
            "CONN_MAX_AGE": get_env("DATABASE_CONN_MAX_AGE", 60, cast=int),
            "ATOMIC_REQUESTS": False,
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": get_env("DATABASE_NAME", str(BASE_DIR / "db.sqlite3")),
        }
    }

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{asctime} {levelname} {name} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": get_env("LOG_LEVEL", "INFO"),
    },
    "loggers": {
        "sugih": {
            "handlers": ["console"],
            "level": get_env("SUGIH_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
    },
}

# Ledger and budget engine knobs.
SUGIH_BULK_MAX_IDS = get_env("SUGIH_BULK_MAX_IDS", 100, cast=int)
SUGIH_SAVINGS_BUDGET_POLICY = get_env("SUGIH_SAVINGS_BUDGET_POLICY", "month_net")
SUGIH_TRANSACTION_PAGE_MAX = get_env("SUGIH_TRANSACTION_PAGE_MAX", 100, cast=int)
