from .base import *

SECRET_KEY = "test-secret-key"

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

LOGGING["root"]["level"] = "WARNING"  # type: ignore
LOGGING["loggers"]["sugih"]["level"] = "WARNING"  # type: ignore

SUGIH_BULK_MAX_IDS = 100
SUGIH_SAVINGS_BUDGET_POLICY = "month_net"
