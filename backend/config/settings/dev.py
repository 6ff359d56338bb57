from .base import *

# Development defaults keep fast feedback loops and transparent errors.
DEBUG = True

SECRET_KEY = get_env("SECRET_KEY", "local-dev-secret-key")

ALLOWED_HOSTS = ["localhost", "127.0.0.1"]

INSTALLED_APPS += ["django_extensions"] if "django_extensions" not in INSTALLED_APPS else []  # type: ignore

LOGGING["loggers"]["sugih"]["level"] = "DEBUG"  # type: ignore
