# config/settings/test.py
from .base import *  # noqa

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

STORE_REVENUE_SOURCE = "store_core.revenue.sources.DailyRevenueSource"

LOGGING["loggers"]["store_core"]["level"] = "WARNING"  # noqa: F405
