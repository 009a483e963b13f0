# PATH: apps/api/config/settings/test.py
from .base import *

DEBUG = False
SECRET_KEY = "test-secret-key"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

LOGGING["loggers"]["apps"]["level"] = "DEBUG"

POINTS_MODULE_SLOTS = 12
POINTS_WEEKS_PER_MODULE = 3
POINTS_DEFAULT_CAP = 2
QUESTION_ENFORCE_WEEK_WINDOWS = True
QUESTION_ALLOW_WEEK_OVERRIDE = True
