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

VIDEO_TOKEN_TTL_SECONDS = 300
VIDEO_TOKEN_ALLOWED_DOMAINS = [
    "https://learnova.com",
    "http://testserver",
]

LOGGING["root"]["level"] = "WARNING"
