# PATH: apps/api/config/settings/prod.py
from .base import *
import os

# ==================================================
# PROD MODE
# ==================================================

DEBUG = False

SECRET_KEY = os.environ["DJANGO_SECRET_KEY"]

# ==================================================
# SECURITY
# ==================================================

SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
USE_X_FORWARDED_HOST = True

SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True

# ==================================================
# ALLOWED HOSTS
# ==================================================
# never "*" in prod

ALLOWED_HOSTS = [
    h.strip()
    for h in os.environ.get("ALLOWED_HOSTS", "learnova.com,api.learnova.com").split(",")
    if h.strip()
]

# ==================================================
# CORS (Frontend <-> API)
# ==================================================

CORS_ALLOW_ALL_ORIGINS = False

CORS_ALLOWED_ORIGINS = [
    "https://learnova.com",
    "https://www.learnova.com",
]

CORS_ALLOW_CREDENTIALS = True

# ==================================================
# CSRF
# ==================================================

CSRF_TRUSTED_ORIGINS = [
    "https://learnova.com",
    "https://www.learnova.com",
]

API_BASE_URL = "https://api.learnova.com"

# ==================================================
# VIDEO ACCESS TOKEN
# ==================================================
# issuance must be bound to the real frontend origins

VIDEO_TOKEN_ALLOWED_DOMAINS = [
    d.strip()
    for d in os.environ.get(
        "VIDEO_TOKEN_ALLOWED_DOMAINS",
        ",".join(CORS_ALLOWED_ORIGINS),
    ).split(",")
    if d.strip()
]

if not VIDEO_TOKEN_ALLOWED_DOMAINS:
    raise RuntimeError("VIDEO_TOKEN_ALLOWED_DOMAINS must not be empty in prod.")
