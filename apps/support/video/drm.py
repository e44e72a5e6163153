# PATH: apps/support/video/drm.py
#
# Short-lived lesson access token (signed, not encrypted).
# Payload: lessonId / courseId / userId / domain / iat / exp / jti

import hashlib
import secrets
import time
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlsplit

from django.core import signing


_SALT = "video.access.token.v1"


def normalize_origin(value: Optional[str]) -> str:
    """
    "https://app.example.com/course/3?x=1" -> "https://app.example.com"
    Empty / unparsable -> "".
    """
    if not value:
        return ""
    parts = urlsplit(str(value).strip())
    if not parts.scheme or not parts.netloc:
        return ""
    return f"{parts.scheme.lower()}://{parts.netloc.lower()}"


def token_hash(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def create_video_token(
    *,
    payload: Dict[str, Any],
    ttl_seconds: int,
    now: Optional[int] = None,
) -> str:
    issued = int(time.time()) if now is None else int(now)
    data = dict(payload or {})
    data["iat"] = issued
    data["exp"] = issued + int(ttl_seconds)
    # unique per issuance; iat alone repeats within one second
    data["jti"] = secrets.token_urlsafe(16)
    return signing.dumps(data, salt=_SALT, compress=True)


def verify_video_token(
    token: str,
    *,
    origin: Optional[str] = None,
    now: Optional[int] = None,
) -> Tuple[bool, Dict[str, Any] | None, str | None]:
    """
    (ok, claims, reason)

    reason: "BadSignature" | "Expired" | "DomainMismatch"
    A token is invalid once now >= exp. The origin check only applies when
    both the token and the request carry one.
    """
    if not token:
        return False, None, "BadSignature"

    try:
        data = signing.loads(token, salt=_SALT)
    except signing.BadSignature:
        return False, None, "BadSignature"
    except (ValueError, TypeError, UnicodeDecodeError):
        # garbled base64 / zlib payload
        return False, None, "BadSignature"

    if not isinstance(data, dict):
        return False, None, "BadSignature"

    try:
        exp = int(data.get("exp") or 0)
    except (TypeError, ValueError):
        return False, None, "BadSignature"

    current = int(time.time()) if now is None else int(now)
    if current >= exp:
        return False, data, "Expired"

    bound = normalize_origin(data.get("domain"))
    requested = normalize_origin(origin)
    if bound and requested and bound != requested:
        return False, data, "DomainMismatch"

    return True, data, None
