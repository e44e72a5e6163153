# PATH: apps/support/video/services/token_service.py

"""
Lesson video access tokens.

Issuance (SSOT):
- caller must be authenticated
- course / lesson must exist, the lesson must belong to the course and carry
  an external video id
- entitlement is re-checked here on every issuance (course teacher or ACTIVE
  enrollment); the client is never trusted
- a supplied Referer must be one of VIDEO_TOKEN_ALLOWED_DOMAINS
- every issuance writes one VideoAccessToken audit row

Validation:
- signature / expiry / bound domain -> (valid=False, reason)
- genuine token for another lesson or user -> AccessDenied
- success stamps used_at on the audit row
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone as dt_timezone
from typing import Any, Dict, Optional

from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone

from apps.domains.courses.models import Course, Lesson
from apps.domains.enrollment.services import is_entitled
from apps.support.video import errors
from apps.support.video.drm import (
    create_video_token,
    normalize_origin,
    token_hash,
    verify_video_token,
)
from apps.support.video.models import VideoAccessToken

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssuedToken:
    token: str
    issued_at: datetime
    expires_at: datetime
    video_id: str
    lesson_id: int
    course_id: int


@dataclass(frozen=True)
class TokenValidation:
    valid: bool
    reason: Optional[str] = None
    claims: Optional[Dict[str, Any]] = None

    @property
    def expires_at(self) -> Optional[datetime]:
        if not self.claims or "exp" not in self.claims:
            return None
        return datetime.fromtimestamp(int(self.claims["exp"]), tz=dt_timezone.utc)


def token_ttl_seconds() -> int:
    return int(getattr(settings, "VIDEO_TOKEN_TTL_SECONDS", 300))


def allowed_domains() -> list[str]:
    raw = getattr(settings, "VIDEO_TOKEN_ALLOWED_DOMAINS", []) or []
    return [o for o in (normalize_origin(d) for d in raw) if o]


def _check_referer(referer: Optional[str]) -> str:
    """
    Returns the normalized origin the token is bound to ("" when no referer).
    """
    origin = normalize_origin(referer)
    if not referer:
        return ""

    domains = allowed_domains()
    if domains and origin not in domains:
        logger.warning("VIDEO_TOKEN_REFERER_REJECTED referer=%s", referer)
        raise errors.AccessDenied("Invalid referer")
    return origin


def issue_token(
    *,
    user,
    lesson_id: int,
    course_id: int,
    referer: Optional[str] = None,
    ip_address: Optional[str] = None,
    user_agent: str = "",
    now: Optional[int] = None,
) -> IssuedToken:
    if not user or not getattr(user, "is_authenticated", False):
        raise errors.AuthRequired("Authentication required")

    domain = _check_referer(referer)

    try:
        course = Course.objects.filter(id=course_id).first()
        if course is None:
            raise errors.NotFound("Course not found")

        lesson = (
            Lesson.objects
            .select_related("chapter")
            .filter(id=lesson_id, chapter__course_id=course.id)
            .first()
        )
        if lesson is None or not lesson.has_video:
            raise errors.NotFound("Lesson not found or has no video")

        if not is_entitled(user=user, course=course):
            logger.warning(
                "VIDEO_TOKEN_DENIED user_id=%s lesson_id=%s course_id=%s",
                user.id,
                lesson_id,
                course_id,
            )
            raise errors.AccessDenied("Access denied")

        issued = int(time.time()) if now is None else int(now)
        ttl = token_ttl_seconds()
        token = create_video_token(
            payload={
                "lessonId": lesson.id,
                "courseId": course.id,
                "userId": user.id,
                "domain": domain,
            },
            ttl_seconds=ttl,
            now=issued,
        )

        issued_at = datetime.fromtimestamp(issued, tz=dt_timezone.utc)
        expires_at = datetime.fromtimestamp(issued + ttl, tz=dt_timezone.utc)

        VideoAccessToken.objects.create(
            lesson=lesson,
            user=user,
            token_hash=token_hash(token),
            expires_at=expires_at,
            ip_address=ip_address or None,
            user_agent=(user_agent or "")[:1000],
        )
    except DatabaseError as e:
        logger.error("VIDEO_TOKEN_DB_ERROR lesson_id=%s err=%s", lesson_id, e)
        raise errors.ServiceUnavailable("Token service unavailable") from e

    logger.info(
        "VIDEO_TOKEN_ISSUED user_id=%s lesson_id=%s course_id=%s at=%s",
        user.id,
        lesson.id,
        course.id,
        issued_at.isoformat(),
    )

    return IssuedToken(
        token=token,
        issued_at=issued_at,
        expires_at=expires_at,
        video_id=lesson.youtube_video_id,
        lesson_id=lesson.id,
        course_id=course.id,
    )


def validate_token(
    *,
    user,
    token: str,
    lesson_id: int,
    origin: Optional[str] = None,
    now: Optional[int] = None,
) -> TokenValidation:
    if not user or not getattr(user, "is_authenticated", False):
        raise errors.AuthRequired("Authentication required")

    ok, claims, reason = verify_video_token(token, origin=origin, now=now)
    if not ok:
        logger.info(
            "VIDEO_TOKEN_INVALID user_id=%s lesson_id=%s reason=%s",
            user.id,
            lesson_id,
            reason,
        )
        return TokenValidation(valid=False, reason=reason)

    if str(claims.get("lessonId")) != str(lesson_id) or str(claims.get("userId")) != str(user.id):
        logger.warning(
            "VIDEO_TOKEN_MISMATCH user_id=%s lesson_id=%s token_lesson=%s token_user=%s",
            user.id,
            lesson_id,
            claims.get("lessonId"),
            claims.get("userId"),
        )
        raise errors.AccessDenied("Token mismatch")

    try:
        with transaction.atomic():
            (
                VideoAccessToken.objects
                .filter(token_hash=token_hash(token), used_at__isnull=True)
                .update(used_at=timezone.now())
            )
    except DatabaseError as e:
        logger.error("VIDEO_TOKEN_DB_ERROR lesson_id=%s err=%s", lesson_id, e)
        raise errors.ServiceUnavailable("Token service unavailable") from e

    logger.info("VIDEO_TOKEN_VALIDATED user_id=%s lesson_id=%s", user.id, lesson_id)
    return TokenValidation(valid=True, claims=claims)
