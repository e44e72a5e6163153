# PATH: apps/domains/enrollment/services.py

from __future__ import annotations

import logging

from .models import Enrollment

logger = logging.getLogger(__name__)


def is_entitled(*, user, course) -> bool:
    """
    Video entitlement for a course.
    - the course's teacher is always allowed
    - otherwise an ACTIVE enrollment is required
    """
    if not user or not getattr(user, "is_authenticated", False):
        return False

    if course.teacher_id == user.id:
        return True

    return Enrollment.objects.filter(
        user_id=user.id,
        course_id=course.id,
        status=Enrollment.Status.ACTIVE,
    ).exists()
