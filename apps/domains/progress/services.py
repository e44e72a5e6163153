# PATH: apps/domains/progress/services.py

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from apps.domains.courses.models import Lesson
from apps.domains.enrollment.models import Enrollment

from .models import LessonProgress

logger = logging.getLogger(__name__)


@transaction.atomic
def record_completion(
    *,
    user,
    lesson: Lesson,
    watch_time: int = 0,
    completed: bool = True,
) -> LessonProgress:
    """
    Idempotent upsert keyed by (user, lesson).

    Repeated or concurrent calls converge to one row:
    - completed: old OR new
    - completed_at: first completion wins
    - watch_time: max(old, new)
    """
    now = timezone.now()
    watch_time = max(0, int(watch_time or 0))

    obj, created = (
        LessonProgress.objects
        .select_for_update()
        .get_or_create(
            user=user,
            lesson=lesson,
            defaults={
                "completed": bool(completed),
                "completed_at": now if completed else None,
                "watch_time": watch_time,
            },
        )
    )

    newly_completed = created and bool(completed)

    if not created:
        changed = []
        if completed and not obj.completed:
            obj.completed = True
            obj.completed_at = obj.completed_at or now
            changed += ["completed", "completed_at"]
            newly_completed = True
        if watch_time > obj.watch_time:
            obj.watch_time = watch_time
            changed.append("watch_time")
        if changed:
            obj.save(update_fields=changed + ["updated_at"])

    if newly_completed:
        logger.info(
            "LESSON_COMPLETED user_id=%s lesson_id=%s watch_time=%s",
            user.id,
            lesson.id,
            obj.watch_time,
        )
        refresh_enrollment_progress(user=user, course_id=lesson.chapter.course_id)

    return obj


def refresh_enrollment_progress(*, user, course_id: int) -> float | None:
    """
    Recompute Enrollment.progress (completed lessons / total lessons * 100).
    No enrollment (e.g. the course teacher) -> nothing to update.
    """
    enrollment = (
        Enrollment.objects
        .filter(user_id=user.id, course_id=course_id)
        .first()
    )
    if enrollment is None:
        return None

    total = Lesson.objects.filter(chapter__course_id=course_id).count()
    done = LessonProgress.objects.filter(
        user_id=user.id,
        lesson__chapter__course_id=course_id,
        completed=True,
    ).count()

    pct = (done / total) * 100 if total > 0 else 0.0

    enrollment.progress = pct
    if pct >= 100 and enrollment.completed_at is None:
        enrollment.completed_at = timezone.now()
    enrollment.save(update_fields=["progress", "completed_at", "updated_at"])
    return pct
