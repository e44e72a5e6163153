# apps/domains/progress/models.py
from __future__ import annotations

from django.conf import settings
from django.db import models

from apps.core.models import TimestampModel
from apps.domains.courses.models import Lesson


class LessonProgress(TimestampModel):
    """
    Per (user, lesson) completion record.

    - written only through services.record_completion (idempotent upsert)
    - completed never goes back to False
    - completed_at keeps the first completion time
    - watch_time keeps the largest reported value (seconds)
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="lesson_progress",
    )
    lesson = models.ForeignKey(
        Lesson,
        on_delete=models.CASCADE,
        related_name="progress_records",
    )

    completed = models.BooleanField(default=False)
    completed_at = models.DateTimeField(null=True, blank=True)
    watch_time = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "lesson_progress"
        constraints = [
            models.UniqueConstraint(
                fields=["user", "lesson"],
                name="unique_progress_per_user_lesson",
            )
        ]
        ordering = ["-updated_at", "-id"]

    def __str__(self):
        return f"{self.user} / {self.lesson} ({'done' if self.completed else 'watching'})"
