from django.conf import settings
from django.db import models

from apps.core.models import TimestampModel


# ========================================================
# Course
# ========================================================

class Course(TimestampModel):
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)

    teacher = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="taught_courses",
    )

    is_active = models.BooleanField(default=True)

    def __str__(self):
        return self.title


# ========================================================
# Chapter
# ========================================================

class Chapter(TimestampModel):
    course = models.ForeignKey(
        Course,
        on_delete=models.CASCADE,
        related_name="chapters",
    )

    order = models.PositiveIntegerField(default=0)
    title = models.CharField(max_length=255)

    class Meta:
        ordering = ["order", "id"]

    def __str__(self):
        return f"{self.course.title} - {self.title}"


# ========================================================
# Lesson
# ========================================================

class Lesson(TimestampModel):
    chapter = models.ForeignKey(
        Chapter,
        on_delete=models.CASCADE,
        related_name="lessons",
    )

    order = models.PositiveIntegerField(default=0)
    title = models.CharField(max_length=255)

    # external media host reference (never the media bytes)
    youtube_video_id = models.CharField(max_length=32, blank=True, default="")
    video_duration = models.PositiveIntegerField(
        default=0,
        help_text="seconds, 0 = unknown",
    )

    class Meta:
        ordering = ["order", "id"]

    def __str__(self):
        return self.title

    @property
    def course_id(self) -> int:
        return self.chapter.course_id

    @property
    def has_video(self) -> bool:
        return bool((self.youtube_video_id or "").strip())
