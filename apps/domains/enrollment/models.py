from django.conf import settings
from django.db import models

from apps.core.models import TimestampModel
from apps.domains.courses.models import Course


# ========================================================
# Enrollment
# ========================================================

class Enrollment(TimestampModel):
    """
    A user's enrollment in a course.
    Approval / payment happen elsewhere; only ACTIVE grants video access.
    """

    class Status(models.TextChoices):
        ACTIVE = "ACTIVE", "Active"
        INACTIVE = "INACTIVE", "Inactive"
        PENDING = "PENDING", "Pending"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="enrollments",
    )
    course = models.ForeignKey(
        Course,
        on_delete=models.CASCADE,
        related_name="enrollments",
    )

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )

    enrolled_at = models.DateTimeField(auto_now_add=True)

    # completed lessons / total lessons, 0~100
    progress = models.FloatField(default=0)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["user", "course"],
                name="unique_enrollment_per_course",
            )
        ]

    def __str__(self):
        return f"{self.user} -> {self.course.title}"
