from django.conf import settings
from django.db import models
from django.utils import timezone

from apps.core.models.base import TimestampModel
from apps.domains.courses.models import Lesson


# ========================================================
# VideoAccessToken (issuance audit log)
# ========================================================

class VideoAccessToken(TimestampModel):
    """
    One row per issued lesson token.

    - append-only; only used_at is updated (first successful validation)
    - the raw token is never stored, only its sha256 hex digest
    """

    lesson = models.ForeignKey(
        Lesson,
        on_delete=models.CASCADE,
        related_name="access_tokens",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="video_access_tokens",
    )

    token_hash = models.CharField(max_length=64, unique=True)
    expires_at = models.DateTimeField(db_index=True)

    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True, default="")

    used_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "video_access_tokens"
        ordering = ["-id"]
        indexes = [
            models.Index(fields=["lesson", "user"], name="video_token_lesson_user_idx"),
        ]

    def __str__(self):
        return f"token lesson={self.lesson_id} user={self.user_id}"

    @property
    def is_expired(self) -> bool:
        return timezone.now() >= self.expires_at
