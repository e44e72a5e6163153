from django.contrib import admin

from .models import VideoAccessToken


@admin.register(VideoAccessToken)
class VideoAccessTokenAdmin(admin.ModelAdmin):
    list_display = ("id", "lesson", "user", "expires_at", "used_at", "ip_address", "created_at")
    list_display_links = ("id", "lesson")
    list_filter = ("lesson__chapter__course",)
    search_fields = ("user__username", "token_hash", "ip_address")
    ordering = ("-id",)
    readonly_fields = (
        "lesson",
        "user",
        "token_hash",
        "expires_at",
        "ip_address",
        "user_agent",
        "used_at",
        "created_at",
        "updated_at",
    )
