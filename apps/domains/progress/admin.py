from django.contrib import admin

from .models import LessonProgress


@admin.register(LessonProgress)
class LessonProgressAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "lesson", "completed", "watch_time", "completed_at", "updated_at")
    list_display_links = ("id", "lesson")
    list_filter = ("completed", "lesson__chapter__course")
    search_fields = ("user__username", "lesson__title")
    ordering = ("-updated_at",)
