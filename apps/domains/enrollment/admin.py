from django.contrib import admin
from .models import Enrollment


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "course", "status", "progress", "enrolled_at")
    list_display_links = ("id", "user")
    list_filter = ("status", "course")
    search_fields = ("user__username", "user__name", "course__title")
    ordering = ("-id",)
