# domains/courses/admin.py

from django.contrib import admin
from .models import Course, Chapter, Lesson


# --------------------------------------------------
# Course
# --------------------------------------------------

@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "teacher", "is_active", "created_at")
    list_display_links = ("id", "title")
    list_filter = ("is_active",)
    search_fields = ("title", "teacher__username")
    ordering = ("-id",)


# --------------------------------------------------
# Chapter / Lesson
# --------------------------------------------------

@admin.register(Chapter)
class ChapterAdmin(admin.ModelAdmin):
    list_display = ("id", "course", "order", "title")
    list_display_links = ("id", "title")
    list_filter = ("course",)
    ordering = ("course", "order")


@admin.register(Lesson)
class LessonAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "chapter", "order", "youtube_video_id", "video_duration")
    list_display_links = ("id", "title")
    list_filter = ("chapter__course",)
    search_fields = ("title", "youtube_video_id")
    ordering = ("chapter", "order")
