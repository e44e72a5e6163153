# apps/domains/progress/filters.py
import django_filters

from .models import LessonProgress


class LessonProgressFilter(django_filters.FilterSet):
    course_id = django_filters.NumberFilter(field_name="lesson__chapter__course_id")
    lesson = django_filters.NumberFilter(field_name="lesson_id")
    completed = django_filters.BooleanFilter(field_name="completed")

    class Meta:
        model = LessonProgress
        fields = ["course_id", "lesson", "completed"]
