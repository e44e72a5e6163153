# apps/domains/progress/serializers.py
from rest_framework import serializers

from .models import LessonProgress


class LessonProgressSerializer(serializers.ModelSerializer):
    lessonId = serializers.IntegerField(source="lesson_id", read_only=True)
    courseId = serializers.IntegerField(source="lesson.chapter.course_id", read_only=True)
    completedAt = serializers.DateTimeField(source="completed_at", read_only=True)
    watchTime = serializers.IntegerField(source="watch_time", read_only=True)

    class Meta:
        model = LessonProgress
        fields = [
            "id",
            "lessonId",
            "courseId",
            "completed",
            "completedAt",
            "watchTime",
        ]
        read_only_fields = fields


class LessonProgressRecordSerializer(serializers.Serializer):
    lessonId = serializers.IntegerField(min_value=1)
    completed = serializers.BooleanField(default=True)
    watchTime = serializers.IntegerField(min_value=0, default=0)
