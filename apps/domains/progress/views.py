# apps/domains/progress/views.py
from django.shortcuts import get_object_or_404
from rest_framework import mixins, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet
from django_filters.rest_framework import DjangoFilterBackend
from drf_yasg.utils import swagger_auto_schema

from apps.domains.courses.models import Lesson
from apps.domains.enrollment.services import is_entitled

from .filters import LessonProgressFilter
from .models import LessonProgress
from .serializers import LessonProgressSerializer, LessonProgressRecordSerializer
from .services import record_completion


class LessonProgressViewSet(mixins.ListModelMixin, GenericViewSet):
    """
    GET  /progress/?course_id=  caller's own records for a course
    POST /progress/             idempotent completion upsert
    """

    serializer_class = LessonProgressSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = None

    filter_backends = [DjangoFilterBackend]
    filterset_class = LessonProgressFilter

    def get_queryset(self):
        return (
            LessonProgress.objects
            .filter(user=self.request.user)
            .select_related("lesson", "lesson__chapter")
        )

    def list(self, request, *args, **kwargs):
        if not request.query_params.get("course_id"):
            return Response(
                {"detail": "course_id is required"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return super().list(request, *args, **kwargs)

    @swagger_auto_schema(
        request_body=LessonProgressRecordSerializer,
        responses={200: LessonProgressSerializer},
    )
    def create(self, request, *args, **kwargs):
        serializer = LessonProgressRecordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        lesson = get_object_or_404(
            Lesson.objects.select_related("chapter", "chapter__course"),
            id=data["lessonId"],
        )
        if not is_entitled(user=request.user, course=lesson.chapter.course):
            return Response({"detail": "Access denied"}, status=status.HTTP_403_FORBIDDEN)

        obj = record_completion(
            user=request.user,
            lesson=lesson,
            watch_time=data["watchTime"],
            completed=data["completed"],
        )
        return Response(LessonProgressSerializer(obj).data, status=status.HTTP_200_OK)
