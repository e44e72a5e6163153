# PATH: apps/support/video/views/token_views.py

import logging

from rest_framework import status
from rest_framework.exceptions import (
    AuthenticationFailed,
    NotAuthenticated,
    ValidationError,
)
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import ReadOnlyModelViewSet
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework.authentication import SessionAuthentication
from django_filters.rest_framework import DjangoFilterBackend
from drf_yasg.utils import swagger_auto_schema

from apps.core.permissions import IsAdminOrStaff

from .. import errors
from ..models import VideoAccessToken
from ..serializers import (
    VideoAccessTokenSerializer,
    VideoTokenIssueRequestSerializer,
    VideoTokenResponseSerializer,
    VideoTokenValidateQuerySerializer,
    VideoTokenValidationSerializer,
)
from ..services.token_service import issue_token, validate_token

logger = logging.getLogger(__name__)


# ----------------------------------------------------------
# internal helpers
# ----------------------------------------------------------

_STATUS_BY_CODE = {
    errors.AuthRequired.code: status.HTTP_401_UNAUTHORIZED,
    errors.AccessDenied.code: status.HTTP_403_FORBIDDEN,
    errors.NotFound.code: status.HTTP_404_NOT_FOUND,
    errors.ServiceUnavailable.code: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def _error(code: str, detail=None, *, http_status: int):
    body = {"error": code}
    if detail:
        body["detail"] = detail
    return Response(body, status=http_status)


def _client_ip(request) -> str | None:
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
    if forwarded:
        return forwarded.split(",")[0].strip() or None
    return request.META.get("REMOTE_ADDR") or None


# ==========================================================
# Video token (issue / validate)
# ==========================================================

class VideoTokenView(APIView):
    """
    POST /video-token/                      issue a lesson token
    GET  /video-token/?token=&lessonId=     validate a lesson token
    """

    authentication_classes = [JWTAuthentication, SessionAuthentication]
    permission_classes = [IsAuthenticated]

    def handle_exception(self, exc):
        if isinstance(exc, (NotAuthenticated, AuthenticationFailed)):
            return _error(
                errors.AuthRequired.code,
                http_status=status.HTTP_401_UNAUTHORIZED,
            )
        if isinstance(exc, errors.VideoAccessError):
            http_status = _STATUS_BY_CODE.get(exc.code, status.HTTP_400_BAD_REQUEST)
            detail = None if http_status >= 500 else exc.message
            return _error(exc.code, detail, http_status=http_status)
        if isinstance(exc, ValidationError):
            return _error("BadRequest", exc.detail, http_status=status.HTTP_400_BAD_REQUEST)
        return super().handle_exception(exc)

    @swagger_auto_schema(
        request_body=VideoTokenIssueRequestSerializer,
        responses={200: VideoTokenResponseSerializer},
    )
    def post(self, request):
        serializer = VideoTokenIssueRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        issued = issue_token(
            user=request.user,
            lesson_id=serializer.validated_data["lessonId"],
            course_id=serializer.validated_data["courseId"],
            referer=request.META.get("HTTP_REFERER"),
            ip_address=_client_ip(request),
            user_agent=request.META.get("HTTP_USER_AGENT", ""),
        )

        return Response(
            VideoTokenResponseSerializer(
                {
                    "token": issued.token,
                    "expiresAt": issued.expires_at,
                    "videoId": issued.video_id,
                }
            ).data,
            status=status.HTTP_200_OK,
        )

    @swagger_auto_schema(
        query_serializer=VideoTokenValidateQuerySerializer,
        responses={200: VideoTokenValidationSerializer},
    )
    def get(self, request):
        serializer = VideoTokenValidateQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)

        lesson_id = serializer.validated_data["lessonId"]
        result = validate_token(
            user=request.user,
            token=serializer.validated_data["token"],
            lesson_id=lesson_id,
            origin=request.META.get("HTTP_ORIGIN") or request.META.get("HTTP_REFERER"),
        )

        if not result.valid:
            data = {"valid": False, "reason": result.reason}
        else:
            claims = result.claims or {}
            data = {
                "valid": True,
                "payload": {
                    "lessonId": claims.get("lessonId"),
                    "userId": claims.get("userId"),
                    "courseId": claims.get("courseId"),
                    "expiresAt": result.expires_at,
                },
            }

        return Response(VideoTokenValidationSerializer(data).data, status=status.HTTP_200_OK)


# ==========================================================
# Audit log (staff only)
# ==========================================================

class VideoAccessTokenViewSet(ReadOnlyModelViewSet):
    queryset = VideoAccessToken.objects.all().select_related("lesson", "user")
    serializer_class = VideoAccessTokenSerializer
    permission_classes = [IsAdminOrStaff]

    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["lesson", "user"]
