# PATH: apps/support/video/serializers.py

from rest_framework import serializers

from .models import VideoAccessToken


# ========================================================
# Token issue
# ========================================================

class VideoTokenIssueRequestSerializer(serializers.Serializer):
    lessonId = serializers.IntegerField(min_value=1)
    courseId = serializers.IntegerField(min_value=1)


class VideoTokenResponseSerializer(serializers.Serializer):
    token = serializers.CharField()
    expiresAt = serializers.DateTimeField()
    videoId = serializers.CharField()


# ========================================================
# Token validate
# ========================================================

class VideoTokenValidateQuerySerializer(serializers.Serializer):
    token = serializers.CharField()
    lessonId = serializers.IntegerField(min_value=1)


class VideoTokenPayloadSerializer(serializers.Serializer):
    lessonId = serializers.IntegerField()
    userId = serializers.IntegerField()
    courseId = serializers.IntegerField()
    expiresAt = serializers.DateTimeField()


class VideoTokenValidationSerializer(serializers.Serializer):
    valid = serializers.BooleanField()
    reason = serializers.CharField(required=False)
    payload = VideoTokenPayloadSerializer(required=False)


# ========================================================
# Audit log (staff)
# ========================================================

class VideoAccessTokenSerializer(serializers.ModelSerializer):
    class Meta:
        model = VideoAccessToken
        fields = [
            "id",
            "lesson",
            "user",
            "token_hash",
            "expires_at",
            "ip_address",
            "user_agent",
            "used_at",
            "created_at",
        ]
        read_only_fields = fields
