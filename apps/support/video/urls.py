# PATH: apps/support/video/urls.py

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import VideoTokenView, VideoAccessTokenViewSet

# ========================================================
# Router
# ========================================================

router = DefaultRouter()
router.register(r"video-token-logs", VideoAccessTokenViewSet, basename="video-token-logs")

# ========================================================
# urlpatterns
# ========================================================

urlpatterns = [
    path("video-token/", VideoTokenView.as_view(), name="video-token"),
    path("", include(router.urls)),
]
