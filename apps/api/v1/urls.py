# apps/api/v1/urls.py
from django.urls import path, include

urlpatterns = [
    # =========================
    # Video access
    # =========================
    path("", include("apps.support.video.urls")),

    # =========================
    # Progress
    # =========================
    path("", include("apps.domains.progress.urls")),
]
