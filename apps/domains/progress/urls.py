# apps/domains/progress/urls.py
from rest_framework.routers import DefaultRouter

from .views import LessonProgressViewSet

router = DefaultRouter()
router.register("progress", LessonProgressViewSet, basename="lesson-progress")

urlpatterns = router.urls
