from django.apps import AppConfig


class CoursesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"

    name = "apps.domains.courses"

    # migration / FK label (do not change)
    label = "courses"
