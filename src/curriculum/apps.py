"""App configuration for learning content."""

from django.apps import AppConfig


class CurriculumConfig(AppConfig):
    """Modules, lessons, and the permission resolver."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "curriculum"
