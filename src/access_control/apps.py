"""App configuration for role grants and the capability check."""

from django.apps import AppConfig


class AccessControlConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "access_control"

    def ready(self) -> None:
        from . import checks  # noqa: F401
