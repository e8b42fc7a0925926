from django.apps import AppConfig


class ScriptsConfig(AppConfig):
    """Management commands for seeding roles, grants, and demo content."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "scripts"
