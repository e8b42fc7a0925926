"""App configuration for authentication components."""

from django.apps import AppConfig


class AuthenticationConfig(AppConfig):
    """Holds the User model, token service, and auth endpoints."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "authentication"
