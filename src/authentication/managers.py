"""User manager hashing passwords with bcrypt and assigning default roles."""

import uuid

import bcrypt
from django.conf import settings
from django.contrib.auth.base_user import BaseUserManager


class UserManager(BaseUserManager):
    """Create users with bcrypt hashes and a role (defaults to DEFAULT_USER_ROLE)."""

    use_in_migrations = True

    def _create_user(self, email: str, password: str, role=None, **extra_fields):
        if not email:
            raise ValueError("The Email must be set")
        if role is None:
            role = self._default_role()
        user = self.model(id=uuid.uuid4(), email=self.normalize_email(email), role=role, **extra_fields)
        user.password_hash = self.hash_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email: str, password: str | None = None, role=None, **extra_fields):
        """Create a regular user."""
        if password is None:
            raise ValueError("Password must be provided")
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(email, password, role=role, **extra_fields)

    def create_superuser(self, email: str, password: str, role=None, **extra_fields):
        """Create a Django-admin superuser holding the ``superadmin`` role."""
        from access_control.models import Role

        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        if role is None:
            role, _ = Role.objects.get_or_create(name=Role.SUPERADMIN)
        return self._create_user(email, password, role=role, **extra_fields)

    @staticmethod
    def _default_role():
        from access_control.models import Role

        role = Role.objects.filter(name__iexact=settings.DEFAULT_USER_ROLE).first()
        if role is None:
            raise ValueError(f"Default role '{settings.DEFAULT_USER_ROLE}' not configured")
        return role

    @staticmethod
    def hash_password(raw_password: str) -> str:
        """Hash a raw password with a fresh bcrypt salt."""
        return bcrypt.hashpw(raw_password.encode(), bcrypt.gensalt()).decode()

    @staticmethod
    def verify_password(user, raw_password: str) -> bool:
        """Check a raw password against the user's stored bcrypt hash."""
        if not user.password_hash:
            return False
        return bcrypt.checkpw(raw_password.encode(), user.password_hash.encode())


__all__ = ["UserManager"]
