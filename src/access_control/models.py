"""Role grants: Role, BusinessElement, and AccessRule."""

from django.db import models


class Role(models.Model):
    """A viewer role. Names are stored lowercased."""

    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"

    name = models.CharField(max_length=50, unique=True)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def save(self, *args, **kwargs):
        self.name = self.name.strip().lower()
        super().save(*args, **kwargs)

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.name


class BusinessElement(models.Model):
    """Resource type guarded by role grants (``module``, ``lesson``)."""

    key = models.CharField(max_length=50, unique=True)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.key


class AccessRule(models.Model):
    """Capability flags binding a Role to a BusinessElement."""

    role = models.ForeignKey(Role, on_delete=models.CASCADE, related_name="access_rules")
    element = models.ForeignKey(BusinessElement, on_delete=models.CASCADE, related_name="rules")

    can_create = models.BooleanField(default=False)
    can_update_own = models.BooleanField(default=False)
    can_update_all = models.BooleanField(default=False)
    can_delete_own = models.BooleanField(default=False)
    can_delete_all = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["role", "element"], name="unique_role_element_rule"),
        ]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.role.name} -> {self.element.key}"


__all__ = ["Role", "BusinessElement", "AccessRule"]
