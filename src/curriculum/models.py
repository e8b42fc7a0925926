"""Learning content: modules, lessons, and the module/lesson join table."""

from django.conf import settings
from django.db import models


class ContentStatus(models.TextChoices):
    PUBLISHED = "published", "Published"
    DRAFT = "draft", "Draft"


class ContentItem(models.Model):
    """Fields shared by every owned, publishable piece of content."""

    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=280, unique=True)
    description = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=ContentStatus.choices, default=ContentStatus.DRAFT)
    creator = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="+")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.name


class Lesson(ContentItem):
    class Meta(ContentItem.Meta):
        db_table = "lessons"


class Module(ContentItem):
    """A named collection of lessons."""

    lessons = models.ManyToManyField(Lesson, through="ModuleLesson", related_name="modules", blank=True)

    class Meta(ContentItem.Meta):
        db_table = "modules"


class ModuleLesson(models.Model):
    module = models.ForeignKey(Module, on_delete=models.CASCADE, related_name="module_lessons")
    lesson = models.ForeignKey(Lesson, on_delete=models.CASCADE, related_name="module_lessons")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "module_lessons"
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(fields=["module", "lesson"], name="unique_module_lesson"),
        ]


__all__ = ["ContentStatus", "Lesson", "Module", "ModuleLesson"]
