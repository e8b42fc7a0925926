"""Serializers for modules and lessons using the API's camelCase field names."""

from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import ContentStatus, Lesson, Module

User = get_user_model()

CONTENT_FIELDS = ["id", "name", "slug", "description", "status", "creatorId", "createdAt", "updatedAt"]


class LessonSummarySerializer(serializers.ModelSerializer):
    """Lesson projection embedded in module payloads."""

    type = serializers.SerializerMethodField()

    class Meta:
        model = Lesson
        fields = ["id", "name", "type"]

    def get_type(self, obj) -> str:
        return "lessons"


class ModuleSummarySerializer(serializers.ModelSerializer):
    """Module projection embedded in lesson payloads."""

    type = serializers.SerializerMethodField()

    class Meta:
        model = Module
        fields = ["id", "name", "type"]

    def get_type(self, obj) -> str:
        return "modules"


class ContentSerializer(serializers.ModelSerializer):
    """Shared fields; slug and timestamps are server-managed."""

    status = serializers.ChoiceField(choices=ContentStatus.choices, required=False)
    creatorId = serializers.PrimaryKeyRelatedField(source="creator", queryset=User.objects.all(), required=False)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)


class ModuleSerializer(ContentSerializer):
    lessons = LessonSummarySerializer(many=True, read_only=True)

    class Meta:
        model = Module
        fields = CONTENT_FIELDS + ["lessons"]
        read_only_fields = ["id", "slug"]


class LessonSerializer(ContentSerializer):
    modules = ModuleSummarySerializer(many=True, read_only=True)

    class Meta:
        model = Lesson
        fields = CONTENT_FIELDS + ["modules"]
        read_only_fields = ["id", "slug"]


__all__ = ["LessonSerializer", "ModuleSerializer"]
