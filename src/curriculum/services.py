"""Repository access for modules and lessons.

Services wrap the ORM and raise DRF exceptions so views stay thin:
``NotFound`` for missing records, ``BadRequest`` for unusable filters or
payloads, and ``ValidationError`` from serializer validation.
"""

import logging
from typing import Any, Iterable, Mapping

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.db.models import Model, Prefetch, QuerySet
from rest_framework.exceptions import NotFound

from core.exceptions import BadRequest
from .models import Lesson, Module, ModuleLesson
from .serializers import LessonSerializer, ModuleSerializer
from .slugs import unique_slug

logger = logging.getLogger(__name__)

# Query parameter -> model lookup accepted by list filters.
CONTENT_FILTERS = {
    "id": "id",
    "name": "name",
    "slug": "slug",
    "description": "description",
    "status": "status",
    "creatorId": "creator_id",
    "creator_id": "creator_id",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}


class ContentService:
    """CRUD over one content model with unique slugs and list filters."""

    model: type[Model]
    serializer_class: type
    filters: Mapping[str, str] = CONTENT_FILTERS

    @classmethod
    def queryset(cls) -> QuerySet:
        return cls.model.objects.select_related("creator")

    @classmethod
    def find(cls, pk) -> Model | None:
        """Return the record with ``pk`` or None, treating malformed ids as missing."""
        try:
            return cls.queryset().filter(pk=pk).first()
        except (ValueError, TypeError, DjangoValidationError):
            return None

    @classmethod
    def get(cls, pk) -> Model:
        record = cls.find(pk)
        if record is None:
            raise NotFound("No matching record found")
        return record

    @classmethod
    def list(cls, params: Mapping[str, Any]) -> list[Model]:
        """Return records matching every ``key=value`` pair in ``params``."""
        lookups = {}
        for key, value in params.items():
            if key not in cls.filters:
                logger.warning("Rejected %s filter on unknown key %r", cls.model.__name__, key)
                raise BadRequest(f"The query key does not exist: {key}")
            lookups[cls.filters[key]] = value

        try:
            return list(cls.queryset().filter(**lookups))
        except (ValueError, TypeError, DjangoValidationError) as exc:
            logger.warning("Rejected %s filter %r: %s", cls.model.__name__, lookups, exc)
            raise BadRequest("Bad Request") from exc

    @classmethod
    def create(cls, payload: Mapping[str, Any], user) -> Model:
        """Validate ``payload`` and insert a record with a fresh unique slug.

        ``creatorId`` defaults to ``user`` when absent.
        """
        serializer = cls.serializer_class(data=payload)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        data.setdefault("creator", user)
        data["slug"] = unique_slug(cls.model, data["name"])

        try:
            with transaction.atomic():
                record = cls.model.objects.create(**data)
                cls._apply_relations(record, payload)
        except IntegrityError as exc:
            logger.warning("Insert of %s %r failed: %s", cls.model.__name__, data["name"], exc)
            raise BadRequest(str(exc)) from exc

        logger.info("Created %s %s (%s)", cls.model.__name__, record.pk, record.slug)
        return cls.get(record.pk)

    @classmethod
    def update(cls, record: Model, payload: Mapping[str, Any]) -> Model:
        """Apply the provided fields and relations to ``record`` atomically.

        The creator is fixed at creation; ``creatorId`` in an update is ignored.
        """
        serializer = cls.serializer_class(record, data=payload, partial=True)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        data.pop("creator", None)
        if "name" in data and data["name"] != record.name:
            data["slug"] = unique_slug(cls.model, data["name"], exclude_pk=record.pk)

        try:
            with transaction.atomic():
                for field, value in data.items():
                    setattr(record, field, value)
                record.save()
                cls._apply_relations(record, payload)
        except IntegrityError as exc:
            logger.warning("Update of %s %s failed: %s", cls.model.__name__, record.pk, exc)
            raise BadRequest(str(exc)) from exc

        logger.info("Updated %s %s", cls.model.__name__, record.pk)
        return cls.get(record.pk)

    @classmethod
    def delete(cls, record: Model) -> dict[str, Any]:
        """Delete ``record`` and return its serialized state from before deletion."""
        snapshot = cls.serializer_class(cls.get(record.pk)).data
        record.delete()
        logger.info("Deleted %s %s", cls.model.__name__, snapshot["id"])
        return snapshot

    @classmethod
    def _apply_relations(cls, record: Model, payload: Mapping[str, Any]) -> None:
        """Hook for replacing associations; runs inside the write transaction."""


class ModuleService(ContentService):
    model = Module
    serializer_class = ModuleSerializer

    @classmethod
    def queryset(cls) -> QuerySet:
        return super().queryset().prefetch_related(
            Prefetch("lessons", queryset=Lesson.objects.only("id", "name").order_by("id"))
        )

    @classmethod
    def _apply_relations(cls, record: Model, payload: Mapping[str, Any]) -> None:
        if "lessons" in payload:
            cls.replace_lessons(record, payload["lessons"])

    @staticmethod
    def replace_lessons(module: Module, lessons: Iterable[Any] | None) -> None:
        """Replace every lesson link of ``module`` with ``lessons``.

        Items are lesson ids or objects carrying an ``id``. Existing links are
        deleted and the new ones inserted; callers hold the transaction.
        """
        lesson_ids = _parse_ids(lessons or [])
        known = set(Lesson.objects.filter(pk__in=lesson_ids).values_list("pk", flat=True))
        missing = [pk for pk in lesson_ids if pk not in known]
        if missing:
            raise BadRequest(f"Unknown lesson ids: {', '.join(str(pk) for pk in missing)}")

        ModuleLesson.objects.filter(module=module).delete()
        ModuleLesson.objects.bulk_create(ModuleLesson(module=module, lesson_id=pk) for pk in lesson_ids)


class LessonService(ContentService):
    model = Lesson
    serializer_class = LessonSerializer

    @classmethod
    def queryset(cls) -> QuerySet:
        return super().queryset().prefetch_related(
            Prefetch("modules", queryset=Module.objects.only("id", "name").order_by("id"))
        )


def _parse_ids(items: Iterable[Any]) -> list[int]:
    """Coerce ``[1, "2", {"id": 3}]`` to ``[1, 2, 3]``, dropping repeats."""
    if isinstance(items, (str, bytes, Mapping)):
        raise BadRequest("lessons: expected a list of lesson ids")
    ids: list[int] = []
    for item in items:
        raw = item.get("id") if isinstance(item, Mapping) else item
        try:
            ids.append(int(raw))
        except (TypeError, ValueError) as exc:
            raise BadRequest(f"lessons: invalid lesson id {raw!r}") from exc
    return list(dict.fromkeys(ids))


__all__ = ["ContentService", "LessonService", "ModuleService"]
