"""Unique slug generation for named content."""

from django.db.models import Model
from django.utils.text import slugify


def unique_slug(model: type[Model], name: str, exclude_pk=None) -> str:
    """Slugify ``name`` and suffix ``-1``, ``-2``, ... until unused in ``model``.

    ``exclude_pk`` lets a record keep its own slug when renamed to the same value.
    """
    base = slugify(name or "")[:250] or model._meta.model_name
    taken = model.objects.filter(slug__startswith=base)
    if exclude_pk is not None:
        taken = taken.exclude(pk=exclude_pk)
    taken_slugs = set(taken.values_list("slug", flat=True))

    if base not in taken_slugs:
        return base
    suffix = 1
    while f"{base}-{suffix}" in taken_slugs:
        suffix += 1
    return f"{base}-{suffix}"


__all__ = ["unique_slug"]
