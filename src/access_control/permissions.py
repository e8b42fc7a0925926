"""Capability check mapping HTTP methods to AccessRule flags."""

import logging

from rest_framework import permissions

from .models import AccessRule

logger = logging.getLogger(__name__)


class RBACPermission(permissions.BasePermission):
    """Gate mutations on the view's ``business_element`` grants.

    Safe methods are open to everyone, anonymous viewers included, when the
    view sets ``public_read = True``; what a viewer may do with each record is
    reported separately by the permission resolver. Mutations need an
    authenticated user whose role has a rule for the element:

    * POST requires ``can_create``;
    * PUT/PATCH require ``can_update_all``, or ``can_update_own`` on own records;
    * DELETE requires ``can_delete_all``, or ``can_delete_own`` on own records.
    """

    message = "You do not have permission to perform this action on this resource."

    def has_permission(self, request, view) -> bool:
        if request.method in permissions.SAFE_METHODS and getattr(view, "public_read", False):
            return True

        user = getattr(request, "user", None)
        if not user or not getattr(user, "is_authenticated", False):
            return False

        rule = get_rule(user, getattr(view, "business_element", None))
        if rule is None:
            return False

        if request.method in permissions.SAFE_METHODS:
            return True
        if request.method == "POST":
            return rule.can_create
        if request.method in ("PUT", "PATCH"):
            return rule.can_update_all or rule.can_update_own
        if request.method == "DELETE":
            return rule.can_delete_all or rule.can_delete_own
        return False

    def has_object_permission(self, request, view, obj) -> bool:
        if request.method in permissions.SAFE_METHODS:
            return True

        user = request.user
        rule = get_rule(user, getattr(view, "business_element", None))
        if rule is None:
            return False

        owns = _is_owner(obj, user)
        if request.method in ("PUT", "PATCH"):
            allowed = rule.can_update_all or (rule.can_update_own and owns)
        elif request.method == "DELETE":
            allowed = rule.can_delete_all or (rule.can_delete_own and owns)
        else:
            allowed = False
        if not allowed:
            logger.info("Denied %s on %s %s for user %s", request.method, view.business_element, obj.pk, user.pk)
        return allowed


def get_rule(user, element_key: str | None) -> AccessRule | None:
    """Return the AccessRule for the user's role on ``element_key``, if any."""
    role_id = getattr(user, "role_id", None)
    if not element_key or role_id is None:
        return None
    return AccessRule.objects.filter(role_id=role_id, element__key=element_key).first()


def _is_owner(obj, user) -> bool:
    creator_id = getattr(obj, "creator_id", None)
    return creator_id is not None and creator_id == user.pk


__all__ = ["RBACPermission", "get_rule"]
