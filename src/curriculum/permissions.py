"""Per-record permission resolution for learning content.

The resolver answers "what may this viewer do with this record" and is
attached to every response body. It is a pure function of the viewer's
role and id and the record's creator and status; it never touches the
database, so list endpoints can call it once per item.
"""

from dataclasses import asdict, dataclass
from typing import Any, Optional

from access_control.models import Role

from .models import ContentStatus


@dataclass(frozen=True)
class Viewer:
    id: Any
    role: str

    @classmethod
    def from_user(cls, user) -> Optional["Viewer"]:
        """Build a viewer from ``request.user``; anonymous users map to None."""
        if user is None or not getattr(user, "is_authenticated", False):
            return None
        return cls(id=user.pk, role=getattr(user, "role_name", ""))


@dataclass(frozen=True)
class PermissionRecord:
    read: bool
    update: bool
    create: bool
    delete: bool

    def as_dict(self) -> dict[str, bool]:
        return asdict(self)


def _record(update: bool = False, create: bool = False, delete: bool = False) -> PermissionRecord:
    return PermissionRecord(read=True, update=update, create=create, delete=delete)


def resolve_permissions(viewer: Optional[Viewer], resource) -> PermissionRecord:
    """Return the permission record for ``viewer`` on ``resource``.

    ``resource`` needs ``creator_id`` and ``status``. Rules, first match wins:

    1. anonymous viewers may only read;
    2. superadmins may do everything;
    3. owners, admins included, may read, update, and create but not delete;
    4. admins may only read records they do not own;
    5. owners of drafts may read and update;
    6. everyone else may only read.

    Rule 5 is currently shadowed by rule 3.
    """
    if viewer is None:
        return _record()

    role = (viewer.role or "").lower()
    is_owner = viewer.id is not None and viewer.id == resource.creator_id

    if role == Role.SUPERADMIN:
        return _record(update=True, create=True, delete=True)
    if is_owner:
        return _record(update=True, create=True)
    if role == Role.ADMIN:
        return _record()
    if resource.status == ContentStatus.DRAFT and is_owner:
        return _record(update=True)
    return _record()


__all__ = ["Viewer", "PermissionRecord", "resolve_permissions"]
