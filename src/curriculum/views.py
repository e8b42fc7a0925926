"""Module and lesson endpoints with per-record permission records."""

from typing import Any

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.response import Response

from access_control.permissions import RBACPermission
from core.exceptions import BadRequest
from core.response import BaseViewSet
from .permissions import Viewer, resolve_permissions
from .services import ContentService, LessonService, ModuleService


class ContentViewSet(BaseViewSet):
    """CRUD handlers shared by modules and lessons.

    Subclasses set ``service``, ``business_element`` and the resource names.
    Single-record responses carry ``permissions``; list items each carry
    their own ``permission``.
    """

    service: type[ContentService]
    permission_classes = [RBACPermission]
    public_read = True
    http_method_names = ["get", "post", "put", "delete", "head", "options"]

    def get_queryset(self):
        return self.service.queryset()

    def get_serializer_class(self):
        return self.service.serializer_class

    def retrieve(self, request, pk=None):
        record = self.service.get(pk)
        return Response(self._with_permissions(record))

    def list(self, request):
        records = self.service.list(request.query_params)
        return Response([self._with_permissions(record, key="permission") for record in records])

    def create(self, request):
        record = self.service.create(self._payload(request), request.user)
        return Response(self._with_permissions(record), status=status.HTTP_201_CREATED)

    def update(self, request, pk=None):
        record = self.service.get(pk)
        self.check_object_permissions(request, record)
        record = self.service.update(record, self._payload(request))
        # Updates answer 201, same as creates.
        return Response(self._with_permissions(record), status=status.HTTP_201_CREATED)

    def destroy(self, request, pk=None):
        record = self.service.find(pk)
        if record is None:
            raise BadRequest()
        self.check_object_permissions(request, record)
        return Response(self.service.delete(record))

    def _payload(self, request) -> dict[str, Any]:
        body = request.data if isinstance(request.data, dict) else {}
        payload = body.get(self.resource_name)
        if not isinstance(payload, dict):
            raise BadRequest(f"Request body must contain a '{self.resource_name}' object")
        return payload

    def _with_permissions(self, record, key: str = "permissions") -> dict[str, Any]:
        data = dict(self.service.serializer_class(record).data)
        data[key] = resolve_permissions(Viewer.from_user(self.request.user), record).as_dict()
        return data


@extend_schema(tags=["modules"])
class ModuleViewSet(ContentViewSet):
    service = ModuleService
    business_element = "module"
    resource_name = "module"
    resource_name_plural = "modules"


@extend_schema(tags=["lessons"])
class LessonViewSet(ContentViewSet):
    service = LessonService
    business_element = "lesson"
    resource_name = "lesson"
    resource_name_plural = "lessons"


__all__ = ["ContentViewSet", "LessonViewSet", "ModuleViewSet"]
