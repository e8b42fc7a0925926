"""Response helpers and base classes for resource-keyed API bodies."""

from typing import Any

from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import GenericViewSet


def api_response(key: str, data: Any, status: int = 200) -> Response:
    """Return data wrapped under its resource key, e.g. `{"tokens": {...}}`."""

    return Response({key: data}, status=status)


class EnvelopeMixin:
    """Wrap successful bare payloads under the view's resource key.

    Views that set ``resource_name`` get single payloads keyed by it and list
    payloads keyed by ``resource_name_plural``. Views without one are left
    alone and are expected to build bodies with ``api_response``.
    """

    resource_name: str | None = None
    resource_name_plural: str | None = None

    def finalize_response(self, request, response, *args, **kwargs):  # type: ignore[override]
        if (
            self.resource_name
            and hasattr(response, "data")
            and response.status_code
            and response.status_code < 400
            and response.status_code != 204
            and not self._is_enveloped(response.data)
        ):
            plural = self.resource_name_plural or f"{self.resource_name}s"
            key = plural if isinstance(response.data, list) else self.resource_name
            response.data = {key: response.data}
        return super().finalize_response(request, response, *args, **kwargs)  # type: ignore[attr-defined]

    def _is_enveloped(self, payload: Any) -> bool:
        keys = {self.resource_name, self.resource_name_plural}
        return isinstance(payload, dict) and len(payload) == 1 and next(iter(payload)) in keys


class BaseAPIView(EnvelopeMixin, APIView):
    """APIView whose successful responses are keyed by resource name."""


class BaseViewSet(EnvelopeMixin, GenericViewSet):
    """GenericViewSet variant whose successful responses are keyed by resource name."""
