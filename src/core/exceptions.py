"""Custom exception handling to enforce the `{"errors": [...]}` body."""

import logging
from typing import Any

from django.conf import settings
from django.db import DatabaseError
from rest_framework import status
from rest_framework.exceptions import APIException, AuthenticationFailed, NotAuthenticated
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from authentication.services import BlocklistUnavailable

logger = logging.getLogger(__name__)


class BadRequest(APIException):
    """Invalid filter, payload, or failed precondition."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Bad Request"
    default_code = "bad_request"


def _normalize_errors(payload: Any) -> list[str]:
    """Flatten DRF's response.data into a list of messages."""

    if isinstance(payload, list):
        messages: list[str] = []
        for item in payload:
            messages.extend(_normalize_errors(item))
        return messages
    if isinstance(payload, dict):
        if "detail" in payload:
            return [str(payload["detail"])]
        messages = []
        for field, value in payload.items():
            for message in _normalize_errors(value):
                # non_field_errors carry no useful prefix
                messages.append(message if field == "non_field_errors" else f"{field}: {message}")
        return messages
    return [str(payload)]


def custom_exception_handler(exc: Exception, context: dict[str, Any]) -> Response | None:
    """Wrap DRF errors in the `{"errors": [...]}` shape.

    - Blocklist outages and database errors become 503 responses.
    - AuthenticationFailed/NotAuthenticated are always 401.
    - 401/403 messages are normalized unless DEBUG_AUTH_ERRORS is on.
    """

    if isinstance(exc, BlocklistUnavailable):
        return Response(
            {"errors": ["Authentication service unavailable (blocklist)."]},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    if isinstance(exc, DatabaseError):
        logger.error("Database error while handling %s: %s", context.get("view").__class__.__name__, exc)
        return Response(
            {"errors": ["Service temporarily unavailable."]},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    response = drf_exception_handler(exc, context)

    if response is None:
        return response

    # DRF maps these to 403 when no authenticate_header is advertised.
    if isinstance(exc, (AuthenticationFailed, NotAuthenticated)):
        response.status_code = status.HTTP_401_UNAUTHORIZED

    if response.status_code == status.HTTP_401_UNAUTHORIZED and not getattr(settings, "DEBUG_AUTH_ERRORS", False):
        errors = [
            "Authentication credentials were not provided or are invalid, "
            "token revoked, or user is inactive."
        ]
    elif response.status_code == status.HTTP_403_FORBIDDEN:
        errors = ["You do not have permission to perform this action on this resource."]
    else:
        errors = _normalize_errors(response.data)

    response.data = {"errors": errors}
    return response


__all__ = ["BadRequest", "custom_exception_handler"]
