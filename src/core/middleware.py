"""Middleware resolving the request viewer from a bearer access token."""

import logging
from typing import Optional

from django.contrib.auth.models import AnonymousUser
from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed

from authentication.models import User
from authentication.services import BlocklistUnavailable, TokenService

logger = logging.getLogger(__name__)


class JWTAuthMiddleware(MiddlewareMixin):
    """Attach ``request.user`` from a valid access JWT.

    Requests without an ``Authorization: Bearer`` header proceed as anonymous
    viewers. A header that is present but invalid, revoked, or issued for an
    inactive user short-circuits with 401.
    """

    def process_request(self, request):  # type: ignore[override]
        auth_header = request.META.get("HTTP_AUTHORIZATION", "")
        if not auth_header.startswith("Bearer "):
            request.user = AnonymousUser()
            return None

        token = auth_header.split(" ", 1)[1]
        try:
            payload = TokenService.decode_token(token, expected_type="access")
            if TokenService.is_token_blocked(payload.get("jti", "")):
                return _unauthorized()

            user = self._get_user(payload.get("sub"))
            if user is None or not user.is_active:
                return _unauthorized()
            if payload.get("ver") != user.token_version:
                return _unauthorized()
        except AuthenticationFailed as exc:
            logger.info("Rejected bearer token: %s", exc.detail)
            return _unauthorized()
        except BlocklistUnavailable:
            logger.error("Token blocklist unavailable")
            return JsonResponse(
                {"errors": ["Authentication service unavailable (blocklist)."]},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )

        request.user = user
        return None

    @staticmethod
    def _get_user(user_id: Optional[str]) -> Optional[User]:
        if not user_id:
            return None
        try:
            return User.objects.select_related("role").get(id=user_id)
        except (User.DoesNotExist, ValueError):
            return None


def _unauthorized() -> JsonResponse:
    return JsonResponse(
        {
            "errors": [
                "Authentication credentials were not provided or are invalid, token revoked, or user is inactive."
            ],
        },
        status=status.HTTP_401_UNAUTHORIZED,
    )


__all__ = ["JWTAuthMiddleware"]
