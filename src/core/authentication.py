"""Bridge the user attached by ``JWTAuthMiddleware`` into DRF's request."""

from typing import Any, Optional, Tuple

from rest_framework.authentication import BaseAuthentication


class MiddlewareUserAuthentication(BaseAuthentication):
    """Expose ``request._request.user`` to DRF without re-parsing the token.

    Anonymous or missing users are left unauthenticated, so DRF falls back to
    ``AnonymousUser`` and public read endpoints keep working.
    """

    def authenticate(self, request) -> Optional[Tuple[Any, None]]:
        django_request = getattr(request, "_request", None)
        user = getattr(django_request, "user", None)
        if user is None or not getattr(user, "is_authenticated", False):
            return None
        return user, None

    def authenticate_header(self, request) -> str:
        return 'Bearer realm="api"'


__all__ = ["MiddlewareUserAuthentication"]
