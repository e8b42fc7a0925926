"""Authentication endpoints: register, login, refresh, logout, and the current viewer."""

from typing import Any

from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed, NotAuthenticated
from rest_framework.response import Response

from core.response import BaseAPIView, api_response
from .serializers import LoginSerializer, RegisterSerializer, UserDetailSerializer
from .services import TokenService

User = get_user_model()


class RegisterView(BaseAPIView):
    permission_classes: list[Any] = []

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return api_response("user", UserDetailSerializer(user).data, status=status.HTTP_201_CREATED)


class LoginView(BaseAPIView):
    permission_classes: list[Any] = []

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        access, refresh = TokenService.generate_tokens(serializer.validated_data["user"])
        return api_response("tokens", {"access": access, "refresh": refresh})


class RefreshView(BaseAPIView):
    permission_classes: list[Any] = []

    def post(self, request):
        """Exchange a refresh token minted for the current token_version."""
        refresh_token = request.data.get("refresh")
        if not refresh_token:
            raise AuthenticationFailed("Refresh token required")

        payload = TokenService.decode_token(refresh_token, expected_type="refresh")
        if TokenService.is_token_blocked(payload.get("jti", "")):
            raise AuthenticationFailed("Refresh token revoked")

        user = User.objects.select_related("role").filter(id=payload.get("sub"), is_active=True).first()
        if user is None or payload.get("ver") != user.token_version:
            raise AuthenticationFailed("Invalid or revoked refresh token")

        # Single use: the presented refresh token cannot be replayed.
        TokenService.block_token(payload["jti"], payload["exp"])
        access, new_refresh = TokenService.generate_tokens(user)
        return api_response("tokens", {"access": access, "refresh": new_refresh})


class LogoutView(BaseAPIView):
    """Revoke the presented access token."""

    def post(self, request):
        if not request.user.is_authenticated:
            raise NotAuthenticated()
        token = request.META.get("HTTP_AUTHORIZATION", "").split(" ", 1)[1]
        payload = TokenService.decode_token(token, expected_type="access")
        TokenService.block_token(payload["jti"], payload["exp"])
        return Response(status=status.HTTP_204_NO_CONTENT)


class MeView(BaseAPIView):
    resource_name = "user"

    def get(self, request):
        if not request.user.is_authenticated:
            raise NotAuthenticated()
        return Response(UserDetailSerializer(request.user).data)
