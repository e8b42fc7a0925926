"""Serializers for registration, login, and the viewer profile."""

from django.contrib.auth import get_user_model
from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed

from .managers import UserManager

User = get_user_model()


class RegisterSerializer(serializers.Serializer):
    """Validate and create a user holding the default role."""

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=8)
    repeatPassword = serializers.CharField(write_only=True, min_length=8)
    firstName = serializers.CharField(source="first_name", required=False, allow_blank=True)
    lastName = serializers.CharField(source="last_name", required=False, allow_blank=True)

    @staticmethod
    def validate_email(value):
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("Email already in use")
        return value

    def validate(self, attrs):
        if attrs["password"] != attrs.pop("repeatPassword"):
            raise serializers.ValidationError("Passwords do not match")
        return attrs

    def create(self, validated_data):
        try:
            return User.objects.create_user(**validated_data)
        except ValueError as exc:
            raise serializers.ValidationError(str(exc)) from exc


class LoginSerializer(serializers.Serializer):
    """Authenticate email/password and expose the user as ``user``."""

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        try:
            user = User.objects.select_related("role").get(email__iexact=attrs["email"])
        except User.DoesNotExist:
            raise AuthenticationFailed("Invalid credentials")

        if not user.is_active:
            raise AuthenticationFailed("User is inactive")
        if not UserManager.verify_password(user, attrs["password"]):
            raise AuthenticationFailed("Invalid credentials")

        attrs["user"] = user
        return attrs


class UserDetailSerializer(serializers.ModelSerializer):
    firstName = serializers.CharField(source="first_name", read_only=True)
    lastName = serializers.CharField(source="last_name", read_only=True)
    role = serializers.CharField(source="role_name", read_only=True)

    class Meta:
        model = User
        fields = ["id", "email", "firstName", "lastName", "role"]
        read_only_fields = fields
