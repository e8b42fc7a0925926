"""Shared helpers for tests (seeding, user creation, fake Redis)."""

from __future__ import annotations

from typing import Dict, Tuple
from unittest import mock

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from access_control.models import Role
from authentication.managers import UserManager
from authentication.services import TokenService
from curriculum.models import Lesson, Module
from curriculum.slugs import unique_slug
from scripts.management.commands.seed_curriculum import (
    create_seed_elements,
    create_seed_roles,
    create_seed_rules,
)

User = get_user_model()


class FakeRedis:
    """In-memory stand-in for the Redis commands TokenService uses."""

    def __init__(self):
        self._store: Dict[str, str] = {}

    def setex(self, key: str, ttl_seconds: int, value: str) -> None:
        self._store[key] = value

    def get(self, key: str):
        return self._store.get(key)


class FakeRedisTestCase(TestCase):
    """TestCase with the blocklist client replaced by a FakeRedis per class."""

    @classmethod
    def setUpClass(cls):
        super().setUpClass()
        cls.fake_redis = FakeRedis()
        cls.redis_patcher = mock.patch("authentication.services.get_redis_client", return_value=cls.fake_redis)
        cls.redis_patcher.start()

    @classmethod
    def tearDownClass(cls):
        cls.redis_patcher.stop()
        super().tearDownClass()

    @staticmethod
    def auth_client(user) -> APIClient:
        """Return an APIClient carrying a fresh access token for ``user``."""
        access, _ = TokenService.generate_tokens(user)
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
        return client


def seed_basics() -> Tuple[dict, dict]:
    """Create roles, business elements, and grants the way the seed command does."""

    roles = create_seed_roles()
    elements = create_seed_elements()
    create_seed_rules(roles, elements)
    return roles, elements


def create_user(email: str, role: Role, password: str = "Password123", **extra):
    return User.objects.create(
        email=email,
        password_hash=UserManager.hash_password(password),
        role=role,
        **extra,
    )


def create_lesson(name: str, creator, **extra) -> Lesson:
    return Lesson.objects.create(name=name, slug=unique_slug(Lesson, name), creator=creator, **extra)


def create_module(name: str, creator, lessons=(), **extra) -> Module:
    module = Module.objects.create(name=name, slug=unique_slug(Module, name), creator=creator, **extra)
    if lessons:
        module.lessons.add(*lessons)
    return module
