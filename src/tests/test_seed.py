"""Tests for the seed_curriculum management command."""

from __future__ import annotations

from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase

from access_control.models import AccessRule, Role
from curriculum.models import Lesson, Module

User = get_user_model()


class SeedCommandTests(TestCase):
    def run_seed(self, *args):
        call_command("seed_curriculum", *args, stdout=StringIO())

    def test_seed_creates_roles_grants_and_content(self):
        self.run_seed()

        self.assertEqual(
            set(Role.objects.values_list("name", flat=True)),
            {"superadmin", "admin", "teacher", "student"},
        )
        self.assertFalse(AccessRule.objects.filter(role__name="student").exists())
        teacher_rule = AccessRule.objects.get(role__name="teacher", element__key="module")
        self.assertTrue(teacher_rule.can_create)
        self.assertTrue(teacher_rule.can_update_own)
        self.assertFalse(teacher_rule.can_delete_all)

        self.assertEqual(User.objects.count(), 4)
        self.assertEqual(Module.objects.count(), 2)
        self.assertEqual(Module.objects.get(slug="a-module").lessons.count(), 3)

    def test_seed_is_idempotent(self):
        self.run_seed()
        self.run_seed()

        self.assertEqual(User.objects.count(), 4)
        self.assertEqual(Module.objects.count(), 2)
        self.assertEqual(Lesson.objects.count(), 3)
        self.assertEqual(AccessRule.objects.count(), 6)

    def test_reset_recreates_demo_data(self):
        self.run_seed()
        Module.objects.update(description="edited")

        self.run_seed("--reset")

        self.assertEqual(Module.objects.count(), 2)
        self.assertFalse(Module.objects.filter(description="edited").exists())
