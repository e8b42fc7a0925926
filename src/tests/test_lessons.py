"""API tests for /lessons/."""

from __future__ import annotations

from rest_framework.test import APIClient

from access_control.models import Role
from curriculum.models import Lesson, ModuleLesson
from tests.utils import FakeRedisTestCase, create_lesson, create_module, create_user, seed_basics


class LessonApiTests(FakeRedisTestCase):
    @classmethod
    def setUpTestData(cls):
        cls.roles, _ = seed_basics()
        cls.admin = create_user("admin@test.com", cls.roles[Role.ADMIN])
        cls.teacher = create_user("teacher@test.com", cls.roles[Role.TEACHER])
        cls.student = create_user("student@test.com", cls.roles[Role.STUDENT])

        cls.lesson = create_lesson("Loops", cls.teacher, status="published")
        cls.module = create_module("Basics", cls.teacher, lessons=[cls.lesson])

    def test_detail_lists_parent_modules(self):
        response = APIClient().get(f"/lessons/{self.lesson.pk}/")
        self.assertEqual(response.status_code, 200)

        body = response.json()["lesson"]
        self.assertEqual(body["slug"], "loops")
        self.assertEqual(body["modules"], [{"id": self.module.id, "name": "Basics", "type": "modules"}])
        self.assertEqual(body["permissions"], {"read": True, "update": False, "create": False, "delete": False})

    def test_list_is_keyed_by_plural_name(self):
        response = self.auth_client(self.teacher).get("/lessons/", {"status": "published"})
        self.assertEqual(response.status_code, 200)

        lessons = response.json()["lessons"]
        self.assertEqual([item["name"] for item in lessons], ["Loops"])
        self.assertTrue(lessons[0]["permission"]["update"])

    def test_teacher_creates_and_updates_lesson(self):
        client = self.auth_client(self.teacher)
        created = client.post("/lessons/", {"lesson": {"name": "Loops"}}, format="json")
        self.assertEqual(created.status_code, 201)
        body = created.json()["lesson"]
        self.assertEqual(body["slug"], "loops-1")

        updated = client.put(f"/lessons/{body['id']}/", {"lesson": {"status": "published"}}, format="json")
        self.assertEqual(updated.status_code, 201)
        self.assertEqual(updated.json()["lesson"]["status"], "published")

    def test_student_cannot_create_lessons(self):
        response = self.auth_client(self.student).post("/lessons/", {"lesson": {"name": "X"}}, format="json")
        self.assertEqual(response.status_code, 403)

    def test_deleting_lesson_unlinks_it_from_modules(self):
        response = self.auth_client(self.admin).delete(f"/lessons/{self.lesson.pk}/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["lesson"]["name"], "Loops")
        self.assertFalse(Lesson.objects.filter(pk=self.lesson.pk).exists())
        self.assertFalse(ModuleLesson.objects.filter(module=self.module).exists())

    def test_delete_missing_lesson_returns_400(self):
        response = self.auth_client(self.admin).delete("/lessons/424242/")
        self.assertEqual(response.status_code, 400)
