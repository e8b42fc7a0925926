"""API tests for /modules/: permissions, filters, slugs, and lesson links."""

from __future__ import annotations

from rest_framework.test import APIClient

from access_control.models import Role
from curriculum.models import Lesson, Module, ModuleLesson
from tests.utils import FakeRedisTestCase, create_lesson, create_module, create_user, seed_basics

READ_ONLY = {"read": True, "update": False, "create": False, "delete": False}
OWNER = {"read": True, "update": True, "create": True, "delete": False}
FULL = {"read": True, "update": True, "create": True, "delete": True}


class ModuleApiTestCase(FakeRedisTestCase):
    @classmethod
    def setUpTestData(cls):
        cls.roles, _ = seed_basics()
        cls.superadmin = create_user("super@test.com", cls.roles[Role.SUPERADMIN])
        cls.admin = create_user("admin@test.com", cls.roles[Role.ADMIN])
        cls.teacher = create_user("teacher@test.com", cls.roles[Role.TEACHER])
        cls.other_teacher = create_user("teacher2@test.com", cls.roles[Role.TEACHER])
        cls.student = create_user("student@test.com", cls.roles[Role.STUDENT])

        cls.lesson_a = create_lesson("Lesson A", cls.teacher)
        cls.lesson_b = create_lesson("Lesson B", cls.teacher)
        cls.lesson_c = create_lesson("Lesson C", cls.teacher)

        cls.teacher_module = create_module(
            "Intro", cls.teacher, lessons=[cls.lesson_a], description="Contains Lessons.", status="published"
        )
        cls.draft_module = create_module("Sketch", cls.teacher, status="draft")
        cls.admin_module = create_module("Admin Notes", cls.admin, status="published")

    def detail_url(self, module) -> str:
        pk = module.pk if isinstance(module, Module) else module
        return f"/modules/{pk}/"


class ModuleReadTests(ModuleApiTestCase):
    def test_anonymous_detail_is_read_only(self):
        response = APIClient().get(self.detail_url(self.teacher_module))
        self.assertEqual(response.status_code, 200)

        body = response.json()["module"]
        self.assertEqual(body["name"], "Intro")
        self.assertEqual(body["slug"], "intro")
        self.assertEqual(body["status"], "published")
        self.assertEqual(body["creatorId"], str(self.teacher.id))
        self.assertEqual(body["lessons"], [{"id": self.lesson_a.id, "name": "Lesson A", "type": "lessons"}])
        self.assertEqual(body["permissions"], READ_ONLY)
        self.assertIn("createdAt", body)
        self.assertIn("updatedAt", body)

    def test_missing_module_returns_404(self):
        response = APIClient().get(self.detail_url(999999))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"errors": ["No matching record found"]})

    def test_malformed_id_returns_404(self):
        response = APIClient().get("/modules/not-a-number/")
        self.assertEqual(response.status_code, 404)

    def test_detail_permissions_follow_viewer(self):
        cases = [
            (self.superadmin, self.teacher_module, FULL),
            (self.teacher, self.teacher_module, OWNER),
            (self.teacher, self.draft_module, OWNER),
            (self.other_teacher, self.teacher_module, READ_ONLY),
            (self.student, self.teacher_module, READ_ONLY),
            (self.admin, self.teacher_module, READ_ONLY),
            (self.admin, self.admin_module, OWNER),
        ]
        for user, module, expected in cases:
            with self.subTest(user=user.email, module=module.name):
                response = self.auth_client(user).get(self.detail_url(module))
                self.assertEqual(response.status_code, 200)
                self.assertEqual(response.json()["module"]["permissions"], expected)

    def test_list_attaches_permission_per_item(self):
        response = self.auth_client(self.teacher).get("/modules/")
        self.assertEqual(response.status_code, 200)

        modules = {item["name"]: item for item in response.json()["modules"]}
        self.assertEqual(set(modules), {"Intro", "Sketch", "Admin Notes"})
        self.assertEqual(modules["Intro"]["permission"], OWNER)
        self.assertEqual(modules["Sketch"]["permission"], OWNER)
        self.assertEqual(modules["Admin Notes"]["permission"], READ_ONLY)
        self.assertNotIn("permissions", modules["Intro"])

    def test_anonymous_list_is_read_only(self):
        response = APIClient().get("/modules/")
        self.assertEqual(response.status_code, 200)
        for item in response.json()["modules"]:
            self.assertEqual(item["permission"], READ_ONLY)

    def test_list_filters_by_known_columns(self):
        client = APIClient()

        drafts = client.get("/modules/", {"status": "draft"}).json()["modules"]
        self.assertEqual([item["name"] for item in drafts], ["Sketch"])

        by_creator = client.get("/modules/", {"creatorId": str(self.admin.id)}).json()["modules"]
        self.assertEqual([item["name"] for item in by_creator], ["Admin Notes"])

        by_slug = client.get("/modules/", {"slug": "intro"}).json()["modules"]
        self.assertEqual([item["id"] for item in by_slug], [self.teacher_module.id])

    def test_list_with_unknown_filter_key_returns_400(self):
        response = APIClient().get("/modules/", {"colour": "blue"})
        self.assertEqual(response.status_code, 400)
        errors = response.json()["errors"]
        self.assertIsInstance(errors, list)
        self.assertTrue(errors)

    def test_list_with_uncoercible_filter_value_returns_400(self):
        response = APIClient().get("/modules/", {"id": "abc"})
        self.assertEqual(response.status_code, 400)
        self.assertTrue(response.json()["errors"])


class ModuleCreateTests(ModuleApiTestCase):
    def test_create_requires_authentication(self):
        response = APIClient().post("/modules/", {"module": {"name": "Nope"}}, format="json")
        self.assertEqual(response.status_code, 401)
        self.assertTrue(response.json()["errors"])

    def test_role_without_grant_is_forbidden(self):
        response = self.auth_client(self.student).post("/modules/", {"module": {"name": "Nope"}}, format="json")
        self.assertEqual(response.status_code, 403)
        self.assertFalse(Module.objects.filter(name="Nope").exists())

    def test_invalid_token_returns_401(self):
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION="Bearer not-a-jwt")
        response = client.get("/modules/")
        self.assertEqual(response.status_code, 401)

    def test_create_returns_201_with_owner_permissions(self):
        payload = {"module": {"name": "My Module", "description": "Basics.", "status": "published"}}
        response = self.auth_client(self.teacher).post("/modules/", payload, format="json")
        self.assertEqual(response.status_code, 201)

        body = response.json()["module"]
        self.assertEqual(body["slug"], "my-module")
        self.assertEqual(body["creatorId"], str(self.teacher.id))
        self.assertEqual(body["status"], "published")
        self.assertEqual(body["lessons"], [])
        self.assertEqual(body["permissions"], OWNER)

    def test_same_name_yields_distinct_slug(self):
        client = self.auth_client(self.teacher)
        first = client.post("/modules/", {"module": {"name": "My Module"}}, format="json").json()["module"]
        second = client.post("/modules/", {"module": {"name": "My Module"}}, format="json").json()["module"]

        self.assertEqual(first["slug"], "my-module")
        self.assertEqual(second["slug"], "my-module-1")

    def test_status_defaults_to_draft(self):
        response = self.auth_client(self.teacher).post("/modules/", {"module": {"name": "Fresh"}}, format="json")
        self.assertEqual(response.json()["module"]["status"], "draft")

    def test_explicit_creator_is_honoured(self):
        payload = {"module": {"name": "Delegated", "creatorId": str(self.other_teacher.id)}}
        response = self.auth_client(self.superadmin).post("/modules/", payload, format="json")
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["module"]["creatorId"], str(self.other_teacher.id))

    def test_invalid_payloads_return_400(self):
        client = self.auth_client(self.teacher)
        cases = [
            {"module": {"description": "no name"}},
            {"module": {"name": "Bad", "status": "archived"}},
            {"module": {"name": "Ghost", "creatorId": "00000000-0000-0000-0000-000000000000"}},
            {"name": "not wrapped"},
            {"module": "not an object"},
        ]
        for payload in cases:
            with self.subTest(payload=payload):
                response = client.post("/modules/", payload, format="json")
                self.assertEqual(response.status_code, 400)
                self.assertTrue(response.json()["errors"])

    def test_create_can_link_lessons(self):
        payload = {"module": {"name": "Linked", "lessons": [self.lesson_b.id, {"id": self.lesson_c.id}]}}
        response = self.auth_client(self.teacher).post("/modules/", payload, format="json")
        self.assertEqual(response.status_code, 201)
        self.assertEqual(
            [lesson["id"] for lesson in response.json()["module"]["lessons"]],
            [self.lesson_b.id, self.lesson_c.id],
        )


class ModuleUpdateTests(ModuleApiTestCase):
    def test_update_replaces_lessons_entirely(self):
        client = self.auth_client(self.teacher)
        url = self.detail_url(self.teacher_module)

        response = client.put(url, {"module": {"lessons": [self.lesson_a.id, self.lesson_b.id]}}, format="json")
        self.assertEqual(response.status_code, 201)
        self.assertEqual(
            [lesson["id"] for lesson in response.json()["module"]["lessons"]],
            [self.lesson_a.id, self.lesson_b.id],
        )

        response = client.put(url, {"module": {"lessons": [self.lesson_c.id]}}, format="json")
        self.assertEqual(response.status_code, 201)
        self.assertEqual([lesson["id"] for lesson in response.json()["module"]["lessons"]], [self.lesson_c.id])
        self.assertEqual(
            list(ModuleLesson.objects.filter(module=self.teacher_module).values_list("lesson_id", flat=True)),
            [self.lesson_c.id],
        )

    def test_update_without_lessons_keeps_links(self):
        response = self.auth_client(self.teacher).put(
            self.detail_url(self.teacher_module), {"module": {"description": "Updated."}}, format="json"
        )
        self.assertEqual(response.status_code, 201)
        body = response.json()["module"]
        self.assertEqual(body["description"], "Updated.")
        self.assertEqual([lesson["id"] for lesson in body["lessons"]], [self.lesson_a.id])
        self.assertEqual(body["permissions"], OWNER)

    def test_empty_lesson_list_clears_links(self):
        response = self.auth_client(self.teacher).put(
            self.detail_url(self.teacher_module), {"module": {"lessons": []}}, format="json"
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["module"]["lessons"], [])

    def test_failed_lesson_replacement_changes_nothing(self):
        response = self.auth_client(self.teacher).put(
            self.detail_url(self.teacher_module),
            {"module": {"name": "Renamed", "lessons": [self.lesson_b.id, 999999]}},
            format="json",
        )
        self.assertEqual(response.status_code, 400)
        self.assertTrue(response.json()["errors"])

        self.teacher_module.refresh_from_db()
        self.assertEqual(self.teacher_module.name, "Intro")
        self.assertEqual(list(self.teacher_module.lessons.values_list("id", flat=True)), [self.lesson_a.id])

    def test_rename_regenerates_slug(self):
        response = self.auth_client(self.teacher).put(
            self.detail_url(self.draft_module), {"module": {"name": "Admin Notes", "status": "published"}},
            format="json",
        )
        self.assertEqual(response.status_code, 201)
        body = response.json()["module"]
        self.assertEqual(body["slug"], "admin-notes-1")
        self.assertEqual(body["status"], "published")

    def test_creator_cannot_be_reassigned(self):
        response = self.auth_client(self.teacher).put(
            self.detail_url(self.teacher_module), {"module": {"creatorId": str(self.student.id)}}, format="json"
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["module"]["creatorId"], str(self.teacher.id))

    def test_teacher_cannot_update_foreign_module(self):
        response = self.auth_client(self.other_teacher).put(
            self.detail_url(self.teacher_module), {"module": {"name": "Hijack"}}, format="json"
        )
        self.assertEqual(response.status_code, 403)

    def test_admin_can_update_any_module(self):
        response = self.auth_client(self.admin).put(
            self.detail_url(self.teacher_module), {"module": {"description": "Reviewed."}}, format="json"
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["module"]["permissions"], READ_ONLY)

    def test_update_missing_module_returns_404(self):
        response = self.auth_client(self.admin).put(
            self.detail_url(999999), {"module": {"name": "Nothing"}}, format="json"
        )
        self.assertEqual(response.status_code, 404)

    def test_patch_is_not_routed(self):
        response = self.auth_client(self.admin).patch(
            self.detail_url(self.teacher_module), {"module": {"name": "x"}}, format="json"
        )
        self.assertEqual(response.status_code, 405)


class ModuleDeleteTests(ModuleApiTestCase):
    def test_delete_missing_module_returns_400(self):
        response = self.auth_client(self.admin).delete(self.detail_url(999999))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"errors": ["Bad Request"]})

    def test_delete_returns_last_known_state(self):
        module_id = self.teacher_module.id
        response = self.auth_client(self.admin).delete(self.detail_url(module_id))
        self.assertEqual(response.status_code, 200)

        body = response.json()["module"]
        self.assertEqual(body["id"], module_id)
        self.assertEqual(body["name"], "Intro")
        self.assertEqual(body["lessons"], [{"id": self.lesson_a.id, "name": "Lesson A", "type": "lessons"}])
        self.assertFalse(Module.objects.filter(pk=module_id).exists())
        self.assertFalse(ModuleLesson.objects.filter(module_id=module_id).exists())
        self.assertTrue(Lesson.objects.filter(pk=self.lesson_a.pk).exists())

    def test_teacher_without_delete_grant_is_forbidden(self):
        response = self.auth_client(self.teacher).delete(self.detail_url(self.teacher_module))
        self.assertEqual(response.status_code, 403)
        self.assertTrue(Module.objects.filter(pk=self.teacher_module.pk).exists())

    def test_delete_requires_authentication(self):
        response = APIClient().delete(self.detail_url(self.teacher_module))
        self.assertEqual(response.status_code, 401)
