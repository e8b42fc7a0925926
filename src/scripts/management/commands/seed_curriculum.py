"""Seed roles, business elements, capability grants, and demo content."""

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from access_control.models import AccessRule, BusinessElement, Role
from curriculum.models import ContentStatus, Lesson, Module, ModuleLesson
from curriculum.slugs import unique_slug

ROLE_NAMES = [Role.SUPERADMIN, Role.ADMIN, Role.TEACHER, Role.STUDENT]
ELEMENT_KEYS = ["module", "lesson"]

# Grants per role on every element; roles without an entry cannot mutate.
ROLE_GRANTS = {
    Role.SUPERADMIN: {"can_create": True, "can_update_all": True, "can_delete_all": True},
    Role.ADMIN: {"can_create": True, "can_update_all": True, "can_delete_all": True},
    Role.TEACHER: {"can_create": True, "can_update_own": True},
}

DEMO_PASSWORD = "changeme123"
DEMO_USERS = {
    Role.SUPERADMIN: "superadmin@example.com",
    Role.ADMIN: "admin@example.com",
    Role.TEACHER: "teacher@example.com",
    Role.STUDENT: "student@example.com",
}


def create_seed_roles() -> dict[str, Role]:
    """Create the base roles if missing and return a name -> Role map."""
    return {name: Role.objects.get_or_create(name=name)[0] for name in ROLE_NAMES}


def create_seed_elements() -> dict[str, BusinessElement]:
    return {key: BusinessElement.objects.get_or_create(key=key)[0] for key in ELEMENT_KEYS}


def create_seed_rules(roles: dict[str, Role], elements: dict[str, BusinessElement]) -> None:
    """Create or reset the grants in ROLE_GRANTS for every element."""
    flags = ["can_create", "can_update_own", "can_update_all", "can_delete_own", "can_delete_all"]
    for role_name, grants in ROLE_GRANTS.items():
        for element in elements.values():
            AccessRule.objects.update_or_create(
                role=roles[role_name],
                element=element,
                defaults={flag: grants.get(flag, False) for flag in flags},
            )


class Command(BaseCommand):
    help = (
        "Seed roles, capability grants, demo users, modules, and lessons. "
        "Use --reset to remove previously seeded data first."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--reset",
            action="store_true",
            help="Delete seeded grants, demo users, and their content before seeding.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        if options["reset"]:
            self._reset()

        self.stdout.write("Seeding roles and grants...")
        roles = create_seed_roles()
        elements = create_seed_elements()
        create_seed_rules(roles, elements)
        users = self._create_demo_users(roles)
        self._create_demo_content(users)
        self.stdout.write(self.style.SUCCESS("Seed completed."))

    def _reset(self) -> None:
        self.stdout.write("Removing previously seeded data...")
        User = get_user_model()
        demo_users = User.objects.filter(email__in=DEMO_USERS.values())
        Module.objects.filter(creator__in=demo_users).delete()
        Lesson.objects.filter(creator__in=demo_users).delete()
        demo_users.delete()
        AccessRule.objects.filter(element__key__in=ELEMENT_KEYS).delete()
        self.stdout.write(self.style.WARNING("Seeded data cleared."))

    @staticmethod
    def _create_demo_users(roles: dict[str, Role]) -> dict[str, object]:
        User = get_user_model()
        users = {}
        for role_name, email in DEMO_USERS.items():
            user = User.objects.filter(email=email).first()
            if user is None:
                user = User.objects.create_user(
                    email,
                    DEMO_PASSWORD,
                    role=roles[role_name],
                    first_name=role_name.capitalize(),
                    is_staff=role_name == Role.SUPERADMIN,
                    is_superuser=role_name == Role.SUPERADMIN,
                )
            users[role_name] = user
        return users

    @staticmethod
    def _create_demo_content(users: dict[str, object]) -> None:
        teacher = users[Role.TEACHER]
        if Module.objects.filter(creator=teacher).exists():
            return

        lessons = [
            Lesson.objects.create(
                name=name,
                slug=unique_slug(Lesson, name),
                description=f"{name} walkthrough.",
                status=ContentStatus.PUBLISHED,
                creator=teacher,
            )
            for name in ("Variables", "Control Flow", "Functions")
        ]
        published = Module.objects.create(
            name="A Module",
            slug=unique_slug(Module, "A Module"),
            description="Contains Lessons.",
            status=ContentStatus.PUBLISHED,
            creator=teacher,
        )
        draft = Module.objects.create(
            name="Draft Module",
            slug=unique_slug(Module, "Draft Module"),
            description="Work in progress.",
            creator=teacher,
        )
        ModuleLesson.objects.bulk_create(
            [ModuleLesson(module=published, lesson=lesson) for lesson in lessons]
            + [ModuleLesson(module=draft, lesson=lessons[-1])]
        )
