"""Routing for module and lesson endpoints."""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import LessonViewSet, ModuleViewSet

router = DefaultRouter()
router.register(r"modules", ModuleViewSet, basename="module")
router.register(r"lessons", LessonViewSet, basename="lesson")

urlpatterns = [
    path("", include(router.urls)),
]
