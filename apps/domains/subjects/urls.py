from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    SubjectViewSet,
    ModuleViewSet,
)

router = DefaultRouter()

# =========================
# Module directory
# =========================
router.register(r"subjects", SubjectViewSet, basename="subjects")
router.register(r"modules", ModuleViewSet, basename="modules")

urlpatterns = [
    path("", include(router.urls)),
]
