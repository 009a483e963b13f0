# PATH: apps/api/v1/urls.py
from django.urls import path, include

urlpatterns = [
    # =========================
    # Identity
    # =========================
    path("core/", include("apps.core.urls")),

    # =========================
    # Domain APIs
    # =========================
    path("subjects/", include("apps.domains.subjects.urls")),
    path("questions/", include("apps.domains.questions.urls")),
    path("points/", include("apps.domains.points.urls")),
]
