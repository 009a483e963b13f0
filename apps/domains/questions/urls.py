from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    QuestionViewSet,
    QuestionAssignmentView,
    QuestionAssignmentStatsView,
    TeacherValidatedQuestionListView,
    TeacherValidatedQuestionCountView,
)

router = DefaultRouter()

# =========================
# Question CRUD + lifecycle actions
# =========================
router.register(r"questions", QuestionViewSet, basename="questions")

urlpatterns = [
    # =========================
    # Peer validation (week 2)
    # =========================
    path("assignments/", QuestionAssignmentView.as_view(), name="question-assignments"),
    path("assignments/stats/", QuestionAssignmentStatsView.as_view(), name="question-assignment-stats"),

    # =========================
    # Teacher validated pool
    # =========================
    path("teacher-validated/", TeacherValidatedQuestionListView.as_view(), name="teacher-validated-questions"),
    path(
        "teacher-validated/count/",
        TeacherValidatedQuestionCountView.as_view(),
        name="teacher-validated-questions-count",
    ),

    path("", include(router.urls)),
]
