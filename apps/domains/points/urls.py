from django.urls import path

from .views import (
    AwardCustomPointsView,
    AwardWeekView,
    ReconcileView,
    UpdatePointView,
    UserPointsSummaryView,
    UserPointsView,
    UsersPointsSummaryView,
)

urlpatterns = [
    # =========================
    # Read side
    # =========================
    path("users/summary/", UsersPointsSummaryView.as_view(), name="points-users-summary"),
    path("users/<int:user_id>/", UserPointsView.as_view(), name="points-user"),
    path("users/<int:user_id>/summary/", UserPointsSummaryView.as_view(), name="points-user-summary"),

    # =========================
    # Ledger edits (teacher)
    # =========================
    path("award/", AwardCustomPointsView.as_view(), name="points-award-custom"),
    path("award/week1/", AwardWeekView.as_view(week=1), name="points-award-week1"),
    path("award/week2/", AwardWeekView.as_view(week=2), name="points-award-week2"),
    path("award/week3/", AwardWeekView.as_view(week=3), name="points-award-week3"),
    path("reconcile/", ReconcileView.as_view(), name="points-reconcile"),
    path("<int:point_id>/", UpdatePointView.as_view(), name="points-update"),
]
