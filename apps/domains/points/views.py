# PATH: apps/domains/points/views.py

from drf_yasg.utils import swagger_auto_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.exceptions import PermissionDenied

from apps.core.context import context_from_request
from apps.core.permissions import IsTeacherOrAdmin, is_teacher_user

from .models import PointTransaction
from .serializers import (
    AwardCustomInputSerializer,
    BackfillInputSerializer,
    PointTransactionSerializer,
    ReconcileInputSerializer,
    UpdatePointInputSerializer,
    UsersSummaryInputSerializer,
)
from .services.aggregator import build_user_category_summary, build_users_points_summary
from .services.backfill import award_week
from .services.ledger import award_custom_points, update_point
from .services.reconciliation import reconcile


def _ensure_self_or_teacher(request, user_id) -> None:
    if is_teacher_user(request.user):
        return
    if str(request.user.id) != str(user_id):
        raise PermissionDenied("You can only view your own points.")


# --------------------------------------------------
# Read side
# --------------------------------------------------

class UsersPointsSummaryView(APIView):
    """
    GetUsersPointsSummary
    POST /api/v1/points/users/summary/  {"userIds": [...], "subject_id"?}
    """

    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(request_body=UsersSummaryInputSerializer)
    def post(self, request):
        ctx = context_from_request(request)
        ser = UsersSummaryInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        user_ids = ser.validated_data["userIds"]

        # students only ever see themselves
        for uid in user_ids:
            _ensure_self_or_teacher(request, uid)

        subject_id = ser.validated_data.get("subject_id") or ctx.subject_id
        data = build_users_points_summary(user_ids=user_ids, subject_id=subject_id)
        return Response({"data": data})


class UserPointsView(APIView):
    """
    GET /api/v1/points/users/{user_id}/   transactions, newest first
    """

    permission_classes = [IsAuthenticated]

    def get(self, request, user_id: int):
        _ensure_self_or_teacher(request, user_id)
        qs = PointTransaction.objects.filter(student_id=user_id).order_by("-created_at", "-id")
        return Response({"data": PointTransactionSerializer(qs, many=True).data})


class UserPointsSummaryView(APIView):
    """
    GET /api/v1/points/users/{user_id}/summary/
    """

    permission_classes = [IsAuthenticated]

    def get(self, request, user_id: int):
        _ensure_self_or_teacher(request, user_id)
        return Response(build_user_category_summary(user_id=user_id))


# --------------------------------------------------
# Write side (teacher)
# --------------------------------------------------

class AwardCustomPointsView(APIView):
    """
    AwardCustomPoints (exempt from caps)
    """

    permission_classes = [IsTeacherOrAdmin]

    @swagger_auto_schema(request_body=AwardCustomInputSerializer)
    def post(self, request):
        ser = AwardCustomInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        tx = award_custom_points(
            student_id=data["student_id"],
            points=data["points"],
            reason=data["reason"],
            category=data.get("category"),
            assigned_by=request.user,
        )
        return Response(PointTransactionSerializer(tx).data, status=status.HTTP_201_CREATED)


class UpdatePointView(APIView):
    """
    UpdatePoint
    PATCH /api/v1/points/{point_id}/  {"points"?, "reason"?, "version"?}
    """

    permission_classes = [IsTeacherOrAdmin]

    @swagger_auto_schema(request_body=UpdatePointInputSerializer)
    def patch(self, request, point_id: int):
        ser = UpdatePointInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        tx = update_point(
            point_id=point_id,
            points=data.get("points"),
            reason=data.get("reason"),
            expected_version=data.get("version"),
        )
        return Response(PointTransactionSerializer(tx).data)

    put = patch


class ReconcileView(APIView):
    """
    Edit of one summary cell
    POST /api/v1/points/reconcile/
    """

    permission_classes = [IsTeacherOrAdmin]

    @swagger_auto_schema(request_body=ReconcileInputSerializer)
    def post(self, request):
        ctx = context_from_request(request)
        ser = ReconcileInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        result = reconcile(
            student_id=data["student_id"],
            category=data["category"],
            module_id=data.get("module_id"),
            requested_value=data["value"],
            subject_id=data.get("subject_id") or ctx.subject_id,
        )
        return Response({
            "applied_delta": result.applied_delta,
            "point": PointTransactionSerializer(result.point).data if result.point else None,
            "total_points": result.total_points,
            "match": result.match,
        })


class AwardWeekView(APIView):
    """
    POST /api/v1/points/award/week1|week2|week3/  {"module_ids"?: [...]}
    """

    permission_classes = [IsTeacherOrAdmin]
    week = None

    @swagger_auto_schema(request_body=BackfillInputSerializer)
    def post(self, request):
        ser = BackfillInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        module_ids = ser.validated_data.get("module_ids") or None
        created = award_week(self.week, module_ids=module_ids)
        return Response({
            "awarded": len(created),
            "data": PointTransactionSerializer(created, many=True).data,
        })
