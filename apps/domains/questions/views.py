# PATH: apps/domains/questions/views.py

from django.db.models import Prefetch
from django_filters.rest_framework import DjangoFilterBackend
from drf_yasg.utils import swagger_auto_schema
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import SearchFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import ModelViewSet

from apps.api.common.exceptions import DomainValidationError, ResourceAbsence
from apps.core.context import context_from_request
from apps.core.permissions import IsTeacherOrAdmin, is_teacher_user
from apps.domains.subjects.selectors import get_module

from .models import AssignedQuestion, Question
from .serializers import (
    QuestionSerializer,
    QuestionWriteSerializer,
    RespondInputSerializer,
    TeacherValidateInputSerializer,
    ValidateInputSerializer,
    AssignedQuestionSerializer,
)
from .services import assignment_service, lifecycle_service


def _module_or_404(raw):
    if raw in (None, ""):
        raise DomainValidationError("module is required")
    try:
        module_id = int(raw)
    except (TypeError, ValueError):
        raise DomainValidationError("module must be an integer")
    module = get_module(module_id)
    if not module:
        raise ResourceAbsence("Module not found")
    return module


def _parse_id_list(raw) -> list[int]:
    if not raw:
        return []
    try:
        return [int(x) for x in str(raw).split(",") if x.strip()]
    except ValueError:
        raise DomainValidationError("module_ids must be a comma separated list of integers")


# ========================================================
# Questions
# ========================================================

class QuestionViewSet(ModelViewSet):
    """
    /api/v1/questions/questions/

    list / retrieve: anyone signed in
    create:          week 1 (points capped per module)
    update:          creator in week 3 / teacher
    destroy:         teacher
    """

    serializer_class = QuestionSerializer
    permission_classes = [IsAuthenticated]

    filter_backends = [DjangoFilterBackend, SearchFilter]
    filterset_fields = ["module", "created_by", "validated_by", "validated_by_teacher", "is_active"]
    search_fields = ["text"]

    def get_queryset(self):
        return (
            Question.objects
            .select_related("module", "created_by")
            .prefetch_related(
                Prefetch("assignment_links", queryset=AssignedQuestion.objects.select_related("assignment"))
            )
            .order_by("-created_at", "-id")
        )

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["ctx"] = context_from_request(self.request)
        return context

    def _render(self, question, *, status_code=status.HTTP_200_OK):
        serializer = self.get_serializer(question)
        return Response(serializer.data, status=status_code)

    @swagger_auto_schema(request_body=QuestionWriteSerializer)
    def create(self, request, *args, **kwargs):
        ctx = context_from_request(request)
        ser = QuestionWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        module = _module_or_404(ser.validated_data.get("module"))
        question = lifecycle_service.create_question(ctx=ctx, module=module, data=ser.validated_data)
        return self._render(question, status_code=status.HTTP_201_CREATED)

    @swagger_auto_schema(request_body=QuestionWriteSerializer)
    def update(self, request, *args, **kwargs):
        ctx = context_from_request(request)
        ser = QuestionWriteSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        question = lifecycle_service.edit_question(
            ctx=ctx,
            question_id=kwargs["pk"],
            data=ser.validated_data,
        )
        return self._render(question)

    def partial_update(self, request, *args, **kwargs):
        return self.update(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        ctx = context_from_request(request)
        lifecycle_service.delete_question(ctx=ctx, question_id=kwargs["pk"])
        return Response(status=status.HTTP_204_NO_CONTENT)

    # --------------------------------------------------
    # lifecycle transitions
    # --------------------------------------------------

    @swagger_auto_schema(request_body=ValidateInputSerializer)
    @action(detail=True, methods=["post"], url_path="validate")
    def validate(self, request, pk=None):
        """
        ValidateQuestion (week 2, peer)
        POST /api/v1/questions/questions/{id}/validate/
        """
        ser = ValidateInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        question = lifecycle_service.validate_question(
            ctx=context_from_request(request),
            question_id=pk,
            data=ser.validated_data,
        )
        return self._render(question)

    @swagger_auto_schema(request_body=RespondInputSerializer)
    @action(detail=True, methods=["post"], url_path="respond")
    def respond(self, request, pk=None):
        """
        RespondToValidation (week 3, creator)
        """
        ser = RespondInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        question = lifecycle_service.respond_to_validation(
            ctx=context_from_request(request),
            question_id=pk,
            data=ser.validated_data,
        )
        return self._render(question)

    @swagger_auto_schema(request_body=TeacherValidateInputSerializer)
    @action(
        detail=True,
        methods=["post"],
        url_path="teacher-validate",
        permission_classes=[IsTeacherOrAdmin],
    )
    def teacher_validate(self, request, pk=None):
        ser = TeacherValidateInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        question = lifecycle_service.teacher_validate_question(
            ctx=context_from_request(request),
            question_id=pk,
            data=ser.validated_data,
        )
        return self._render(question)


# ========================================================
# Peer validation assignments
# ========================================================

class QuestionAssignmentView(APIView):
    """
    GetQuestionAssignments
    GET /api/v1/questions/assignments/?module=<id>[&student=<id>]

    - student: own assignment, created on first call in week 2
    - teacher: read-only view of `student`'s assignment
    """

    permission_classes = [IsAuthenticated]

    def get(self, request):
        ctx = context_from_request(request)
        module = _module_or_404(request.query_params.get("module"))
        serializer_context = {"request": request, "ctx": ctx}

        raw_student = request.query_params.get("student")
        if raw_student and is_teacher_user(request.user):
            assignment = assignment_service.read_assignment(
                student_id=raw_student, module_id=module.id,
            )
            if assignment is None:
                return Response({"data": [], "automaticPoints": 0, "created": False})
            items = AssignedQuestionSerializer(
                assignment.items.all(), many=True, context=serializer_context,
            ).data
            return Response({
                "data": items,
                "automaticPoints": assignment.automatic_points,
                "created": False,
            })

        result = assignment_service.get_or_create_assignment(ctx=ctx, module=module)
        items = AssignedQuestionSerializer(
            result.assignment.items.all(), many=True, context=serializer_context,
        ).data
        return Response(
            {
                "data": items,
                "automaticPoints": result.automatic_points,
                "created": result.created,
            },
            status=status.HTTP_201_CREATED if result.created else status.HTTP_200_OK,
        )


class QuestionAssignmentStatsView(APIView):
    """
    GET /api/v1/questions/assignments/stats/?module=<id>
    """

    permission_classes = [IsTeacherOrAdmin]

    def get(self, request):
        module = _module_or_404(request.query_params.get("module"))
        return Response({"data": assignment_service.assignment_stats(module_id=module.id)})


# ========================================================
# Teacher validated pool (tests)
# ========================================================

class TeacherValidatedQuestionListView(APIView):
    """
    GET /api/v1/questions/teacher-validated/?module_ids=1,2
    """

    permission_classes = [IsAuthenticated]

    def get(self, request):
        module_ids = _parse_id_list(request.query_params.get("module_ids"))
        qs = lifecycle_service.teacher_validated_queryset(module_ids).prefetch_related("assignment_links")
        data = QuestionSerializer(
            qs, many=True, context={"request": request, "ctx": context_from_request(request)},
        ).data
        return Response({"data": data, "count": len(data)})


class TeacherValidatedQuestionCountView(APIView):
    """
    GET /api/v1/questions/teacher-validated/count/?module_ids=1,2
    """

    permission_classes = [IsAuthenticated]

    def get(self, request):
        module_ids = _parse_id_list(request.query_params.get("module_ids"))
        return Response({"count": lifecycle_service.teacher_validated_queryset(module_ids).count()})
