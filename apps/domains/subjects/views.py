# PATH: apps/domains/subjects/views.py

from django.db.models import Prefetch

from rest_framework.viewsets import ReadOnlyModelViewSet
from rest_framework.filters import SearchFilter
from django_filters.rest_framework import DjangoFilterBackend

from apps.domains.questions.models import Question

from .models import Subject, Module
from .serializers import SubjectSerializer, ModuleSerializer


class SubjectViewSet(ReadOnlyModelViewSet):
    queryset = Subject.objects.filter(is_active=True)
    serializer_class = SubjectSerializer

    filter_backends = [DjangoFilterBackend, SearchFilter]
    filterset_fields = ["code"]
    search_fields = ["name", "code"]


class ModuleViewSet(ReadOnlyModelViewSet):
    """
    listModulesForSubject(subject) / getModule(id)
    GET /api/v1/subjects/modules/?subject=<id>
    """
    serializer_class = ModuleSerializer
    pagination_class = None

    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["subject", "is_active"]

    def get_queryset(self):
        return (
            Module.objects
            .select_related("subject")
            .prefetch_related(
                Prefetch("questions", queryset=Question.objects.only("id", "module_id").order_by("id"))
            )
            .order_by("week_number", "date_start", "id")
        )
