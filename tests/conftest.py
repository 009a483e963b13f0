# tests/conftest.py
from datetime import timedelta
from itertools import count

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from apps.core.context import CourseContext
from apps.core.models import User
from apps.domains.points.models import PointCategory, PointTransaction
from apps.domains.questions.models import AssignedQuestion, Question, ValidationAssignment
from apps.domains.subjects.models import Module, Subject

_seq = count(1)


# --------------------------------------------------
# users
# --------------------------------------------------

@pytest.fixture
def make_user(db):
    def _make(role=User.Role.STUDENT, **kwargs):
        n = next(_seq)
        return User.objects.create_user(
            username=kwargs.pop("username", f"user{n}"),
            password="pass1234",
            name=kwargs.pop("name", f"Name{n}"),
            surname=kwargs.pop("surname", f"Surname{n}"),
            role=role,
            **kwargs,
        )
    return _make


@pytest.fixture
def student(make_user):
    return make_user()


@pytest.fixture
def other_student(make_user):
    return make_user()


@pytest.fixture
def teacher(make_user):
    return make_user(role=User.Role.TEACHER)


# --------------------------------------------------
# module directory
# --------------------------------------------------

@pytest.fixture
def subject(db):
    return Subject.objects.create(name="Biology", code="bio101")


@pytest.fixture
def make_module(subject):
    def _make(*, week=1, title=None, required=2, subject_obj=None, position=None):
        """
        Module whose current week (today) is `week`.
        """
        n = next(_seq)
        start = timezone.localdate() - timedelta(days=7 * (week - 1))
        return Module.objects.create(
            subject=subject_obj or subject,
            title=title or f"Module {n}",
            week_number=position or n,
            date_start=start,
            date_end=start + timedelta(days=20),
            required_questions_per_user=required,
        )
    return _make


@pytest.fixture
def module(make_module):
    return make_module(title="Cells")


# --------------------------------------------------
# questions / ledger
# --------------------------------------------------

@pytest.fixture
def make_question(db):
    def _make(*, module, author, **kwargs):
        n = next(_seq)
        return Question.objects.create(
            module=module,
            created_by=author,
            text=kwargs.pop("text", f"Question {n}?"),
            options=kwargs.pop("options", {"a": "one", "b": "two", "c": "three", "d": "four"}),
            correct=kwargs.pop("correct", "a"),
            **kwargs,
        )
    return _make


@pytest.fixture
def make_tx(db):
    def _make(*, student, points=1, category=PointCategory.QUESTION_CREATION, reason="test", **kwargs):
        return PointTransaction.objects.create(
            student=student,
            points=points,
            category=category,
            reason=reason,
            **kwargs,
        )
    return _make


@pytest.fixture
def question_payload():
    return {
        "text": "What is the powerhouse of the cell?",
        "options": {"a": "Mitochondria", "b": "Nucleus", "c": "Ribosome", "d": "Golgi"},
        "correct": "a",
    }


@pytest.fixture
def assign(db):
    def _assign(student, *questions, week_number=2):
        """
        Hand `questions` (same module) to `student` for peer validation.
        """
        assignment, _ = ValidationAssignment.objects.get_or_create(
            student=student,
            module=questions[0].module,
            week_number=week_number,
        )
        for q in questions:
            AssignedQuestion.objects.get_or_create(
                assignment=assignment,
                question=q,
                defaults={"position": assignment.items.count()},
            )
        return assignment
    return _assign


# --------------------------------------------------
# context / client
# --------------------------------------------------

@pytest.fixture
def ctx_for():
    def _make(user, week=None, subject_id=None):
        return CourseContext(user=user, subject_id=subject_id, week_override=week)
    return _make


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_as(api_client):
    def _as(user):
        api_client.force_authenticate(user=user)
        return api_client
    return _as
