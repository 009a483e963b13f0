from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from apps.domains.points.models import PointCategory, PointTransaction
from apps.domains.points.services.backfill import award_week
from apps.domains.questions.services import lifecycle_service

pytestmark = pytest.mark.django_db


@pytest.fixture
def lifecycle_done(student, other_student, module, make_question, ctx_for, assign):
    """
    One question validated and responded to, with the ledger wiped as if
    the awards had never been written.
    """
    q = make_question(module=module, author=student)
    assign(other_student, q)
    lifecycle_service.validate_question(ctx=ctx_for(other_student, week=2), question_id=q.id, data={"valid": True})
    lifecycle_service.respond_to_validation(ctx=ctx_for(student, week=3), question_id=q.id, data={"agreed": True})
    PointTransaction.objects.all().delete()
    return q


def test_each_week_pays_the_right_person(student, other_student, lifecycle_done):
    assert [tx.student_id for tx in award_week(1)] == [student.id]
    assert [tx.student_id for tx in award_week(2)] == [other_student.id]
    assert [tx.student_id for tx in award_week(3)] == [student.id]

    reasons = set(PointTransaction.objects.values_list("reason", flat=True))
    assert reasons == {
        "Vytvorenie otázky v týždni 1",
        "Validácia otázky v týždni 2",
        "Reakcia na validáciu v týždni 3",
    }


def test_sweep_skips_points_already_in_ledger(student, module, make_question, ctx_for, question_payload):
    lifecycle_service.create_question(ctx=ctx_for(student, week=1), module=module, data=question_payload)
    assert award_week(1) == []
    assert PointTransaction.objects.filter(category=PointCategory.QUESTION_CREATION).count() == 1


def test_sweep_filters_modules(student, make_module, make_question):
    a, b = make_module(), make_module()
    make_question(module=a, author=student)
    make_question(module=b, author=student)

    created = award_week(1, module_ids=[b.id])
    assert [tx.module_id for tx in created] == [b.id]


def test_sweep_ignores_teacher_questions(teacher, module, make_question):
    make_question(module=module, author=teacher)
    assert award_week(1) == []


def test_command_runs_all_weeks(lifecycle_done):
    out = StringIO()
    call_command("award_week_points", "--all", stdout=out)
    assert "done, 3 point(s) awarded" in out.getvalue()


def test_command_needs_a_week():
    with pytest.raises(CommandError):
        call_command("award_week_points")
