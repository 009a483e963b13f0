from types import SimpleNamespace

import pytest

from apps.domains.points.services.aggregator import aggregate, build_users_points_summary
from apps.domains.points.services.bucketer import ModuleRef
from apps.api.common.exceptions import DomainValidationError

M1 = ModuleRef(id=10, title="Cells", question_ids=frozenset({101}))
M2 = ModuleRef(id=20, title="Genetics", question_ids=frozenset())


def tx(points, category="question_creation", reason="", question_id=None, module_id=None):
    return SimpleNamespace(
        points=points,
        category=category,
        reason=reason,
        question_id=question_id,
        module_id=module_id,
    )


ROWS = [
    tx(1, question_id=101),
    tx(1, category="question_validation", reason="Validácia otázky v týždni 5"),
    tx(2, category="question_reparation", module_id=20),
    tx(4, category="test_performance"),
    tx(3, category="other", reason="week 4"),
]


def test_total_is_plain_sum_of_rows():
    result = aggregate(ROWS, [M1, M2])
    assert result.total_points == sum(r.points for r in ROWS) == 11


def test_module_breakdown_and_extra():
    result = aggregate(ROWS, [M1, M2])

    assert len(result.modules) == 12
    first, second = result.modules[0], result.modules[1]

    assert first["moduleId"] == "10"
    assert first["title"] == "Cells"
    assert first["question_creation"] == 1

    assert second["moduleId"] == "20"
    assert second["question_validation"] == 1
    assert second["question_reparation"] == 2

    assert result.modules[2]["moduleId"] == "empty-2"
    assert result.modules[2]["title"] is None

    assert result.extra == {
        "test_performance": 4,
        "forum_participation": 0,
        "project_work": 0,
        "other": 3,
    }
    assert result.by_category["question_creation"] == 1
    assert result.by_category["other"] == 3


def test_breakdown_adds_up_to_total():
    result = aggregate(ROWS, [M1, M2])
    module_sum = sum(
        row["question_creation"] + row["question_validation"] + row["question_reparation"]
        for row in result.modules
    )
    assert module_sum + sum(result.extra.values()) == result.total_points


def test_total_unchanged_without_modules():
    with_modules = aggregate(ROWS, [M1, M2])
    without = aggregate(ROWS, [])
    assert without.total_points == with_modules.total_points
    assert without.modules[0]["moduleId"] == "empty-0"


def test_repeated_aggregation_is_identical():
    assert aggregate(ROWS, [M1, M2]).modules == aggregate(ROWS, [M1, M2]).modules


def test_empty_ledger():
    result = aggregate([], [M1])
    assert result.total_points == 0
    assert all(row["question_creation"] == 0 for row in result.modules)


@pytest.mark.django_db
@pytest.mark.parametrize("user_ids", [None, [], "1,2", {"id": 1}])
def test_summary_requires_user_id_list(user_ids):
    with pytest.raises(DomainValidationError):
        build_users_points_summary(user_ids=user_ids)


@pytest.mark.django_db
def test_summary_shape_and_order(student, other_student, module, make_tx):
    make_tx(student=student, points=1, module=module)
    make_tx(student=student, points=2, category="project_work")
    make_tx(student=other_student, points=5, category="other")

    data = build_users_points_summary(
        user_ids=[other_student.id, str(student.id), 999999],
        subject_id=module.subject_id,
    )

    assert [row["user"]["id"] for row in data] == [other_student.id, student.id]

    points = data[1]["points"]
    assert points["totalPoints"] == 3
    assert sum(d["points"] for d in points["details"]) == points["totalPoints"]
    assert points["modules"][0]["moduleId"] == str(module.id)
    assert points["modules"][0]["question_creation"] == 1
    assert points["extra"]["project_work"] == 2
