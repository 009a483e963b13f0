# apps/domains/points/models.py
from django.conf import settings
from django.db import models

from apps.api.common.models import BaseModel


class PointCategory(models.TextChoices):
    """
    Closed set of ledger categories, shared by ledger / bucketer / aggregator.
    """

    QUESTION_CREATION = "question_creation", "Question creation"
    QUESTION_VALIDATION = "question_validation", "Question validation"
    QUESTION_REPARATION = "question_reparation", "Question reparation"
    TEST_PERFORMANCE = "test_performance", "Test performance"
    FORUM_PARTICIPATION = "forum_participation", "Forum participation"
    PROJECT_WORK = "project_work", "Project work"
    OTHER = "other", "Other"


# bucketed per module in summaries
MODULE_CATEGORIES = (
    PointCategory.QUESTION_CREATION,
    PointCategory.QUESTION_VALIDATION,
    PointCategory.QUESTION_REPARATION,
)

# aggregated independently of week / module
SPECIAL_CATEGORIES = (
    PointCategory.TEST_PERFORMANCE,
    PointCategory.FORUM_PARTICIPATION,
    PointCategory.PROJECT_WORK,
    PointCategory.OTHER,
)


class PointTransaction(BaseModel):
    """
    One point-awarding event of the ledger (append-only).

    - rows are never deleted by the normal flow
    - only `points` / `reason` change, through the ledger service
      (direct edit or reconciliation of an aggregated cell); each change
      bumps `version`
    - `module` / `week_number` are stamped at creation by lifecycle awards,
      older rows rely on `question` or on the week in `reason`
    """

    class EntityType(models.TextChoices):
        QUESTION = "Question", "Question"
        TEST = "Test", "Test"
        FORUM_QUESTION = "ForumQuestion", "Forum question"
        PROJECT = "Project", "Project"

    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="point_transactions",
    )

    # teacher who granted a custom award (null for lifecycle awards)
    assigned_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="granted_point_transactions",
    )

    points = models.IntegerField()

    category = models.CharField(
        max_length=32,
        choices=PointCategory.choices,
        default=PointCategory.OTHER,
    )

    reason = models.CharField(max_length=500)

    related_entity_type = models.CharField(
        max_length=32,
        choices=EntityType.choices,
        blank=True,
        default="",
    )
    related_entity_id = models.PositiveBigIntegerField(null=True, blank=True)

    question = models.ForeignKey(
        "questions.Question",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="point_transactions",
    )
    module = models.ForeignKey(
        "subjects.Module",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="point_transactions",
    )
    week_number = models.PositiveSmallIntegerField(null=True, blank=True)

    # optimistic concurrency for edits
    version = models.PositiveIntegerField(default=1)

    class Meta:
        db_table = "points_transaction"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["student", "-created_at"], name="points_tx_student_created_idx"),
            models.Index(fields=["student", "category", "module"], name="points_tx_student_cat_mod_idx"),
            models.Index(fields=["category"], name="points_tx_category_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(points__gte=0),
                name="points_transaction_points_gte_0",
            ),
        ]

    def __str__(self):
        return f"{self.student_id} {self.category} {self.points:+d} ({self.reason})"

    @property
    def related_entity(self):
        if not self.related_entity_type:
            return None
        return {
            "entity_type": self.related_entity_type,
            "entity_id": self.related_entity_id,
        }
