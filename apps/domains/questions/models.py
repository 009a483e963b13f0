from django.conf import settings
from django.db import models

from apps.api.common.models import BaseModel


OPTION_KEYS = ("a", "b", "c", "d")


# ========================================================
# Question
# ========================================================

class Question(BaseModel):
    """
    Multiple-choice question written by a student in week 1 of a module.

    Lifecycle fields are written only through the lifecycle services:
    - peer validation (week 2): validated / validation_comment / validated_by / validated_at
    - creator response (week 3): agreement_agreed / agreement_comment / responded_at
    - teacher validation (any time, independent): validated_by_teacher*
    """

    class Correct(models.TextChoices):
        A = "a", "A"
        B = "b", "B"
        C = "c", "C"
        D = "d", "D"

    class Difficulty(models.TextChoices):
        EASY = "easy", "Easy"
        MEDIUM = "medium", "Medium"
        HARD = "hard", "Hard"

    text = models.TextField()

    # {"a": "...", "b": "...", "c": "...", "d": "..."}
    options = models.JSONField(default=dict)
    correct = models.CharField(max_length=1, choices=Correct.choices)

    difficulty = models.CharField(
        max_length=10,
        choices=Difficulty.choices,
        default=Difficulty.MEDIUM,
    )

    module = models.ForeignKey(
        "subjects.Module",
        on_delete=models.CASCADE,
        related_name="questions",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="created_questions",
    )

    # --------------------------------------------------
    # peer validation
    # --------------------------------------------------
    validated = models.BooleanField(null=True, blank=True)
    validation_comment = models.TextField(blank=True, default="")
    validated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="peer_validated_questions",
    )
    validated_at = models.DateTimeField(null=True, blank=True)

    # --------------------------------------------------
    # creator response to the validation
    # --------------------------------------------------
    agreement_agreed = models.BooleanField(null=True, blank=True)
    agreement_comment = models.TextField(blank=True, default="")
    responded_at = models.DateTimeField(null=True, blank=True)

    # --------------------------------------------------
    # teacher validation (test pool)
    # --------------------------------------------------
    validated_by_teacher = models.BooleanField(null=True, blank=True)
    validated_by_teacher_comment = models.TextField(blank=True, default="")
    validated_by_teacher_at = models.DateTimeField(null=True, blank=True)
    teacher_validator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="teacher_validated_questions",
    )

    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "questions_question"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["module", "created_by"], name="questions_q_module_creator_idx"),
            models.Index(fields=["module", "validated_by"], name="questions_q_module_valid_idx"),
            models.Index(fields=["module", "validated_by_teacher"], name="questions_q_module_teacher_idx"),
        ]

    def __str__(self):
        return self.text[:60]

    @property
    def user_agreement(self):
        if self.responded_at is None:
            return None
        return {
            "agreed": self.agreement_agreed,
            "comment": self.agreement_comment,
            "responded_at": self.responded_at,
        }


# ========================================================
# Peer validation assignment (week 2)
# ========================================================

class ValidationAssignment(BaseModel):
    """
    Questions handed to one student for peer validation in one module/week.

    Created once and then only read back, so refreshing never reshuffles
    the set. `automatic_points` records how many validation points were
    granted up front because there were not enough eligible questions.
    """

    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="validation_assignments",
    )
    module = models.ForeignKey(
        "subjects.Module",
        on_delete=models.CASCADE,
        related_name="validation_assignments",
    )
    week_number = models.PositiveSmallIntegerField(default=2)

    automatic_points = models.PositiveIntegerField(default=0)

    questions = models.ManyToManyField(
        Question,
        through="AssignedQuestion",
        related_name="validation_assignments",
    )

    class Meta:
        db_table = "questions_validation_assignment"
        constraints = [
            models.UniqueConstraint(
                fields=["student", "module", "week_number"],
                name="questions_assignment_student_module_week_uniq",
            ),
        ]

    def __str__(self):
        return f"ValidationAssignment student={self.student_id} module={self.module_id} week={self.week_number}"


class AssignedQuestion(models.Model):
    assignment = models.ForeignKey(
        ValidationAssignment,
        on_delete=models.CASCADE,
        related_name="items",
    )
    question = models.ForeignKey(
        Question,
        on_delete=models.CASCADE,
        related_name="assignment_links",
    )
    position = models.PositiveSmallIntegerField(default=0)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "questions_assigned_question"
        ordering = ["position", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["assignment", "question"],
                name="questions_assigned_question_uniq",
            ),
        ]
