import math
from datetime import date, timedelta

from django.conf import settings
from django.db import models

from apps.api.common.models import TimestampModel


# ========================================================
# Subject
# ========================================================

class Subject(TimestampModel):
    name = models.CharField(max_length=255, unique=True)
    code = models.CharField(max_length=50, unique=True)  # e.g. "MATH101"
    description = models.TextField(blank=True)

    teachers = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        related_name="taught_subjects",
        blank=True,
    )
    students = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        related_name="enrolled_subjects",
        blank=True,
    )

    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["name"]

    def save(self, *args, **kwargs):
        self.code = (self.code or "").strip().upper()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.code} {self.name}"


# ========================================================
# Module
# ========================================================

class Module(TimestampModel):
    """
    One module of a subject: a date window split into weeks.

    week 1: students create questions
    week 2: peer validation of other students' questions
    week 3: creators respond to the validation
    """

    subject = models.ForeignKey(
        Subject,
        on_delete=models.CASCADE,
        related_name="modules",
    )

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)

    # ordinal of the module inside the subject (1, 2, 3 ...)
    week_number = models.PositiveIntegerField(default=1)

    date_start = models.DateField()
    date_end = models.DateField()

    is_active = models.BooleanField(default=True)

    # creation / validation / reparation cap and number of peer questions
    required_questions_per_user = models.PositiveIntegerField(default=2)

    class Meta:
        ordering = ["week_number", "date_start", "id"]
        indexes = [
            models.Index(fields=["subject", "week_number"], name="subjects_module_subj_week_idx"),
            models.Index(fields=["date_start", "date_end"], name="subjects_module_dates_idx"),
        ]

    def __str__(self):
        return f"{self.subject.code} - {self.title}"

    # --------------------------------------------------
    # week window
    # --------------------------------------------------

    def week_at(self, day: date) -> int:
        """
        1-based week of the module containing `day`, 0 before the start.
        """
        days = (day - self.date_start).days
        if days < 0:
            return 0
        return days // 7 + 1

    @property
    def week_count(self) -> int:
        days = (self.date_end - self.date_start).days + 1
        return max(1, math.ceil(days / 7))

    def week_range(self, week: int) -> tuple[date, date]:
        start = self.date_start + timedelta(days=(int(week) - 1) * 7)
        return start, start + timedelta(days=6)

    # --------------------------------------------------
    # question list
    # --------------------------------------------------

    @property
    def question_ids(self) -> list[int]:
        return list(self.questions.order_by("id").values_list("id", flat=True))
