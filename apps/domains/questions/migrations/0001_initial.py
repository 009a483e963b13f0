# apps/domains/questions/migrations/0001_initial.py
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("subjects", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        # ==============================
        # Question
        # ==============================
        migrations.CreateModel(
            name="Question",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),

                ("text", models.TextField()),
                ("options", models.JSONField(default=dict)),
                (
                    "correct",
                    models.CharField(
                        choices=[("a", "A"), ("b", "B"), ("c", "C"), ("d", "D")],
                        max_length=1,
                    ),
                ),
                (
                    "difficulty",
                    models.CharField(
                        choices=[("easy", "Easy"), ("medium", "Medium"), ("hard", "Hard")],
                        default="medium",
                        max_length=10,
                    ),
                ),

                ("validated", models.BooleanField(blank=True, null=True)),
                ("validation_comment", models.TextField(blank=True, default="")),
                ("validated_at", models.DateTimeField(blank=True, null=True)),

                ("agreement_agreed", models.BooleanField(blank=True, null=True)),
                ("agreement_comment", models.TextField(blank=True, default="")),
                ("responded_at", models.DateTimeField(blank=True, null=True)),

                ("validated_by_teacher", models.BooleanField(blank=True, null=True)),
                ("validated_by_teacher_comment", models.TextField(blank=True, default="")),
                ("validated_by_teacher_at", models.DateTimeField(blank=True, null=True)),

                ("is_active", models.BooleanField(default=True)),
                (
                    "module",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="questions",
                        to="subjects.module",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="created_questions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "validated_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="peer_validated_questions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "teacher_validator",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="teacher_validated_questions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "questions_question",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["module", "created_by"], name="questions_q_module_creator_idx"),
                    models.Index(fields=["module", "validated_by"], name="questions_q_module_valid_idx"),
                    models.Index(fields=["module", "validated_by_teacher"], name="questions_q_module_teacher_idx"),
                ],
            },
        ),

        # ==============================
        # ValidationAssignment / AssignedQuestion
        # ==============================
        migrations.CreateModel(
            name="ValidationAssignment",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),

                ("week_number", models.PositiveSmallIntegerField(default=2)),
                ("automatic_points", models.PositiveIntegerField(default=0)),
                (
                    "student",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="validation_assignments",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "module",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="validation_assignments",
                        to="subjects.module",
                    ),
                ),
            ],
            options={
                "db_table": "questions_validation_assignment",
            },
        ),
        migrations.CreateModel(
            name="AssignedQuestion",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("position", models.PositiveSmallIntegerField(default=0)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "assignment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="questions.validationassignment",
                    ),
                ),
                (
                    "question",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="assignment_links",
                        to="questions.question",
                    ),
                ),
            ],
            options={
                "db_table": "questions_assigned_question",
                "ordering": ["position", "id"],
            },
        ),
        migrations.AddField(
            model_name="validationassignment",
            name="questions",
            field=models.ManyToManyField(
                related_name="validation_assignments",
                through="questions.AssignedQuestion",
                to="questions.question",
            ),
        ),
        migrations.AddConstraint(
            model_name="validationassignment",
            constraint=models.UniqueConstraint(
                fields=("student", "module", "week_number"),
                name="questions_assignment_student_module_week_uniq",
            ),
        ),
        migrations.AddConstraint(
            model_name="assignedquestion",
            constraint=models.UniqueConstraint(
                fields=("assignment", "question"),
                name="questions_assigned_question_uniq",
            ),
        ),
    ]
