# apps/domains/points/migrations/0001_initial.py
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("questions", "0001_initial"),
        ("subjects", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="PointTransaction",
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

                ("points", models.IntegerField()),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("question_creation", "Question creation"),
                            ("question_validation", "Question validation"),
                            ("question_reparation", "Question reparation"),
                            ("test_performance", "Test performance"),
                            ("forum_participation", "Forum participation"),
                            ("project_work", "Project work"),
                            ("other", "Other"),
                        ],
                        default="other",
                        max_length=32,
                    ),
                ),
                ("reason", models.CharField(max_length=500)),
                (
                    "related_entity_type",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("Question", "Question"),
                            ("Test", "Test"),
                            ("ForumQuestion", "Forum question"),
                            ("Project", "Project"),
                        ],
                        default="",
                        max_length=32,
                    ),
                ),
                ("related_entity_id", models.PositiveBigIntegerField(blank=True, null=True)),
                ("week_number", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("version", models.PositiveIntegerField(default=1)),
                (
                    "student",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="point_transactions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "assigned_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="granted_point_transactions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "question",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="point_transactions",
                        to="questions.question",
                    ),
                ),
                (
                    "module",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="point_transactions",
                        to="subjects.module",
                    ),
                ),
            ],
            options={
                "db_table": "points_transaction",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["student", "-created_at"], name="points_tx_student_created_idx"),
                    models.Index(fields=["student", "category", "module"], name="points_tx_student_cat_mod_idx"),
                    models.Index(fields=["category"], name="points_tx_category_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("points__gte", 0)),
                        name="points_transaction_points_gte_0",
                    ),
                ],
            },
        ),
    ]
