# apps/domains/subjects/migrations/0001_initial.py
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        # ==============================
        # Subject
        # ==============================
        migrations.CreateModel(
            name="Subject",
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

                ("name", models.CharField(max_length=255, unique=True)),
                ("code", models.CharField(max_length=50, unique=True)),
                ("description", models.TextField(blank=True)),
                ("is_active", models.BooleanField(default=True)),
                (
                    "teachers",
                    models.ManyToManyField(
                        blank=True,
                        related_name="taught_subjects",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "students",
                    models.ManyToManyField(
                        blank=True,
                        related_name="enrolled_subjects",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["name"],
            },
        ),

        # ==============================
        # Module
        # ==============================
        migrations.CreateModel(
            name="Module",
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

                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("week_number", models.PositiveIntegerField(default=1)),
                ("date_start", models.DateField()),
                ("date_end", models.DateField()),
                ("is_active", models.BooleanField(default=True)),
                ("required_questions_per_user", models.PositiveIntegerField(default=2)),
                (
                    "subject",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="modules",
                        to="subjects.subject",
                    ),
                ),
            ],
            options={
                "ordering": ["week_number", "date_start", "id"],
                "indexes": [
                    models.Index(fields=["subject", "week_number"], name="subjects_module_subj_week_idx"),
                    models.Index(fields=["date_start", "date_end"], name="subjects_module_dates_idx"),
                ],
            },
        ),
    ]
