from django.apps import AppConfig


class PointsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"

    # Django import path
    name = "apps.domains.points"

    # migration / FK label (never change)
    label = "points"
