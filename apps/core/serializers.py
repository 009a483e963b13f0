# apps/core/serializers.py

from rest_framework import serializers
from django.contrib.auth import get_user_model

User = get_user_model()


# ------------------------------------
# User Base
# ------------------------------------

class UserSerializer(serializers.ModelSerializer):
    isTeacher = serializers.BooleanField(source="is_teacher", read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "name",
            "surname",
            "email",
            "student_number",
            "role",
            "isTeacher",
        ]


# ------------------------------------
# Compact user (points summary rows)
# ------------------------------------

class UserBriefSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "name", "surname", "email", "student_number"]
