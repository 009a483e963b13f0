# apps/domains/points/serializers.py

from rest_framework import serializers

from .models import PointCategory, PointTransaction


class PointTransactionSerializer(serializers.ModelSerializer):
    student_id = serializers.IntegerField(read_only=True)
    assigned_by_id = serializers.IntegerField(read_only=True)
    question_id = serializers.IntegerField(read_only=True)
    module_id = serializers.IntegerField(read_only=True)
    related_entity = serializers.SerializerMethodField()

    class Meta:
        model = PointTransaction
        fields = [
            "id",
            "student_id",
            "points",
            "category",
            "reason",
            "related_entity",
            "question_id",
            "module_id",
            "week_number",
            "assigned_by_id",
            "version",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
        ref_name = "PointTransaction"

    def get_related_entity(self, obj):
        return obj.related_entity


# ========================================================
# Request bodies
# ========================================================

_USER_IDS_REQUIRED = "Valid array of user IDs is required"


class UsersSummaryInputSerializer(serializers.Serializer):
    userIds = serializers.ListField(
        child=serializers.IntegerField(),
        allow_empty=False,
        error_messages={
            "required": _USER_IDS_REQUIRED,
            "null": _USER_IDS_REQUIRED,
            "not_a_list": _USER_IDS_REQUIRED,
            "empty": _USER_IDS_REQUIRED,
        },
    )
    subject_id = serializers.IntegerField(required=False, allow_null=True)


class AwardCustomInputSerializer(serializers.Serializer):
    student_id = serializers.IntegerField()
    points = serializers.IntegerField(
        min_value=1,
        error_messages={"min_value": "Points must be a positive number"},
    )
    reason = serializers.CharField()
    category = serializers.ChoiceField(
        choices=PointCategory.choices,
        required=False,
        allow_blank=True,
        allow_null=True,
    )


class UpdatePointInputSerializer(serializers.Serializer):
    points = serializers.IntegerField(
        min_value=0,
        required=False,
        error_messages={"min_value": "Points cannot be negative"},
    )
    reason = serializers.CharField(required=False)
    version = serializers.IntegerField(required=False)


class ReconcileInputSerializer(serializers.Serializer):
    student_id = serializers.IntegerField()
    category = serializers.ChoiceField(choices=PointCategory.choices)
    # module id or an empty slot ("empty-N")
    module_id = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    value = serializers.IntegerField()
    subject_id = serializers.IntegerField(required=False, allow_null=True)


class BackfillInputSerializer(serializers.Serializer):
    module_ids = serializers.ListField(
        child=serializers.IntegerField(),
        required=False,
        allow_null=True,
    )
