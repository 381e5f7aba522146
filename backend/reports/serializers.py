from rest_framework import serializers

from materials.models import MaterialCategory
from .services.export_service import EXPORT_FORMATS


class ReportParameterSerializer(serializers.Serializer):
    """Query parameters shared by every inventory report."""

    days = serializers.IntegerField(required=False, default=30, min_value=1, max_value=3650)
    section_id = serializers.IntegerField(required=False, allow_null=True, min_value=1)


class ReportExportRequestSerializer(ReportParameterSerializer):
    file_format = serializers.ChoiceField(choices=sorted(EXPORT_FORMATS), default="csv")


class CostAnalyticsParameterSerializer(serializers.Serializer):
    """Query parameters for the cost analytics endpoints."""

    days = serializers.IntegerField(required=False, min_value=1, max_value=3650)
    category = serializers.ChoiceField(choices=MaterialCategory.choices, required=False)
