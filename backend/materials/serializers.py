from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from core_backend.base import BaseModelSerializer
from measurements.services import UnitConversionService
from .models import RawMaterial, Supplier


class SupplierSerializer(BaseModelSerializer):
    class Meta:
        model = Supplier
        fields = [
            "id",
            "name",
            "contact_name",
            "email",
            "phone",
            "address",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["is_active", "created_at", "updated_at"]


class RawMaterialSerializer(BaseModelSerializer):
    supplier_name = serializers.CharField(source="supplier.name", read_only=True, default=None)
    holding_unit = serializers.SerializerMethodField()
    cost_per_holding_unit = serializers.SerializerMethodField()

    class Meta:
        model = RawMaterial
        fields = [
            "id",
            "name",
            "description",
            "category",
            "unit",
            "base_unit",
            "units_per_pack",
            "unit_cost",
            "min_stock_level",
            "max_stock_level",
            "supplier",
            "supplier_name",
            "holding_unit",
            "cost_per_holding_unit",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["is_active", "created_at", "updated_at"]
        select_related_fields = ["supplier"]

    def get_holding_unit(self, obj):
        if obj.is_container_unit and not obj.base_unit:
            return None
        return UnitConversionService().holding_unit(obj)

    def get_cost_per_holding_unit(self, obj):
        service = UnitConversionService()
        return service.format_cost_per_base_unit(service.effective_unit_cost(obj).value)

    def validate(self, data):
        data = super().validate(data)
        instance = RawMaterial(**{**self._current_values(), **data})
        try:
            instance.clean()
        except DjangoValidationError as e:
            raise serializers.ValidationError(e.message_dict)
        return data

    def _current_values(self):
        if self.instance is None:
            return {}
        return {
            field: getattr(self.instance, field)
            for field in ("name", "category", "unit", "base_unit", "units_per_pack",
                          "unit_cost", "min_stock_level", "max_stock_level")
        }
