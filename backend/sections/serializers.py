from rest_framework import serializers

from core_backend.base import ActorSerializerMixin, BaseModelSerializer
from measurements.services import UnitConversionService
from .models import ConsumptionReason, Section, SectionConsumption, SectionInventory
from .services import SectionInventoryManager


class SectionSerializer(BaseModelSerializer):
    manager_username = serializers.CharField(source="manager.username", read_only=True, default=None)

    class Meta:
        model = Section
        fields = [
            "id",
            "name",
            "section_type",
            "description",
            "manager",
            "manager_username",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["is_active", "created_at", "updated_at"]
        select_related_fields = ["manager"]


class SectionInventorySerializer(BaseModelSerializer):
    section_name = serializers.CharField(source="section.name", read_only=True)
    material_name = serializers.CharField(source="material.name", read_only=True)
    holding_unit = serializers.SerializerMethodField()
    available_quantity = serializers.DecimalField(max_digits=18, decimal_places=6, read_only=True)
    pack_quantity = serializers.SerializerMethodField()
    display_quantity = serializers.SerializerMethodField()
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = SectionInventory
        fields = [
            "id",
            "section",
            "section_name",
            "material",
            "material_name",
            "quantity",
            "reserved_quantity",
            "available_quantity",
            "holding_unit",
            "pack_quantity",
            "display_quantity",
            "min_level",
            "max_level",
            "is_low_stock",
            "last_updated",
        ]
        read_only_fields = ["section", "material", "quantity", "reserved_quantity", "last_updated"]
        select_related_fields = ["section", "material"]

    def get_holding_unit(self, obj):
        return UnitConversionService().holding_unit(obj.material)

    def get_pack_quantity(self, obj):
        packs = obj.pack_quantity
        if packs is None:
            return None
        return str(UnitConversionService().round_for_display(packs, obj.material.unit))

    def get_display_quantity(self, obj):
        service = UnitConversionService()
        return service.format_quantity(obj.quantity, service.holding_unit(obj.material))


class SectionConsumptionSerializer(BaseModelSerializer):
    section_name = serializers.CharField(source="section.name", read_only=True)
    material_name = serializers.CharField(source="material.name", read_only=True)
    recipe_name = serializers.CharField(source="recipe.name", read_only=True, default=None)
    consumed_by_username = serializers.CharField(source="consumed_by.username", read_only=True)

    class Meta:
        model = SectionConsumption
        fields = [
            "id",
            "section",
            "section_name",
            "material",
            "material_name",
            "quantity",
            "reason",
            "order_id",
            "recipe",
            "recipe_name",
            "notes",
            "consumed_by",
            "consumed_by_username",
            "consumed_at",
        ]
        read_only_fields = fields
        select_related_fields = ["section", "material", "recipe", "consumed_by"]


class AssignStockSerializer(ActorSerializerMixin, serializers.Serializer):
    """Quantity is in the material's purchase unit."""
    material_id = serializers.IntegerField()
    quantity = serializers.DecimalField(max_digits=18, decimal_places=6)
    notes = serializers.CharField(required=False, allow_blank=True)

    def save(self, section_id):
        data = self.validated_data
        return SectionInventoryManager.assign_stock(
            section_id=section_id,
            material_id=data["material_id"],
            quantity_in_purchase_units=data["quantity"],
            assigned_by=self.get_actor(),
            notes=data.get("notes", ""),
        )


class ConsumeStockSerializer(ActorSerializerMixin, serializers.Serializer):
    """Quantity is in the material's holding unit."""
    material_id = serializers.IntegerField()
    quantity = serializers.DecimalField(max_digits=18, decimal_places=6)
    reason = serializers.ChoiceField(choices=ConsumptionReason.choices, default=ConsumptionReason.OTHER)
    order_id = serializers.CharField(max_length=100, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)

    def save(self, section_id):
        data = self.validated_data
        return SectionInventoryManager.record_consumption(
            section_id=section_id,
            material_id=data["material_id"],
            quantity_in_base_units=data["quantity"],
            consumed_by=self.get_actor(),
            reason=data["reason"],
            order_id=data.get("order_id"),
            notes=data.get("notes", ""),
        )


class ConsumeRecipeSerializer(ActorSerializerMixin, serializers.Serializer):
    recipe_id = serializers.IntegerField()
    servings = serializers.DecimalField(max_digits=12, decimal_places=3, default=1)
    order_id = serializers.CharField(max_length=100, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)

    def save(self, section_id):
        data = self.validated_data
        return SectionInventoryManager.record_recipe_consumption(
            section_id=section_id,
            recipe_id=data["recipe_id"],
            consumed_by=self.get_actor(),
            order_id=data.get("order_id"),
            servings=data["servings"],
            notes=data.get("notes", ""),
        )


class TransferStockSerializer(ActorSerializerMixin, serializers.Serializer):
    to_section_id = serializers.IntegerField()
    material_id = serializers.IntegerField()
    quantity = serializers.DecimalField(max_digits=18, decimal_places=6)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True)

    def save(self, section_id):
        data = self.validated_data
        return SectionInventoryManager.transfer_between_sections(
            from_section_id=section_id,
            to_section_id=data["to_section_id"],
            material_id=data["material_id"],
            quantity_in_base_units=data["quantity"],
            performed_by=self.get_actor(),
            reason=data.get("reason", ""),
        )


class UpdateHoldingSerializer(ActorSerializerMixin, serializers.Serializer):
    """New level in the material's purchase unit."""
    quantity = serializers.DecimalField(max_digits=18, decimal_places=6)
    notes = serializers.CharField(required=False, allow_blank=True)


class ReservationSerializer(serializers.Serializer):
    quantity = serializers.DecimalField(max_digits=18, decimal_places=6)
