from rest_framework import serializers

from core_backend.base import ActorSerializerMixin, BaseModelSerializer
from materials.models import RawMaterial, Supplier
from .models import MovementType, StockEntry, StockMovement
from .services import StockLedger


class StockEntrySerializer(BaseModelSerializer):
    material_name = serializers.CharField(source="material.name", read_only=True)
    unit = serializers.CharField(source="material.unit", read_only=True)
    received_by_username = serializers.CharField(source="received_by.username", read_only=True)

    class Meta:
        model = StockEntry
        fields = [
            "id",
            "material",
            "material_name",
            "unit",
            "quantity",
            "unit_cost",
            "total_cost",
            "supplier",
            "supplier_name",
            "batch_number",
            "production_date",
            "expiry_date",
            "received_date",
            "received_by",
            "received_by_username",
            "purchase_order_item",
            "notes",
            "created_at",
        ]
        read_only_fields = fields
        select_related_fields = ["material", "received_by"]


class StockMovementSerializer(BaseModelSerializer):
    material_name = serializers.CharField(source="material.name", read_only=True)
    unit = serializers.CharField(source="material.unit", read_only=True)
    ledger_delta = serializers.DecimalField(max_digits=18, decimal_places=6, read_only=True)
    performed_by_username = serializers.CharField(source="performed_by.username", read_only=True)

    class Meta:
        model = StockMovement
        fields = [
            "id",
            "material",
            "material_name",
            "unit",
            "movement_type",
            "quantity",
            "ledger_delta",
            "from_section",
            "to_section",
            "stock_entry",
            "reason",
            "reference_id",
            "performed_by",
            "performed_by_username",
            "created_at",
        ]
        read_only_fields = fields
        select_related_fields = ["material", "performed_by"]


class StockLevelSerializer(serializers.Serializer):
    material_id = serializers.IntegerField()
    material_name = serializers.CharField()
    unit = serializers.CharField()
    total_received = serializers.DecimalField(max_digits=18, decimal_places=6)
    available_units_quantity = serializers.DecimalField(max_digits=18, decimal_places=6)
    min_level = serializers.DecimalField(max_digits=18, decimal_places=6)
    max_level = serializers.DecimalField(max_digits=18, decimal_places=6)
    is_low_stock = serializers.BooleanField()
    base_unit = serializers.CharField(allow_null=True)
    available_base_quantity = serializers.DecimalField(max_digits=24, decimal_places=6, allow_null=True)
    last_updated = serializers.DateTimeField(allow_null=True)


class RecordStockEntrySerializer(ActorSerializerMixin, serializers.Serializer):
    material_id = serializers.PrimaryKeyRelatedField(
        queryset=RawMaterial.all_objects.all(), source="material"
    )
    quantity = serializers.DecimalField(max_digits=18, decimal_places=6)
    unit_cost = serializers.DecimalField(max_digits=14, decimal_places=6)
    supplier_id = serializers.PrimaryKeyRelatedField(
        queryset=Supplier.all_objects.all(), source="supplier", required=False, allow_null=True
    )
    supplier_name = serializers.CharField(max_length=200, required=False, allow_blank=True)
    batch_number = serializers.CharField(max_length=100, required=False, allow_blank=True)
    production_date = serializers.DateField(required=False, allow_null=True)
    expiry_date = serializers.DateField(required=False, allow_null=True)
    received_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)

    def save(self):
        data = self.validated_data
        return StockLedger.record_entry(
            material=data["material"],
            quantity=data["quantity"],
            unit_cost=data["unit_cost"],
            received_by=self.get_actor(),
            supplier=data.get("supplier"),
            supplier_name=data.get("supplier_name", ""),
            batch_number=data.get("batch_number", ""),
            production_date=data.get("production_date"),
            expiry_date=data.get("expiry_date"),
            received_date=data.get("received_date"),
            notes=data.get("notes", ""),
        )


class RecordStockMovementSerializer(ActorSerializerMixin, serializers.Serializer):
    """
    Manual ledger corrections: IN, OUT, ADJUSTMENT, EXPIRED, DAMAGED.

    Section transfers go through the sections API so holdings stay in step.
    """
    material_id = serializers.PrimaryKeyRelatedField(
        queryset=RawMaterial.all_objects.all(), source="material"
    )
    movement_type = serializers.ChoiceField(
        choices=[c for c in MovementType.choices if c[0] != MovementType.TRANSFER]
    )
    quantity = serializers.DecimalField(max_digits=18, decimal_places=6)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True)
    reference_id = serializers.CharField(max_length=100, required=False, allow_blank=True)

    def save(self):
        data = self.validated_data
        return StockLedger.record_movement(
            material=data["material"],
            movement_type=data["movement_type"],
            quantity=data["quantity"],
            performed_by=self.get_actor(),
            reason=data.get("reason", ""),
            reference_id=data.get("reference_id", ""),
        )
