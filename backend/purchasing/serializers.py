from rest_framework import serializers

from core_backend.base import ActorSerializerMixin, BaseModelSerializer
from materials.models import RawMaterial, Supplier
from .models import PurchaseOrder, PurchaseOrderItem, PurchaseReceipt
from .services import PurchaseOrderWorkflow


class PurchaseOrderItemSerializer(BaseModelSerializer):
    material_name = serializers.CharField(source="material.name", read_only=True)
    unit = serializers.CharField(source="material.unit", read_only=True)
    remaining_quantity = serializers.DecimalField(max_digits=18, decimal_places=6, read_only=True)

    class Meta:
        model = PurchaseOrderItem
        fields = [
            "id",
            "material",
            "material_name",
            "unit",
            "quantity_ordered",
            "quantity_received",
            "remaining_quantity",
            "unit_cost",
            "line_total",
            "notes",
        ]
        read_only_fields = fields


class PurchaseReceiptSerializer(BaseModelSerializer):
    received_by_username = serializers.CharField(source="received_by.username", read_only=True)

    class Meta:
        model = PurchaseReceipt
        fields = [
            "id",
            "order",
            "receipt_number",
            "received_date",
            "received_by",
            "received_by_username",
            "total_amount",
            "is_partial",
            "notes",
            "created_at",
        ]
        read_only_fields = fields


class PurchaseOrderSerializer(BaseModelSerializer):
    supplier_name = serializers.CharField(source="supplier.name", read_only=True)
    items = PurchaseOrderItemSerializer(many=True, read_only=True)
    receipts = PurchaseReceiptSerializer(many=True, read_only=True)
    created_by_username = serializers.CharField(source="created_by.username", read_only=True)
    approved_by_username = serializers.CharField(source="approved_by.username", read_only=True, default=None)

    class Meta:
        model = PurchaseOrder
        fields = [
            "id",
            "po_number",
            "supplier",
            "supplier_name",
            "order_date",
            "expected_date",
            "received_date",
            "status",
            "total_amount",
            "notes",
            "items",
            "receipts",
            "created_by",
            "created_by_username",
            "approved_by",
            "approved_by_username",
            "approved_at",
            "sent_at",
            "cancelled_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
        select_related_fields = ["supplier", "created_by", "approved_by"]
        prefetch_related_fields = ["items__material", "receipts__received_by"]


class CreatePurchaseOrderItemSerializer(serializers.Serializer):
    material_id = serializers.PrimaryKeyRelatedField(queryset=RawMaterial.objects.all(), source="material")
    quantity = serializers.DecimalField(max_digits=18, decimal_places=6)
    unit_cost = serializers.DecimalField(max_digits=14, decimal_places=6, required=False, allow_null=True)
    notes = serializers.CharField(max_length=255, required=False, allow_blank=True)


class CreatePurchaseOrderSerializer(ActorSerializerMixin, serializers.Serializer):
    supplier_id = serializers.PrimaryKeyRelatedField(queryset=Supplier.objects.all(), source="supplier")
    order_date = serializers.DateField(required=False, allow_null=True)
    expected_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    items = CreatePurchaseOrderItemSerializer(many=True)

    def save(self):
        data = self.validated_data
        return PurchaseOrderWorkflow.create(
            supplier=data["supplier"],
            order_date=data.get("order_date"),
            expected_date=data.get("expected_date"),
            items=data["items"],
            created_by=self.get_actor(),
            notes=data.get("notes", ""),
        )


class ReceiveItemSerializer(serializers.Serializer):
    item_id = serializers.IntegerField()
    quantity = serializers.DecimalField(max_digits=18, decimal_places=6)
    unit_cost = serializers.DecimalField(max_digits=14, decimal_places=6, required=False, allow_null=True)


class ReceiveGoodsSerializer(ActorSerializerMixin, serializers.Serializer):
    items = ReceiveItemSerializer(many=True)
    received_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)

    def save(self, order):
        data = self.validated_data
        return PurchaseOrderWorkflow.receive(
            order,
            received_items=data["items"],
            received_by=self.get_actor(),
            received_date=data.get("received_date"),
            notes=data.get("notes", ""),
        )


class CancelOrderSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True)
