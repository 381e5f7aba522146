from core_backend.base.viewsets import BaseViewSet
from .models import RawMaterial, Supplier
from .serializers import RawMaterialSerializer, SupplierSerializer


class SupplierViewSet(BaseViewSet):
    queryset = Supplier.objects.all()
    serializer_class = SupplierSerializer
    search_fields = ["name", "contact_name", "email"]
    ordering_fields = ["name", "created_at"]
    ordering = ["name"]


class RawMaterialViewSet(BaseViewSet):
    queryset = RawMaterial.objects.all()
    serializer_class = RawMaterialSerializer
    filterset_fields = ["category", "unit", "supplier"]
    search_fields = ["name", "description"]
    ordering_fields = ["name", "category", "unit_cost"]
    ordering = ["name"]
