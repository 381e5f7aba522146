from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from core_backend.base.permissions import IsInventoryManager, IsStaffOrReadOnly
from core_backend.base.viewsets import ReadOnlyBaseViewSet
from .filters import StockEntryFilter, StockMovementFilter
from .models import StockEntry, StockMovement
from .serializers import (
    RecordStockEntrySerializer,
    RecordStockMovementSerializer,
    StockEntrySerializer,
    StockLevelSerializer,
    StockMovementSerializer,
)
from .services import StockLedger


class StockEntryViewSet(ReadOnlyBaseViewSet):
    """Receipt history. Entries are created through RecordStockEntryView."""
    queryset = StockEntry.objects.all()
    serializer_class = StockEntrySerializer
    filterset_class = StockEntryFilter
    search_fields = ["material__name", "supplier_name", "batch_number"]
    ordering_fields = ["received_date", "created_at", "total_cost"]
    ordering = ["-received_date", "-created_at"]


class StockMovementViewSet(ReadOnlyBaseViewSet):
    queryset = StockMovement.objects.all()
    serializer_class = StockMovementSerializer
    filterset_class = StockMovementFilter
    search_fields = ["material__name", "reason", "reference_id"]
    ordering_fields = ["created_at"]
    ordering = ["-created_at"]


class RecordStockEntryView(APIView):
    """
    Receive stock into the central ledger.
    """

    permission_classes = [IsInventoryManager]

    def post(self, request, *args, **kwargs):
        serializer = RecordStockEntrySerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        entry = serializer.save()
        return Response(StockEntrySerializer(entry).data, status=status.HTTP_201_CREATED)


class RecordStockMovementView(APIView):
    """
    Record a manual correction against the ledger (waste, damage, adjustments).
    """

    permission_classes = [IsInventoryManager]

    def post(self, request, *args, **kwargs):
        serializer = RecordStockMovementSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        movement = serializer.save()
        return Response(StockMovementSerializer(movement).data, status=status.HTTP_201_CREATED)


class StockLevelListView(APIView):
    """
    Derived stock levels for every active material.
    Pass ?low_stock=true to list only materials at or below their minimum.
    """

    permission_classes = [IsStaffOrReadOnly]

    def get(self, request, *args, **kwargs):
        if request.query_params.get("low_stock", "").lower() in ("true", "1", "yes"):
            levels = StockLedger.get_low_stock_levels()
        else:
            levels = StockLedger.get_stock_levels()
        return Response(StockLevelSerializer(levels, many=True).data)


class StockLevelDetailView(APIView):
    permission_classes = [IsStaffOrReadOnly]

    def get(self, request, material_id, *args, **kwargs):
        level = StockLedger.get_stock_level(material_id)
        return Response(StockLevelSerializer(level).data)
