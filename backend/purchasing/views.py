from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from core_backend.base.mixins import OptimizedQuerysetMixin
from core_backend.base.permissions import IsInventoryManager, IsStaffOrReadOnly
from core_backend.pagination import StandardPagination
from .filters import PurchaseOrderFilter
from .models import PurchaseOrder
from .serializers import (
    CancelOrderSerializer,
    CreatePurchaseOrderSerializer,
    PurchaseOrderSerializer,
    PurchaseReceiptSerializer,
    ReceiveGoodsSerializer,
)
from .services import PurchaseOrderWorkflow


class PurchaseOrderViewSet(
    OptimizedQuerysetMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    """
    Purchase orders. Status only changes through the workflow actions.
    """
    queryset = PurchaseOrder.objects.all()
    serializer_class = PurchaseOrderSerializer
    pagination_class = StandardPagination
    permission_classes = [IsStaffOrReadOnly]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = PurchaseOrderFilter
    search_fields = ["po_number", "supplier__name", "notes"]
    ordering_fields = ["order_date", "expected_date", "total_amount", "created_at"]
    ordering = ["-order_date", "-created_at"]

    def create(self, request, *args, **kwargs):
        serializer = CreatePurchaseOrderSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        order = serializer.save()
        return Response(self._render(order), status=status.HTTP_201_CREATED)

    def _render(self, order):
        order = self.get_queryset().get(pk=order.pk)
        return PurchaseOrderSerializer(order).data

    @action(detail=True, methods=["post"], permission_classes=[IsInventoryManager])
    def submit(self, request, pk=None):
        order = PurchaseOrderWorkflow.submit(self.get_object())
        return Response(self._render(order))

    @action(detail=True, methods=["post"], permission_classes=[IsInventoryManager])
    def approve(self, request, pk=None):
        order = PurchaseOrderWorkflow.approve(self.get_object(), approved_by=request.user)
        return Response(self._render(order))

    @action(detail=True, methods=["post"], permission_classes=[IsInventoryManager])
    def send(self, request, pk=None):
        order = PurchaseOrderWorkflow.send(self.get_object())
        return Response(self._render(order))

    @action(detail=True, methods=["post"], permission_classes=[IsInventoryManager])
    def cancel(self, request, pk=None):
        serializer = CancelOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = PurchaseOrderWorkflow.cancel(
            self.get_object(), cancelled_by=request.user, reason=serializer.validated_data.get("reason", "")
        )
        return Response(self._render(order))

    @action(detail=True, methods=["post"], permission_classes=[IsInventoryManager])
    def receive(self, request, pk=None):
        serializer = ReceiveGoodsSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        receipt = serializer.save(order=self.get_object())
        return Response(
            {
                "receipt": PurchaseReceiptSerializer(receipt).data,
                "order": self._render(receipt.order),
            },
            status=status.HTTP_201_CREATED,
        )


class ReorderSuggestionsView(APIView):
    permission_classes = [IsStaffOrReadOnly]

    def get(self, request, *args, **kwargs):
        return Response(PurchaseOrderWorkflow.reorder_suggestions())


class PurchaseAnalyticsView(APIView):
    """
    Purchasing analytics. ?days=N sets the window (default 30).
    """

    permission_classes = [IsStaffOrReadOnly]

    def get(self, request, *args, **kwargs):
        try:
            days = int(request.query_params.get("days", 30))
        except ValueError:
            return Response({"error": "days must be an integer."}, status=status.HTTP_400_BAD_REQUEST)
        return Response(PurchaseOrderWorkflow.get_analytics(days=days))
