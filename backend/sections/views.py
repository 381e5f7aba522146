from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from core_backend.base.permissions import IsInventoryManager
from core_backend.base.viewsets import BaseViewSet, ReadOnlyBaseViewSet
from .filters import SectionConsumptionFilter, SectionInventoryFilter
from .models import Section, SectionConsumption, SectionInventory
from .serializers import (
    AssignStockSerializer,
    ConsumeRecipeSerializer,
    ConsumeStockSerializer,
    ReservationSerializer,
    SectionConsumptionSerializer,
    SectionInventorySerializer,
    SectionSerializer,
    TransferStockSerializer,
    UpdateHoldingSerializer,
)
from .services import SectionInventoryManager


class SectionViewSet(BaseViewSet):
    """
    Sections and the stock operations performed on them.

    Assignments take purchase units; consumption and transfers take holding
    units.
    """
    queryset = Section.objects.all()
    serializer_class = SectionSerializer
    lookup_value_regex = r"\d+"
    filterset_fields = ["section_type", "manager"]
    search_fields = ["name", "description"]
    ordering_fields = ["name", "created_at"]
    ordering = ["name"]

    @action(detail=True, methods=["get"])
    def inventory(self, request, pk=None):
        section = self.get_object()
        holdings = SectionInventoryManager.get_section_inventory(section.pk)
        return Response(SectionInventorySerializer(holdings, many=True).data)

    @action(detail=True, methods=["get"])
    def consumption(self, request, pk=None):
        section = self.get_object()
        history = SectionInventoryManager.get_consumption_history(
            section.pk,
            date_from=request.query_params.get("date_from"),
            date_to=request.query_params.get("date_to"),
            material_id=request.query_params.get("material"),
        )
        page = self.paginate_queryset(history)
        if page is not None:
            return self.get_paginated_response(SectionConsumptionSerializer(page, many=True).data)
        return Response(SectionConsumptionSerializer(history, many=True).data)

    @action(detail=True, methods=["post"], permission_classes=[IsInventoryManager])
    def assign(self, request, pk=None):
        serializer = AssignStockSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        holding = serializer.save(section_id=pk)
        return Response(SectionInventorySerializer(holding).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], permission_classes=[IsInventoryManager])
    def consume(self, request, pk=None):
        serializer = ConsumeStockSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        consumption = serializer.save(section_id=pk)
        return Response(SectionConsumptionSerializer(consumption).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="consume-recipe", permission_classes=[IsInventoryManager])
    def consume_recipe(self, request, pk=None):
        serializer = ConsumeRecipeSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        consumptions = serializer.save(section_id=pk)
        return Response(SectionConsumptionSerializer(consumptions, many=True).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], permission_classes=[IsInventoryManager])
    def transfer(self, request, pk=None):
        serializer = TransferStockSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        source, destination = serializer.save(section_id=pk)
        return Response({
            "source": SectionInventorySerializer(source).data,
            "destination": SectionInventorySerializer(destination).data,
        })


class SectionInventoryViewSet(ReadOnlyBaseViewSet):
    """Section holdings. Levels only change through the actions below."""
    queryset = SectionInventory.objects.all()
    serializer_class = SectionInventorySerializer
    filterset_class = SectionInventoryFilter
    search_fields = ["material__name", "section__name"]
    ordering_fields = ["quantity", "last_updated"]
    ordering = ["section__name", "material__name"]

    @action(detail=True, methods=["post"], url_path="set-quantity", permission_classes=[IsInventoryManager])
    def set_quantity(self, request, pk=None):
        serializer = UpdateHoldingSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        holding = SectionInventoryManager.update_holding(
            inventory_id=pk,
            quantity_in_purchase_units=serializer.validated_data["quantity"],
            updated_by=serializer.get_actor(),
            notes=serializer.validated_data.get("notes", ""),
        )
        return Response(SectionInventorySerializer(holding).data)

    @action(detail=True, methods=["post"], url_path="return", permission_classes=[IsInventoryManager])
    def return_stock(self, request, pk=None):
        returned = SectionInventoryManager.return_stock(
            inventory_id=pk,
            returned_by=request.user,
            notes=request.data.get("notes", ""),
        )
        holding = SectionInventory.objects.select_related("section", "material").get(pk=pk)
        return Response({
            "returned_quantity": str(returned),
            "unit": holding.material.unit,
            "inventory": SectionInventorySerializer(holding).data,
        })

    @action(detail=True, methods=["post"], permission_classes=[IsInventoryManager])
    def reserve(self, request, pk=None):
        holding = self.get_object()
        serializer = ReservationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        holding = SectionInventoryManager.reserve(
            holding.section_id, holding.material_id, serializer.validated_data["quantity"], request.user
        )
        return Response(SectionInventorySerializer(holding).data)

    @action(detail=True, methods=["post"], permission_classes=[IsInventoryManager])
    def release(self, request, pk=None):
        holding = self.get_object()
        serializer = ReservationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        holding = SectionInventoryManager.release(
            holding.section_id, holding.material_id, serializer.validated_data["quantity"], request.user
        )
        return Response(SectionInventorySerializer(holding).data)


class SectionConsumptionViewSet(ReadOnlyBaseViewSet):
    queryset = SectionConsumption.objects.all()
    serializer_class = SectionConsumptionSerializer
    filterset_class = SectionConsumptionFilter
    search_fields = ["material__name", "order_id", "notes"]
    ordering_fields = ["consumed_at", "quantity"]
    ordering = ["-consumed_at"]
