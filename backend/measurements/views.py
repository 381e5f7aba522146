from django.shortcuts import get_object_or_404
from rest_framework import permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from materials.models import RawMaterial
from .services import UNIT_DEFINITIONS, UnitConversionService


class UnitListView(APIView):
    """
    The closed unit table: value, label, category and display decimals.
    """

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, *args, **kwargs):
        units = [
            {
                "value": unit.value,
                "label": unit.label,
                "symbol": definition["symbol"],
                "category": definition["category"],
                "decimals": definition["decimals"],
            }
            for unit, definition in UNIT_DEFINITIONS.items()
        ]
        return Response(units)


class MaterialUnitsView(APIView):
    """
    Units a quantity of one material may be entered in, plus its holding unit.
    """

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, material_id, *args, **kwargs):
        material = get_object_or_404(RawMaterial.all_objects, pk=material_id)
        service = UnitConversionService()
        effective_cost = service.effective_unit_cost(material)

        return Response({
            "material_id": material.id,
            "unit": material.unit,
            "holding_unit": service.holding_unit(material),
            "available_units": service.get_available_units(material),
            "cost_per_holding_unit": service.format_cost_per_base_unit(effective_cost.value),
            "is_approximate": effective_cost.is_approximate,
        })
