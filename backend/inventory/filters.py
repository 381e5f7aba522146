import django_filters
from django.db.models import Q

from core_backend.base.filters import BaseFilterSet, DateRangeFilterSet
from .models import MovementType, StockEntry, StockMovement


class StockEntryFilter(BaseFilterSet):
    received_from = django_filters.DateFilter(field_name="received_date", lookup_expr="gte")
    received_to = django_filters.DateFilter(field_name="received_date", lookup_expr="lte")
    expiring_before = django_filters.DateFilter(field_name="expiry_date", lookup_expr="lte")

    class Meta:
        model = StockEntry
        fields = ["material", "supplier", "purchase_order_item"]


class StockMovementFilter(DateRangeFilterSet):
    movement_type = django_filters.ChoiceFilter(choices=MovementType.choices)
    section = django_filters.NumberFilter(method="filter_section")

    class Meta:
        model = StockMovement
        fields = ["material", "movement_type", "reference_id"]

    def filter_section(self, queryset, name, value):
        return queryset.filter(Q(from_section_id=value) | Q(to_section_id=value))
