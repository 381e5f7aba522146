import django_filters
from django.db.models import F

from core_backend.base.filters import BaseFilterSet, FlexibleDateTimeFilter
from .models import ConsumptionReason, SectionConsumption, SectionInventory


class SectionInventoryFilter(BaseFilterSet):
    low_stock = django_filters.BooleanFilter(method="filter_low_stock")

    class Meta:
        model = SectionInventory
        fields = ["section", "material"]

    def filter_low_stock(self, queryset, name, value):
        if value:
            return queryset.filter(quantity__lte=F("min_level"))
        return queryset.filter(quantity__gt=F("min_level"))


class SectionConsumptionFilter(BaseFilterSet):
    reason = django_filters.ChoiceFilter(choices=ConsumptionReason.choices)
    date_from = FlexibleDateTimeFilter(field_name="consumed_at", lookup_expr="gte")
    date_to = FlexibleDateTimeFilter(field_name="consumed_at", lookup_expr="lte")

    class Meta:
        model = SectionConsumption
        fields = ["section", "material", "recipe", "reason", "order_id"]
