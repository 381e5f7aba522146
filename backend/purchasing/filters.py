import django_filters
from django.utils import timezone

from core_backend.base.filters import BaseFilterSet
from .models import PurchaseOrder, PurchaseOrderStatus


class PurchaseOrderFilter(BaseFilterSet):
    status = django_filters.MultipleChoiceFilter(choices=PurchaseOrderStatus.choices)
    order_date_from = django_filters.DateFilter(field_name="order_date", lookup_expr="gte")
    order_date_to = django_filters.DateFilter(field_name="order_date", lookup_expr="lte")
    overdue = django_filters.BooleanFilter(method="filter_overdue")

    class Meta:
        model = PurchaseOrder
        fields = ["supplier", "status", "created_by"]

    def filter_overdue(self, queryset, name, value):
        from .services import PurchaseOrderWorkflow

        overdue = queryset.filter(
            expected_date__lt=timezone.localdate(),
            status__in=PurchaseOrderWorkflow.OPEN_STATUSES,
        )
        return overdue if value else queryset.exclude(pk__in=overdue.values("pk"))
