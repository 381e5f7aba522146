from rest_framework.decorators import action
from rest_framework.response import Response

from core_backend.base import BaseViewSet
from .models import Budget
from .serializers import BudgetSerializer
from .services import BudgetTracker


class BudgetViewSet(BaseViewSet):
    """
    Budgets with read-only spending, variance and recommendation reports.
    """
    queryset = Budget.objects.all()
    serializer_class = BudgetSerializer
    filterset_fields = ["period_type"]
    search_fields = ["name", "description"]
    lookup_value_regex = r"\d+"
    ordering_fields = ["start_date", "end_date", "total_budget", "created_at"]
    ordering = ["-start_date"]

    @action(detail=True, methods=["get"])
    def spending(self, request, pk=None):
        return Response(BudgetTracker().calculate_spending(self.get_object()))

    @action(detail=True, methods=["get"])
    def variance(self, request, pk=None):
        return Response(BudgetTracker().variance_analysis(self.get_object()))

    @action(detail=True, methods=["get"])
    def recommendations(self, request, pk=None):
        return Response(BudgetTracker().recommendations(self.get_object()))
