"""
Budget tracking.

Actual spending is derived from purchase orders placed inside the budget
period. Nothing is cached or written back onto the budget, so every read
reflects the current ledger.
"""
from decimal import Decimal, ROUND_HALF_UP
import logging

from django.conf import settings
from django.db import transaction
from django.db.models import Sum

from core_backend.exceptions import ValidationError
from core_backend.utils.decimals import parse_decimal
from measurements.services import UnitConversionService
from purchasing.models import PurchaseOrderItem, PurchaseOrderStatus
from sections.models import SectionConsumption
from .models import Budget, BudgetAllocation, BudgetPeriod

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")
ALLOCATION_TOLERANCE = Decimal("0.01")


class BudgetStatus:
    OVER_BUDGET = "OVER_BUDGET"
    UNDER_UTILIZED = "UNDER_UTILIZED"
    ON_TRACK = "ON_TRACK"


class Priority:
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class Trend:
    INCREASING = "INCREASING"
    DECREASING = "DECREASING"
    STABLE = "STABLE"


def _threshold(name, default) -> Decimal:
    return Decimal(str(getattr(settings, name, default)))


def _percent(part, whole) -> Decimal:
    if not whole:
        return ZERO.quantize(CENT)
    return (Decimal(part) / Decimal(whole) * HUNDRED).quantize(CENT, rounding=ROUND_HALF_UP)


class BudgetTracker:
    """Creates budgets and compares them with what was actually spent."""

    EXCLUDED_ORDER_STATUSES = [PurchaseOrderStatus.DRAFT, PurchaseOrderStatus.CANCELLED]

    def __init__(self):
        self._conversion_service = UnitConversionService()

    @staticmethod
    def _to_decimal(value, field):
        return parse_decimal(value, field)

    @staticmethod
    def _status_for(allocated, variance) -> str:
        if variance < 0:
            return BudgetStatus.OVER_BUDGET
        if variance > allocated * _threshold("BUDGET_UNDER_UTILIZED_RATIO", "0.10"):
            return BudgetStatus.UNDER_UTILIZED
        return BudgetStatus.ON_TRACK

    @transaction.atomic
    def create_budget(
        self,
        name,
        period_type,
        start_date,
        end_date,
        total_budget,
        allocations,
        created_by,
        description="",
    ) -> Budget:
        """
        Create a budget with its per-category allocations.

        Args:
            allocations: Iterable of dicts with ``category``,
                ``allocated_amount`` and optional ``notes``. The amounts must
                add up to ``total_budget`` within one cent.

        Raises:
            ValidationError: On inverted dates, a non-positive total, an
                unknown period type, duplicate categories or allocations
                that do not match the total.
        """
        if not name:
            raise ValidationError("A budget needs a name", field="name")
        if period_type not in BudgetPeriod.values:
            raise ValidationError(f"Unknown period type {period_type!r}", field="period_type")
        if start_date is None or end_date is None:
            raise ValidationError("Start and end dates are required", field="start_date")
        if end_date < start_date:
            raise ValidationError("End date cannot be before the start date", field="end_date")

        total_budget = self._to_decimal(total_budget, "total_budget")
        if total_budget <= 0:
            raise ValidationError("Total budget must be greater than zero", field="total_budget")

        lines = []
        seen = set()
        for allocation in allocations or []:
            category = allocation.get("category")
            if category in seen:
                raise ValidationError(f"Category {category} is allocated twice", field="allocations")
            seen.add(category)
            amount = self._to_decimal(allocation.get("allocated_amount"), "allocated_amount")
            if amount < 0:
                raise ValidationError(f"Allocation for {category} cannot be negative", field="allocations")
            lines.append((category, amount, allocation.get("notes", "")))

        allocated_total = sum((amount for _, amount, _ in lines), ZERO)
        if abs(allocated_total - total_budget) > ALLOCATION_TOLERANCE:
            raise ValidationError(
                f"Allocations add up to {allocated_total} but the budget total is {total_budget}",
                field="allocations",
                details={"allocated_total": str(allocated_total), "total_budget": str(total_budget)},
            )

        budget = Budget.objects.create(
            name=name,
            description=description,
            period_type=period_type,
            start_date=start_date,
            end_date=end_date,
            total_budget=total_budget,
            created_by=created_by,
        )
        BudgetAllocation.objects.bulk_create(
            BudgetAllocation(budget=budget, category=category, allocated_amount=amount, notes=notes)
            for category, amount, notes in lines
        )
        logger.info(f"Created budget '{budget.name}' ({start_date} - {end_date}) for {total_budget}")
        return budget

    def _purchase_spending_by_category(self, budget) -> dict:
        rows = (
            PurchaseOrderItem.objects.filter(
                order__order_date__gte=budget.start_date,
                order__order_date__lte=budget.end_date,
            )
            .exclude(order__status__in=self.EXCLUDED_ORDER_STATUSES)
            .order_by()
            .values("material__category")
            .annotate(total=Sum("line_total"))
        )
        return {row["material__category"]: row["total"] or ZERO for row in rows}

    def _consumption_value_by_category(self, budget) -> dict:
        rows = (
            SectionConsumption.objects.filter(
                consumed_at__date__gte=budget.start_date,
                consumed_at__date__lte=budget.end_date,
            )
            .select_related("material")
            .order_by()
        )
        totals = {}
        for consumption in rows:
            unit_cost = self._conversion_service.effective_unit_cost(consumption.material).value
            category = consumption.material.category
            totals[category] = totals.get(category, ZERO) + consumption.quantity * unit_cost
        return totals

    def calculate_spending(self, budget) -> dict:
        """
        Compare each allocation with purchase-order spending in the period.

        Orders count when their order date falls inside the budget period
        and they are neither DRAFT nor CANCELLED. Consumption value is
        reported alongside but does not count toward ``total_spent``.
        """
        spending = self._purchase_spending_by_category(budget)
        consumption = self._consumption_value_by_category(budget)

        allocations = []
        allocated_categories = set()
        for allocation in budget.allocations.all():
            allocated = allocation.allocated_amount
            actual = spending.get(allocation.category, ZERO)
            variance = allocated - actual
            allocated_categories.add(allocation.category)
            allocations.append({
                "allocation_id": allocation.pk,
                "category": allocation.category,
                "allocated_amount": allocated,
                "actual_spent": actual,
                "consumption_value": consumption.get(allocation.category, ZERO).quantize(CENT, rounding=ROUND_HALF_UP),
                "variance": variance,
                "variance_percent": _percent(variance, allocated),
                "utilization_percent": _percent(actual, allocated),
                "status": self._status_for(allocated, variance),
            })

        total_spent = sum(spending.values(), ZERO)
        total_variance = budget.total_budget - total_spent
        unallocated = {
            category: amount for category, amount in spending.items() if category not in allocated_categories
        }
        return {
            "budget_id": budget.pk,
            "budget_name": budget.name,
            "period_type": budget.period_type,
            "start_date": budget.start_date,
            "end_date": budget.end_date,
            "total_budget": budget.total_budget,
            "total_spent": total_spent,
            "total_variance": total_variance,
            "total_variance_percent": _percent(total_variance, budget.total_budget),
            "utilization_rate": _percent(total_spent, budget.total_budget),
            "consumption_value": sum(consumption.values(), ZERO).quantize(CENT, rounding=ROUND_HALF_UP),
            "status": self._status_for(budget.total_budget, total_variance),
            "allocations": allocations,
            "unallocated_spending": unallocated,
        }

    def previous_budget(self, budget):
        """The latest budget of the same period type that ended before this one started."""
        return (
            Budget.objects.filter(period_type=budget.period_type, end_date__lt=budget.start_date)
            .exclude(pk=budget.pk)
            .order_by("-end_date", "-pk")
            .first()
        )

    def _trends(self, budget, spending) -> dict:
        previous = self.previous_budget(budget)
        if previous is None:
            return {"has_previous": False, "previous_budget_id": None, "categories": []}

        previous_spending = self.calculate_spending(previous)
        previous_by_category = {a["category"]: a["actual_spent"] for a in previous_spending["allocations"]}
        categories = []
        for allocation in spending["allocations"]:
            category = allocation["category"]
            current = allocation["actual_spent"]
            before = previous_by_category.get(category, ZERO)
            change = current - before
            if change > 0:
                trend = Trend.INCREASING
            elif change < 0:
                trend = Trend.DECREASING
            else:
                trend = Trend.STABLE
            categories.append({
                "category": category,
                "current_spent": current,
                "previous_spent": before,
                "change": change,
                "change_percent": _percent(change, before),
                "trend": trend,
            })

        return {
            "has_previous": True,
            "previous_budget_id": previous.pk,
            "previous_budget_name": previous.name,
            "previous_total_spent": previous_spending["total_spent"],
            "total_change": spending["total_spent"] - previous_spending["total_spent"],
            "categories": categories,
        }

    def variance_analysis(self, budget) -> dict:
        """
        Variance per allocation, the significant ones, insights and trends.

        A variance is significant when its percentage exceeds
        ``BUDGET_SIGNIFICANT_VARIANCE_PERCENT`` in either direction.
        """
        spending = self.calculate_spending(budget)
        significant_threshold = _threshold("BUDGET_SIGNIFICANT_VARIANCE_PERCENT", "10")

        significant = [a for a in spending["allocations"] if abs(a["variance_percent"]) > significant_threshold]

        insights = []
        for allocation in spending["allocations"]:
            if allocation["status"] == BudgetStatus.OVER_BUDGET:
                insights.append({
                    "type": BudgetStatus.OVER_BUDGET,
                    "priority": Priority.HIGH,
                    "category": allocation["category"],
                    "message": (
                        f"{allocation['category']} is over budget by {-allocation['variance']} "
                        f"({-allocation['variance_percent']}%)"
                    ),
                })
            elif allocation["status"] == BudgetStatus.UNDER_UTILIZED:
                insights.append({
                    "type": BudgetStatus.UNDER_UTILIZED,
                    "priority": Priority.MEDIUM,
                    "category": allocation["category"],
                    "message": (
                        f"{allocation['category']} has used only {allocation['utilization_percent']}% "
                        f"of its allocation"
                    ),
                })

        return {
            "budget_id": budget.pk,
            "summary": {
                "total_budget": spending["total_budget"],
                "total_spent": spending["total_spent"],
                "total_variance": spending["total_variance"],
                "total_variance_percent": spending["total_variance_percent"],
                "utilization_rate": spending["utilization_rate"],
                "status": spending["status"],
            },
            "allocations": spending["allocations"],
            "significant_variances": significant,
            "insights": insights,
            "trends": self._trends(budget, spending),
        }

    def recommendations(self, budget) -> dict:
        """Threshold-driven suggestions for keeping the budget on course."""
        analysis = self.variance_analysis(budget)
        overspend_threshold = _threshold("BUDGET_CATEGORY_OVERSPEND_PERCENT", "15")
        reallocation_threshold = _threshold("BUDGET_REALLOCATION_PERCENT", "20")
        trend_threshold = _threshold("BUDGET_TREND_INCREASE_PERCENT", "20")

        recommendations = []
        summary = analysis["summary"]
        if summary["status"] == BudgetStatus.OVER_BUDGET:
            recommendations.append({
                "type": "BUDGET_CONTROL",
                "priority": Priority.HIGH,
                "category": None,
                "message": (
                    f"Total spending exceeds the budget by {-summary['total_variance']}; "
                    f"review purchasing before placing new orders"
                ),
            })

        for allocation in analysis["allocations"]:
            variance_percent = allocation["variance_percent"]
            if allocation["status"] == BudgetStatus.OVER_BUDGET and abs(variance_percent) > overspend_threshold:
                recommendations.append({
                    "type": "CATEGORY_OPTIMIZATION",
                    "priority": Priority.HIGH,
                    "category": allocation["category"],
                    "message": (
                        f"Reduce {allocation['category']} spending, currently {abs(variance_percent)}% "
                        f"over its allocation"
                    ),
                })
            elif allocation["status"] == BudgetStatus.UNDER_UTILIZED and variance_percent > reallocation_threshold:
                recommendations.append({
                    "type": "BUDGET_REALLOCATION",
                    "priority": Priority.MEDIUM,
                    "category": allocation["category"],
                    "message": (
                        f"{allocation['category']} has {allocation['variance']} unused; "
                        f"consider moving it to categories over budget"
                    ),
                })

        for trend in analysis["trends"]["categories"]:
            if trend["change_percent"] > trend_threshold:
                recommendations.append({
                    "type": "TREND_ANALYSIS",
                    "priority": Priority.MEDIUM,
                    "category": trend["category"],
                    "message": (
                        f"{trend['category']} spending rose {trend['change_percent']}% "
                        f"against the previous budget"
                    ),
                })

        return {
            "budget_id": budget.pk,
            "recommendations": recommendations,
            "summary": {
                "total": len(recommendations),
                "high_priority": sum(1 for r in recommendations if r["priority"] == Priority.HIGH),
                "medium_priority": sum(1 for r in recommendations if r["priority"] == Priority.MEDIUM),
                "low_priority": sum(1 for r in recommendations if r["priority"] == Priority.LOW),
            },
        }
