"""
Tests for BudgetTracker.
"""
import pytest
from datetime import date, timedelta
from decimal import Decimal

from django.test import override_settings
from django.utils import timezone

from budgets.models import Budget, BudgetAllocation
from budgets.services import BudgetStatus, BudgetTracker, Trend
from core_backend.exceptions import ValidationError

MARCH_10 = date(2026, 3, 10)


@pytest.fixture
def tracker():
    return BudgetTracker()


@pytest.mark.django_db
class TestCreateBudget:

    def test_creates_allocations(self, make_budget):
        budget = make_budget(500, {"grains": 300, "dairy": 200})
        assert budget.total_budget == Decimal("500")
        assert set(budget.allocations.values_list("category", flat=True)) == {"grains", "dairy"}

    def test_allocations_must_match_total(self, make_budget):
        with pytest.raises(ValidationError) as exc_info:
            make_budget(500, {"grains": 300, "dairy": 100})
        assert exc_info.value.details["allocated_total"] == "400"
        assert not Budget.all_objects.exists()

    def test_one_cent_tolerance(self, make_budget):
        budget = make_budget("100.00", {"grains": "33.33", "dairy": "33.33", "meat": "33.33"})
        assert budget.allocations.count() == 3

    def test_inverted_dates(self, make_budget):
        with pytest.raises(ValidationError):
            make_budget(100, {"grains": 100}, start=date(2026, 3, 31), end=date(2026, 3, 1))

    def test_non_positive_total(self, make_budget):
        with pytest.raises(ValidationError):
            make_budget(0, {})

    def test_nan_allocation(self, make_budget):
        with pytest.raises(ValidationError):
            make_budget(100, {"grains": "NaN"})
        assert not Budget.all_objects.exists()

    def test_unknown_period(self, make_budget):
        with pytest.raises(ValidationError):
            make_budget(100, {"grains": 100}, period_type="DAILY")

    def test_negative_allocation(self, make_budget):
        with pytest.raises(ValidationError):
            make_budget(100, {"grains": 150, "dairy": -50})
        assert not BudgetAllocation.objects.exists()

    def test_duplicate_category(self, tracker, staff_user):
        with pytest.raises(ValidationError):
            tracker.create_budget(
                name="Dup", period_type="MONTHLY", start_date=date(2026, 3, 1), end_date=date(2026, 3, 31),
                total_budget=100,
                allocations=[
                    {"category": "grains", "allocated_amount": 50},
                    {"category": "grains", "allocated_amount": 50},
                ],
                created_by=staff_user,
            )


@pytest.mark.django_db
class TestCalculateSpending:

    def test_purchase_spending_in_period(self, tracker, make_budget, place_order, flour):
        """Test a $50 order against a $500 budget is 10% utilization."""
        budget = make_budget(500, {"grains": 300, "dairy": 200})
        place_order(flour, 5, MARCH_10, unit_cost=Decimal("10"))

        spending = tracker.calculate_spending(budget)
        assert spending["total_spent"] == Decimal("50")
        assert spending["utilization_rate"] == Decimal("10.00")
        assert spending["total_variance"] == Decimal("450")
        assert spending["status"] == BudgetStatus.UNDER_UTILIZED

        grains = next(a for a in spending["allocations"] if a["category"] == "grains")
        assert grains["actual_spent"] == Decimal("50")
        assert grains["variance"] == Decimal("250")
        assert grains["variance_percent"] == Decimal("83.33")
        assert grains["utilization_percent"] == Decimal("16.67")

    def test_draft_cancelled_and_out_of_period_orders_ignored(self, tracker, make_budget, place_order, flour, staff_user):
        from purchasing.services import PurchaseOrderWorkflow

        budget = make_budget(500, {"grains": 500})
        place_order(flour, 5, MARCH_10, send=False)
        cancelled = place_order(flour, 3, MARCH_10)
        PurchaseOrderWorkflow.cancel(cancelled, cancelled_by=staff_user)
        place_order(flour, 4, date(2026, 4, 2))

        assert tracker.calculate_spending(budget)["total_spent"] == Decimal("0")

    def test_unallocated_spending(self, tracker, make_budget, place_order, tomato):
        budget = make_budget(100, {"grains": 100})
        place_order(tomato, 4, MARCH_10, unit_cost=Decimal("2.50"))
        spending = tracker.calculate_spending(budget)
        assert spending["unallocated_spending"] == {"vegetables": Decimal("10")}
        assert spending["total_spent"] == Decimal("10")

    def test_over_budget_status(self, tracker, make_budget, place_order, flour):
        budget = make_budget(40, {"grains": 40})
        place_order(flour, 5, MARCH_10, unit_cost=Decimal("10"))
        spending = tracker.calculate_spending(budget)
        assert spending["status"] == BudgetStatus.OVER_BUDGET
        assert spending["allocations"][0]["variance_percent"] == Decimal("-25.00")

    def test_spending_is_not_stored(self, tracker, make_budget, place_order, flour):
        budget = make_budget(500, {"grains": 500})
        tracker.calculate_spending(budget)
        place_order(flour, 1, MARCH_10, unit_cost=Decimal("10"))
        assert tracker.calculate_spending(budget)["total_spent"] == Decimal("10")

    def test_consumption_value(self, tracker, make_budget, kitchen_flour, kitchen, staff_user):
        from sections.services import SectionInventoryManager

        today = timezone.localdate()
        budget = make_budget(
            100, {"grains": 100}, start=today - timedelta(days=1), end=today + timedelta(days=1)
        )
        SectionInventoryManager.record_consumption(kitchen.pk, kitchen_flour.material_id, 250, consumed_by=staff_user)

        spending = tracker.calculate_spending(budget)
        assert spending["consumption_value"] == Decimal("2.50")
        assert spending["allocations"][0]["consumption_value"] == Decimal("2.50")


@pytest.mark.django_db
class TestVarianceAnalysis:

    def test_insights_and_significant_variances(self, tracker, make_budget, place_order, flour):
        budget = make_budget(100, {"grains": 40, "dairy": 60})
        place_order(flour, 5, MARCH_10, unit_cost=Decimal("10"))

        analysis = tracker.variance_analysis(budget)
        assert {a["category"] for a in analysis["significant_variances"]} == {"grains", "dairy"}
        insights = {i["category"]: i for i in analysis["insights"]}
        assert insights["grains"]["type"] == BudgetStatus.OVER_BUDGET
        assert insights["grains"]["priority"] == "HIGH"
        assert insights["dairy"]["type"] == BudgetStatus.UNDER_UTILIZED
        assert analysis["trends"]["has_previous"] is False

    def test_on_track_allocation_is_not_significant(self, tracker, make_budget, place_order, flour):
        budget = make_budget(52, {"grains": 52})
        place_order(flour, 5, MARCH_10, unit_cost=Decimal("10"))
        analysis = tracker.variance_analysis(budget)
        assert analysis["allocations"][0]["status"] == BudgetStatus.ON_TRACK
        assert analysis["significant_variances"] == []
        assert analysis["insights"] == []

    def test_trend_against_previous_budget(self, tracker, make_budget, place_order, flour):
        february = make_budget(100, {"grains": 100}, start=date(2026, 2, 1), end=date(2026, 2, 28), name="February")
        march = make_budget(100, {"grains": 100})
        place_order(flour, 2, date(2026, 2, 10), unit_cost=Decimal("10"))
        place_order(flour, 5, MARCH_10, unit_cost=Decimal("10"))

        assert tracker.previous_budget(march) == february
        trends = tracker.variance_analysis(march)["trends"]
        assert trends["has_previous"] is True
        assert trends["previous_total_spent"] == Decimal("20")
        grains = trends["categories"][0]
        assert grains["change"] == Decimal("30")
        assert grains["change_percent"] == Decimal("150.00")
        assert grains["trend"] == Trend.INCREASING

    def test_other_period_types_are_not_compared(self, tracker, make_budget):
        make_budget(100, {"grains": 100}, start=date(2026, 1, 1), end=date(2026, 1, 7), period_type="WEEKLY")
        march = make_budget(100, {"grains": 100})
        assert tracker.previous_budget(march) is None


@pytest.mark.django_db
class TestRecommendations:

    def test_category_recommendations(self, tracker, make_budget, place_order, flour):
        budget = make_budget(100, {"grains": 40, "dairy": 60})
        place_order(flour, 5, MARCH_10, unit_cost=Decimal("10"))

        result = tracker.recommendations(budget)
        types = {(r["type"], r["category"]) for r in result["recommendations"]}
        assert types == {("CATEGORY_OPTIMIZATION", "grains"), ("BUDGET_REALLOCATION", "dairy")}
        assert result["summary"] == {"total": 2, "high_priority": 1, "medium_priority": 1, "low_priority": 0}

    def test_overall_budget_control(self, tracker, make_budget, place_order, flour):
        budget = make_budget(45, {"grains": 45})
        place_order(flour, 5, MARCH_10, unit_cost=Decimal("10"))
        result = tracker.recommendations(budget)
        assert result["recommendations"][0]["type"] == "BUDGET_CONTROL"
        assert result["recommendations"][0]["priority"] == "HIGH"
        # 11.11% over is under the category threshold
        assert [r["type"] for r in result["recommendations"]] == ["BUDGET_CONTROL"]

    def test_trend_recommendation(self, tracker, make_budget, place_order, flour):
        make_budget(100, {"grains": 100}, start=date(2026, 2, 1), end=date(2026, 2, 28), name="February")
        march = make_budget(60, {"grains": 60})
        place_order(flour, 2, date(2026, 2, 10), unit_cost=Decimal("10"))
        place_order(flour, 5, MARCH_10, unit_cost=Decimal("10"))

        result = tracker.recommendations(march)
        assert [r["type"] for r in result["recommendations"]] == ["TREND_ANALYSIS"]

    @override_settings(BUDGET_TREND_INCREASE_PERCENT="200")
    def test_thresholds_come_from_settings(self, tracker, make_budget, place_order, flour):
        make_budget(100, {"grains": 100}, start=date(2026, 2, 1), end=date(2026, 2, 28), name="February")
        march = make_budget(60, {"grains": 60})
        place_order(flour, 2, date(2026, 2, 10), unit_cost=Decimal("10"))
        place_order(flour, 5, MARCH_10, unit_cost=Decimal("10"))

        assert tracker.recommendations(march)["recommendations"] == []
