from datetime import date
from decimal import Decimal

import pytest


@pytest.fixture
def place_order(supplier, staff_user):
    """
    Place and send a purchase order dated ``order_date``.

    Usage:
        place_order(flour, 5, date(2026, 3, 10))
    """
    from purchasing.services import PurchaseOrderWorkflow

    def _place(material, quantity, order_date, unit_cost=None, send=True):
        order = PurchaseOrderWorkflow.create(
            supplier=supplier,
            order_date=order_date,
            expected_date=None,
            items=[{"material": material, "quantity": Decimal(str(quantity)), "unit_cost": unit_cost}],
            created_by=staff_user,
        )
        if send:
            PurchaseOrderWorkflow.submit(order)
            PurchaseOrderWorkflow.approve(order, approved_by=staff_user)
            order = PurchaseOrderWorkflow.send(order)
        return order

    return _place


@pytest.fixture
def make_budget(staff_user):
    from budgets.services import BudgetTracker

    def _make(total, allocations, start=date(2026, 3, 1), end=date(2026, 3, 31), name="March", period_type="MONTHLY"):
        return BudgetTracker().create_budget(
            name=name,
            period_type=period_type,
            start_date=start,
            end_date=end,
            total_budget=Decimal(str(total)),
            allocations=[
                {"category": category, "allocated_amount": Decimal(str(amount))}
                for category, amount in allocations.items()
            ],
            created_by=staff_user,
        )

    return _make
