import pytest
from decimal import Decimal


@pytest.fixture
def flour_order(supplier, flour, staff_user):
    """DRAFT order for 5 packs of flour at $10."""
    from purchasing.services import PurchaseOrderWorkflow
    return PurchaseOrderWorkflow.create(
        supplier=supplier,
        order_date=None,
        expected_date=None,
        items=[{"material": flour, "quantity": Decimal("5"), "unit_cost": Decimal("10")}],
        created_by=staff_user,
    )


@pytest.fixture
def sent_order(flour_order, staff_user):
    from purchasing.services import PurchaseOrderWorkflow
    PurchaseOrderWorkflow.submit(flour_order)
    PurchaseOrderWorkflow.approve(flour_order, approved_by=staff_user)
    return PurchaseOrderWorkflow.send(flour_order)
