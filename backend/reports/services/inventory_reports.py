"""
Read-only inventory reports.

Each report returns a plain dict of scalars and lists of row dicts so the
same payload can be served as JSON or handed to ReportExportService.
"""
from collections import defaultdict
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP
import logging

from django.db.models import Count, Sum
from django.utils import timezone

from core_backend.exceptions import ValidationError
from inventory.models import StockEntry
from measurements.services import UnitConversionService
from purchasing.services import PurchaseOrderWorkflow
from sections.services import SectionInventoryManager

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

REPORT_TYPES = ("consumption", "expense", "low-stock")


def _money(value) -> Decimal:
    return Decimal(value or 0).quantize(CENT, rounding=ROUND_HALF_UP)


def validate_days(days) -> int:
    try:
        days = int(days)
    except (TypeError, ValueError):
        raise ValidationError(f"days must be an integer, got {days!r}", field="days")
    if days <= 0:
        raise ValidationError("days must be greater than zero", field="days")
    return days


class InventoryReportService:
    """Aggregations over the ledger, consumption history and stock levels."""

    @staticmethod
    def _date_range(days):
        end = timezone.localdate()
        return {"start": str(end - timedelta(days=days)), "end": str(end)}

    @classmethod
    def generate(cls, report_type, **params) -> dict:
        if report_type == "consumption":
            return cls.consumption_report(days=params.get("days", 30), section_id=params.get("section_id"))
        if report_type == "expense":
            return cls.expense_report(days=params.get("days", 30))
        if report_type == "low-stock":
            return cls.low_stock_report()
        raise ValidationError(
            f"Unknown report type {report_type!r}",
            field="report_type",
            details={"allowed": list(REPORT_TYPES)},
        )

    @classmethod
    def consumption_report(cls, days=30, section_id=None) -> dict:
        """
        What sections used over the last ``days`` days.

        Quantities are in each material's holding unit and valued at its
        effective unit cost.
        """
        days = validate_days(days)
        conversion = UnitConversionService()
        consumptions = SectionInventoryManager.consumption_since(days=days, section_id=section_id)

        per_material = {}
        by_reason = defaultdict(lambda: {"records": 0, "value": Decimal("0")})
        for consumption in consumptions.order_by("consumed_at"):
            material = consumption.material
            unit_cost = conversion.effective_unit_cost(material).value
            value = consumption.quantity * unit_cost

            row = per_material.get(material.pk)
            if row is None:
                row = per_material[material.pk] = {
                    "material_id": material.pk,
                    "material_name": material.name,
                    "category": material.category,
                    "unit": str(conversion.holding_unit(material)),
                    "quantity": Decimal("0"),
                    "value": Decimal("0"),
                    "records": 0,
                }
            row["quantity"] += consumption.quantity
            row["value"] += value
            row["records"] += 1

            by_reason[consumption.reason]["records"] += 1
            by_reason[consumption.reason]["value"] += value

        materials = sorted(per_material.values(), key=lambda r: (-r["value"], r["material_name"]))
        for row in materials:
            row["value"] = _money(row["value"])

        return {
            "report_type": "consumption",
            "date_range": cls._date_range(days),
            "section_id": section_id,
            "total_records": sum(r["records"] for r in materials),
            "total_value": sum((r["value"] for r in materials), Decimal("0")),
            "materials": materials,
            "by_reason": [
                {"reason": reason, "records": data["records"], "value": _money(data["value"])}
                for reason, data in sorted(by_reason.items())
            ],
        }

    @classmethod
    def expense_report(cls, days=30) -> dict:
        """Stock-entry spend over the last ``days`` days, by category and by day."""
        days = validate_days(days)
        since = timezone.localdate() - timedelta(days=days)
        entries = StockEntry.objects.filter(received_date__gte=since).order_by()

        by_category = [
            {
                "category": row["material__category"],
                "entries": row["entries"],
                "total_cost": _money(row["total"]),
            }
            for row in entries.values("material__category")
            .annotate(entries=Count("id"), total=Sum("total_cost"))
            .order_by("-total", "material__category")
        ]
        by_day = [
            {
                "date": str(row["received_date"]),
                "entries": row["entries"],
                "total_cost": _money(row["total"]),
            }
            for row in entries.values("received_date")
            .annotate(entries=Count("id"), total=Sum("total_cost"))
            .order_by("received_date")
        ]

        return {
            "report_type": "expense",
            "date_range": cls._date_range(days),
            "total_entries": sum(row["entries"] for row in by_category),
            "total_cost": sum((row["total_cost"] for row in by_category), Decimal("0")),
            "by_category": by_category,
            "by_day": by_day,
        }

    @staticmethod
    def low_stock_report() -> dict:
        """Every active material at or below its minimum level, with a reorder suggestion."""
        suggestions = PurchaseOrderWorkflow.reorder_suggestions()
        materials = [
            {
                "material_id": s["material_id"],
                "material_name": s["material_name"],
                "category": s["category"],
                "unit": s["unit"],
                "available_quantity": s["available_quantity"],
                "min_stock_level": s["min_stock_level"],
                "suggested_quantity": s["suggested_quantity"],
                "estimated_cost": _money(s["estimated_cost"]),
                "supplier_name": s["supplier_name"] or "",
                "urgency": s["urgency"],
            }
            for s in suggestions["suggestions"]
        ]
        summary = suggestions["summary"]
        return {
            "report_type": "low-stock",
            "generated_at": timezone.now().isoformat(),
            "total_items": summary["total_items"],
            "high_urgency": summary["high_urgency"],
            "medium_urgency": summary["medium_urgency"],
            "low_urgency": summary["low_urgency"],
            "estimated_value": _money(summary["estimated_value"]),
            "materials": materials,
        }
