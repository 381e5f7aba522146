"""
Tests for InventoryReportService and ReportExportService.
"""
import io

import pytest
from decimal import Decimal

from openpyxl import load_workbook

from core_backend.exceptions import ValidationError
from reports.services import InventoryReportService, ReportExportService
from sections.models import ConsumptionReason
from sections.services import SectionInventoryManager


@pytest.fixture
def kitchen_usage(kitchen_flour, kitchen, staff_user):
    """250 g sold and 100 g wasted from the kitchen's flour."""
    SectionInventoryManager.record_consumption(
        kitchen.pk, kitchen_flour.material_id, 250, consumed_by=staff_user, reason=ConsumptionReason.SELLING
    )
    SectionInventoryManager.record_consumption(
        kitchen.pk, kitchen_flour.material_id, 100, consumed_by=staff_user, reason=ConsumptionReason.WASTE
    )


@pytest.mark.django_db
class TestConsumptionReport:

    def test_totals_by_material_and_reason(self, kitchen_usage):
        report = InventoryReportService.consumption_report(days=7)
        assert report["total_records"] == 2
        assert report["total_value"] == Decimal("3.50")

        flour_row = report["materials"][0]
        assert flour_row["material_name"] == "Flour"
        assert flour_row["quantity"] == Decimal("350")
        assert flour_row["unit"] == "grams"

        by_reason = {row["reason"]: row for row in report["by_reason"]}
        assert by_reason["selling"]["value"] == Decimal("2.50")
        assert by_reason["waste"]["value"] == Decimal("1.00")

    def test_section_filter(self, kitchen_usage, bar):
        report = InventoryReportService.consumption_report(days=7, section_id=bar.pk)
        assert report["total_records"] == 0
        assert report["materials"] == []

    def test_invalid_days(self, db):
        with pytest.raises(ValidationError):
            InventoryReportService.consumption_report(days=0)


@pytest.mark.django_db
class TestExpenseReport:

    def test_spend_by_category(self, flour, milk, receive_stock):
        receive_stock(flour, 3, unit_cost=10)
        receive_stock(milk, 10, unit_cost="1.20")
        receive_stock(flour, 1, unit_cost=11)

        report = InventoryReportService.expense_report(days=30)
        assert report["total_entries"] == 3
        assert report["total_cost"] == Decimal("53.00")
        assert report["by_category"][0] == {"category": "grains", "entries": 2, "total_cost": Decimal("41.00")}
        assert len(report["by_day"]) == 1


@pytest.mark.django_db
class TestLowStockReport:

    def test_lists_materials_below_minimum(self, stocked_flour, milk):
        report = InventoryReportService.low_stock_report()
        assert report["total_items"] == 1
        assert report["materials"][0]["material_name"] == "Milk"
        assert report["materials"][0]["supplier_name"] == "Fresh Foods Ltd"
        assert report["estimated_value"] == Decimal("36.00")


@pytest.mark.django_db
class TestGenerate:

    def test_unknown_type(self, db):
        with pytest.raises(ValidationError) as exc_info:
            InventoryReportService.generate("profit")
        assert exc_info.value.details["allowed"] == ["consumption", "expense", "low-stock"]


@pytest.mark.django_db
class TestExports:

    def test_csv(self, kitchen_usage):
        report = InventoryReportService.consumption_report(days=7)
        content = ReportExportService.export(report, "consumption", "csv").decode("utf-8")
        lines = content.splitlines()
        assert lines[0] == "Consumption Report"
        assert "Total Value,3.50" in lines
        assert any(line.startswith("Material Id,Material Name") for line in lines)

    def test_xlsx(self, kitchen_usage):
        report = InventoryReportService.consumption_report(days=7)
        content = ReportExportService.export(report, "consumption", "xlsx")
        sheet = load_workbook(io.BytesIO(content)).active
        assert sheet.title == "Consumption Report"
        assert sheet["A1"].value == "Consumption Report"

    def test_pdf(self, stocked_flour, milk):
        report = InventoryReportService.low_stock_report()
        content = ReportExportService.export(report, "low-stock", "pdf")
        assert content.startswith(b"%PDF")

    def test_unsupported_format(self):
        with pytest.raises(ValidationError):
            ReportExportService.export({}, "expense", "docx")
