"""
Tests for the report endpoints.
"""
from decimal import Decimal

import pytest

REPORTS_URL = "/api/reports/"


@pytest.mark.django_db
class TestReportEndpoints:

    def test_list_types(self, user_client):
        response = user_client.get(REPORTS_URL)
        assert response.status_code == 200
        assert response.data["report_types"] == ["consumption", "expense", "low-stock"]
        assert response.data["export_formats"] == ["csv", "pdf", "xlsx"]

    def test_requires_authentication(self, api_client):
        assert api_client.get(REPORTS_URL).status_code in (401, 403)

    def test_expense_report(self, user_client, stocked_flour):
        response = user_client.get(f"{REPORTS_URL}expense/", {"days": "7"})
        assert response.status_code == 200
        assert response.data["report_type"] == "expense"
        assert response.data["total_entries"] == 1

    def test_low_stock_report(self, user_client, milk):
        response = user_client.get(f"{REPORTS_URL}low-stock/")
        assert response.status_code == 200
        assert response.data["total_items"] == 1

    def test_unknown_report(self, user_client, db):
        response = user_client.get(f"{REPORTS_URL}profit/")
        assert response.status_code == 400
        assert response.data["code"] == "validation_error"

    def test_invalid_days(self, user_client, db):
        response = user_client.get(f"{REPORTS_URL}expense/", {"days": "0"})
        assert response.status_code == 400

    @pytest.mark.parametrize(
        "file_format, content_type",
        [
            ("csv", "text/csv"),
            ("xlsx", "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"),
            ("pdf", "application/pdf"),
        ],
    )
    def test_export(self, user_client, stocked_flour, file_format, content_type):
        response = user_client.get(f"{REPORTS_URL}expense/export/", {"file_format": file_format})
        assert response.status_code == 200
        assert response["Content-Type"] == content_type
        assert response["Content-Disposition"].startswith('attachment; filename="expense_report_')
        assert response["Content-Disposition"].endswith(f'.{file_format}"')


COST_ANALYTICS_URL = f"{REPORTS_URL}cost-analytics/"


@pytest.mark.django_db
class TestCostAnalyticsEndpoints:

    def test_overview(self, user_client, stocked_flour):
        response = user_client.get(COST_ANALYTICS_URL, {"days": "7"})
        assert response.status_code == 200
        assert response.data["period_days"] == 7
        assert response.data["summary"]["purchase_cost"] == Decimal("100.00")

    def test_overview_default_window(self, user_client, db):
        response = user_client.get(COST_ANALYTICS_URL)
        assert response.status_code == 200
        assert response.data["period_days"] == 30

    def test_unknown_category(self, user_client, db):
        response = user_client.get(COST_ANALYTICS_URL, {"category": "furniture"})
        assert response.status_code == 400

    def test_invalid_days(self, user_client, db):
        response = user_client.get(f"{COST_ANALYTICS_URL}trends/", {"days": "0"})
        assert response.status_code == 400

    def test_requires_authentication(self, api_client):
        assert api_client.get(COST_ANALYTICS_URL).status_code in (401, 403)

    @pytest.mark.parametrize("path, period", [("trends/", 90), ("recommendations/", 30), ("suppliers/", 90)])
    def test_actions(self, user_client, stocked_flour, path, period):
        response = user_client.get(f"{COST_ANALYTICS_URL}{path}")
        assert response.status_code == 200
        assert response.data["period_days"] == period

    def test_supplier_performance(self, user_client, supplier):
        response = user_client.get(f"{COST_ANALYTICS_URL}suppliers/{supplier.pk}/performance/")
        assert response.status_code == 200
        assert response.data["supplier_name"] == "Fresh Foods Ltd"

    def test_unknown_supplier(self, user_client, db):
        response = user_client.get(f"{COST_ANALYTICS_URL}suppliers/424242/performance/")
        assert response.status_code == 400
        assert response.data["code"] == "validation_error"

    def test_supplier_comparison(self, user_client, stocked_flour):
        response = user_client.get(f"{COST_ANALYTICS_URL}materials/{stocked_flour.pk}/suppliers/")
        assert response.status_code == 200
        assert response.data["period_days"] == 180
        assert response.data["summary"]["supplier_count"] == 1
