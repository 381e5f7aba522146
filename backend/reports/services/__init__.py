from .cost_analytics import CostAnalyticsService
from .export_service import ReportExportService
from .inventory_reports import InventoryReportService, REPORT_TYPES

__all__ = [
    "CostAnalyticsService",
    "InventoryReportService",
    "ReportExportService",
    "REPORT_TYPES",
]
