import logging

from django.http import HttpResponse
from django.utils import timezone
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from core_backend.base.permissions import IsStaffOrReadOnly
from .serializers import CostAnalyticsParameterSerializer, ReportExportRequestSerializer, ReportParameterSerializer
from .services import CostAnalyticsService, InventoryReportService, ReportExportService, REPORT_TYPES
from .services.export_service import EXPORT_FORMATS

logger = logging.getLogger(__name__)


class InventoryReportViewSet(viewsets.ViewSet):
    """
    Inventory reports: consumption, expense and low-stock.

    GET /api/reports/<type>/ returns the report as JSON;
    GET /api/reports/<type>/export/?file_format=csv|xlsx|pdf downloads it.
    """

    permission_classes = [IsStaffOrReadOnly]
    lookup_field = "report_type"
    lookup_value_regex = r"[a-z][a-z-]*"

    def list(self, request):
        return Response({"report_types": list(REPORT_TYPES), "export_formats": sorted(EXPORT_FORMATS)})

    def retrieve(self, request, report_type=None):
        serializer = ReportParameterSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        return Response(InventoryReportService.generate(report_type, **serializer.validated_data))

    @action(detail=True, methods=["get"])
    def export(self, request, report_type=None):
        serializer = ReportExportRequestSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        params = dict(serializer.validated_data)
        file_format = params.pop("file_format")

        report_data = InventoryReportService.generate(report_type, **params)
        file_data = ReportExportService.export(report_data, report_type, file_format)

        content_type, extension = EXPORT_FORMATS[file_format]
        timestamp = timezone.now().strftime("%Y%m%d_%H%M%S")
        filename = f"{report_type}_report_{timestamp}.{extension}"
        logger.info(f"Exported {report_type} report as {file_format} for {request.user}")

        response = HttpResponse(file_data, content_type=content_type)
        response["Content-Disposition"] = f'attachment; filename="{filename}"'
        return response


class CostAnalyticsViewSet(viewsets.ViewSet):
    """
    Food-cost analytics.

    GET /api/reports/cost-analytics/                              cost overview
    GET /api/reports/cost-analytics/trends/                       weekly trends
    GET /api/reports/cost-analytics/recommendations/              optimisation suggestions
    GET /api/reports/cost-analytics/suppliers/                    supplier cost analysis
    GET /api/reports/cost-analytics/suppliers/<id>/performance/   one supplier's orders
    GET /api/reports/cost-analytics/materials/<id>/suppliers/     supplier prices for a material
    """

    permission_classes = [IsStaffOrReadOnly]

    def _params(self, request):
        serializer = CostAnalyticsParameterSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data

    def list(self, request):
        params = self._params(request)
        return Response(CostAnalyticsService().cost_overview(
            days=params.get("days", 30), category=params.get("category")
        ))

    @action(detail=False, methods=["get"])
    def trends(self, request):
        params = self._params(request)
        return Response(CostAnalyticsService().cost_trends(days=params.get("days", 90)))

    @action(detail=False, methods=["get"])
    def recommendations(self, request):
        params = self._params(request)
        return Response(CostAnalyticsService().optimization_recommendations(days=params.get("days", 30)))

    @action(detail=False, methods=["get"])
    def suppliers(self, request):
        params = self._params(request)
        return Response(CostAnalyticsService().supplier_cost_analysis(days=params.get("days", 90)))

    @action(detail=False, methods=["get"], url_path=r"suppliers/(?P<supplier_id>\d+)/performance")
    def supplier_performance(self, request, supplier_id=None):
        params = self._params(request)
        return Response(CostAnalyticsService().supplier_performance(supplier_id, days=params.get("days", 90)))

    @action(detail=False, methods=["get"], url_path=r"materials/(?P<material_id>\d+)/suppliers")
    def supplier_comparison(self, request, material_id=None):
        params = self._params(request)
        return Response(CostAnalyticsService().supplier_comparison(material_id, days=params.get("days", 180)))
