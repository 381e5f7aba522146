from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import CostAnalyticsViewSet, InventoryReportViewSet

router = SimpleRouter()
# Registered before the catch-all report prefix so its routes match first
router.register(r"cost-analytics", CostAnalyticsViewSet, basename="cost-analytics")
router.register(r"", InventoryReportViewSet, basename="report")

app_name = "reports"

urlpatterns = [
    path("", include(router.urls)),
]
