from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import PurchaseAnalyticsView, PurchaseOrderViewSet, ReorderSuggestionsView

router = DefaultRouter()
router.register(r'orders', PurchaseOrderViewSet)

app_name = "purchasing"

urlpatterns = [
    path("reorder-suggestions/", ReorderSuggestionsView.as_view(), name="reorder-suggestions"),
    path("analytics/", PurchaseAnalyticsView.as_view(), name="analytics"),
    path('', include(router.urls)),
]
