from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import (
    StockEntryViewSet,
    StockMovementViewSet,
    RecordStockEntryView,
    RecordStockMovementView,
    StockLevelListView,
    StockLevelDetailView,
)

router = DefaultRouter()
router.register(r'entries', StockEntryViewSet)
router.register(r'movements', StockMovementViewSet)

app_name = "inventory"

urlpatterns = [
    # Ledger actions
    path("entries/record/", RecordStockEntryView.as_view(), name="record-entry"),
    path("movements/record/", RecordStockMovementView.as_view(), name="record-movement"),
    # Derived stock levels
    path("stock-levels/", StockLevelListView.as_view(), name="stock-level-list"),
    path(
        "stock-levels/<int:material_id>/",
        StockLevelDetailView.as_view(),
        name="stock-level-detail",
    ),
    path('', include(router.urls)),
]
