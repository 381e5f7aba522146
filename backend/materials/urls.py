from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import RawMaterialViewSet, SupplierViewSet

router = DefaultRouter()
router.register(r'suppliers', SupplierViewSet)
router.register(r'raw-materials', RawMaterialViewSet)

app_name = "materials"

urlpatterns = [
    path('', include(router.urls)),
]
