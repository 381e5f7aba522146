from django.urls import path, include
from rest_framework.routers import SimpleRouter
from .views import SectionConsumptionViewSet, SectionInventoryViewSet, SectionViewSet

router = SimpleRouter()
router.register(r'inventory', SectionInventoryViewSet)
router.register(r'consumption', SectionConsumptionViewSet)
router.register(r'', SectionViewSet)

app_name = "sections"

urlpatterns = [
    path('', include(router.urls)),
]
