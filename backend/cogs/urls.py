"""
URL configuration for the COGS app.
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from cogs.views import RecipeViewSet

router = DefaultRouter()
router.register(r'recipes', RecipeViewSet, basename='recipe')

app_name = "cogs"

urlpatterns = [
    path('', include(router.urls)),
]
