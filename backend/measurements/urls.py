from django.urls import path
from .views import UnitListView, MaterialUnitsView

app_name = "measurements"

urlpatterns = [
    path("units/", UnitListView.as_view(), name="unit-list"),
    path(
        "units/material/<int:material_id>/",
        MaterialUnitsView.as_view(),
        name="material-units",
    ),
]
