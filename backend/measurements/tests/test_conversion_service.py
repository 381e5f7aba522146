"""
Tests for UnitConversionService.
"""
import pytest
from decimal import Decimal
from types import SimpleNamespace

from core_backend.exceptions import ValidationError
from measurements.exceptions import UnitMismatchError
from measurements.models import MeasurementUnit
from measurements.services import PackInfo, UnitConversionService


def make_material(unit, base_unit="", units_per_pack=None, unit_cost="0", name="Test material"):
    return SimpleNamespace(
        pk=None,
        name=name,
        unit=unit,
        base_unit=base_unit,
        units_per_pack=None if units_per_pack is None else Decimal(str(units_per_pack)),
        unit_cost=Decimal(str(unit_cost)),
    )


class TestUnitParsing:
    """Tests for mapping unit strings to MeasurementUnit."""

    def test_parse_canonical_value(self):
        assert UnitConversionService().parse_unit("grams") == MeasurementUnit.GRAMS

    def test_parse_variation(self):
        service = UnitConversionService()
        assert service.parse_unit("g") == MeasurementUnit.GRAMS
        assert service.parse_unit("Kilograms") == MeasurementUnit.KILOGRAMS

    def test_parse_unknown_unit_raises(self):
        with pytest.raises(ValidationError):
            UnitConversionService().parse_unit("handful")

    def test_parse_blank_unit_raises(self):
        with pytest.raises(ValidationError):
            UnitConversionService().parse_unit("  ")


class TestConvert:
    """Tests for static-table and container conversions."""

    def test_same_unit_is_identity(self):
        assert UnitConversionService().convert(Decimal("12.5"), "grams", "grams") == Decimal("12.5")

    def test_kg_to_grams(self):
        assert UnitConversionService().convert(Decimal("1.5"), "kg", "grams") == Decimal("1500")

    def test_ml_to_liters(self):
        assert UnitConversionService().convert(Decimal("250"), "ml", "liters") == Decimal("0.25")

    def test_round_trip_same_category(self):
        service = UnitConversionService()
        value = Decimal("3.75")
        there = service.convert(value, "liters", "ml")
        assert service.convert(there, "ml", "liters") == value

    def test_cross_category_raises_unit_mismatch(self):
        with pytest.raises(UnitMismatchError) as exc_info:
            UnitConversionService().convert(Decimal("1"), "grams", "liters")
        assert exc_info.value.code == "unit_mismatch"

    def test_packs_need_pack_info(self):
        with pytest.raises(UnitMismatchError):
            UnitConversionService().convert(Decimal("1"), "packs", "grams")

    def test_packs_to_base_unit_with_pack_info(self):
        pack_info = PackInfo(pack_unit="packs", base_unit="grams", units_per_pack=Decimal("1000"))
        service = UnitConversionService()
        assert service.convert(Decimal("2"), "packs", "grams", pack_info) == Decimal("2000")
        assert service.convert(Decimal("500"), "grams", "packs", pack_info) == Decimal("0.5")

    def test_is_convertible(self):
        service = UnitConversionService()
        assert service.is_convertible("kg", "grams") is True
        assert service.is_convertible("pieces", "grams") is False


class TestMaterialConversions:
    """Tests for conversions that depend on a material's pack data."""

    def test_holding_unit_for_pack_material_is_base_unit(self):
        flour = make_material("packs", "grams", 1000)
        assert UnitConversionService().holding_unit(flour) == MeasurementUnit.GRAMS

    def test_holding_unit_for_plain_material_is_its_unit(self):
        milk = make_material("liters")
        assert UnitConversionService().holding_unit(milk) == MeasurementUnit.LITERS

    def test_packs_chain_through_base_unit(self):
        flour = make_material("packs", "grams", 1000)
        assert UnitConversionService().convert_for_material(Decimal("3"), "packs", "kg", flour) == Decimal("3")

    def test_to_holding_units_from_other_unit(self):
        flour = make_material("packs", "grams", 1000)
        assert UnitConversionService().to_holding_units(Decimal("0.25"), "kg", flour) == Decimal("250")

    def test_pack_unit_on_plain_material_raises(self):
        milk = make_material("liters")
        with pytest.raises(UnitMismatchError):
            UnitConversionService().convert_for_material(Decimal("1"), "packs", "liters", milk)

    def test_pack_material_without_units_per_pack_raises(self):
        broken = make_material("packs", "grams", None)
        with pytest.raises(ValidationError):
            UnitConversionService().get_pack_info(broken)

    def test_available_units_stay_in_category(self):
        flour = make_material("packs", "grams", 1000)
        units = UnitConversionService().get_available_units(flour)
        assert units[:2] == [MeasurementUnit.PACKS, MeasurementUnit.GRAMS]
        assert MeasurementUnit.KILOGRAMS in units
        assert MeasurementUnit.LITERS not in units


class TestEffectiveUnitCost:
    """Tests for cost per holding unit and the guarded default."""

    def test_pack_cost_is_divided_per_base_unit(self):
        flour = make_material("packs", "grams", 1000, unit_cost="10")
        result = UnitConversionService().effective_unit_cost(flour)
        assert result.value == Decimal("0.01")
        assert result.is_approximate is False

    def test_effective_cost_times_pack_size_is_unit_cost(self):
        material = make_material("boxes", "pieces", 24, unit_cost="7.20")
        result = UnitConversionService().effective_unit_cost(material)
        assert result.value * Decimal("24") == Decimal("7.20")

    def test_plain_material_cost_unchanged(self):
        milk = make_material("liters", unit_cost="1.20")
        assert UnitConversionService().effective_unit_cost(milk).value == Decimal("1.20")

    def test_invalid_pack_size_falls_back_to_one(self):
        broken = make_material("packs", "grams", 0, unit_cost="10")
        result = UnitConversionService().effective_unit_cost(broken)
        assert result.value == Decimal("10")
        assert result.is_approximate is True
        assert "units_per_pack" in result.warning


class TestDisplayHelpers:

    def test_round_for_display_uses_unit_decimals(self):
        service = UnitConversionService()
        assert service.round_for_display(Decimal("1749.6"), "grams") == Decimal("1750")
        assert service.round_for_display(Decimal("1.75"), "packs") == Decimal("1.8")

    def test_format_quantity(self):
        assert UnitConversionService().format_quantity(Decimal("2000"), "grams") == "2000 g"

    def test_format_cost_per_base_unit(self):
        assert UnitConversionService().format_cost_per_base_unit(Decimal("0.01")) == "0.0100"


@pytest.mark.django_db
class TestUnitEndpoints:

    def test_unit_list(self, user_client):
        response = user_client.get("/api/measurements/units/")
        assert response.status_code == 200
        values = {unit["value"] for unit in response.data}
        assert {"grams", "kg", "packs"} <= values

    def test_material_units(self, user_client, flour):
        response = user_client.get(f"/api/measurements/units/material/{flour.pk}/")
        assert response.status_code == 200
        assert response.data["holding_unit"] == "grams"
        assert response.data["cost_per_holding_unit"] == "0.0100"
