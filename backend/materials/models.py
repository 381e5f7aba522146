"""
Catalog models for raw materials and suppliers.

These are reference data for the inventory ledger: services read unit,
pack and cost information from them but never change them.
"""
from django.core.exceptions import ValidationError
from django.db import models
from django.utils.translation import gettext_lazy as _

from core_backend.utils.archiving import SoftDeleteMixin
from measurements.models import CONTAINER_UNITS, MeasurementUnit


class MaterialCategory(models.TextChoices):
    MEAT = "meat", _("Meat")
    VEGETABLES = "vegetables", _("Vegetables")
    DAIRY = "dairy", _("Dairy")
    BEVERAGES = "beverages", _("Beverages")
    BREAD = "bread", _("Bread")
    GRAINS = "grains", _("Grains")
    SPICES = "spices", _("Spices")
    CONDIMENTS = "condiments", _("Condiments")
    PACKAGING = "packaging", _("Packaging")
    OTHER = "other", _("Other")


class Supplier(SoftDeleteMixin):
    name = models.CharField(max_length=200, help_text=_("Name of the supplier."))
    contact_name = models.CharField(max_length=200, blank=True)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=50, blank=True)
    address = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Supplier")
        verbose_name_plural = _("Suppliers")
        ordering = ["name"]

    def __str__(self):
        return self.name


class RawMaterial(SoftDeleteMixin):
    """
    A purchasable ingredient or consumable.

    ``unit`` is the purchase unit and ``unit_cost`` the cost of one of it.
    Materials bought in PACKS or BOXES also carry the ``base_unit`` one pack
    contains and ``units_per_pack``; stock in sections, recipes and costing
    is expressed in that base unit.
    """
    name = models.CharField(max_length=200, help_text=_("Name of the raw material."))
    description = models.TextField(blank=True)
    category = models.CharField(
        max_length=20,
        choices=MaterialCategory.choices,
        default=MaterialCategory.OTHER,
        db_index=True,
    )
    unit = models.CharField(
        max_length=20,
        choices=MeasurementUnit.choices,
        help_text=_("Unit the material is purchased and counted in."),
    )
    base_unit = models.CharField(
        max_length=20,
        choices=MeasurementUnit.choices,
        blank=True,
        help_text=_("Unit inside one pack/box. Required when unit is packs or boxes."),
    )
    units_per_pack = models.DecimalField(
        max_digits=18,
        decimal_places=6,
        null=True,
        blank=True,
        help_text=_("How many base units one pack/box contains."),
    )
    unit_cost = models.DecimalField(
        max_digits=14,
        decimal_places=6,
        default=0,
        help_text=_("Cost of one purchase unit."),
    )
    min_stock_level = models.DecimalField(
        max_digits=18,
        decimal_places=6,
        default=0,
        help_text=_("Reorder threshold, in purchase units."),
    )
    max_stock_level = models.DecimalField(
        max_digits=18,
        decimal_places=6,
        default=0,
        help_text=_("Target level after reordering, in purchase units."),
    )
    supplier = models.ForeignKey(
        Supplier,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="materials",
        help_text=_("Default supplier for reorders."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Raw Material")
        verbose_name_plural = _("Raw Materials")
        ordering = ["name"]
        indexes = [
            models.Index(fields=["category", "is_active"], name="rawmat_category_active_idx"),
            models.Index(fields=["name"], name="rawmat_name_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.unit})"

    @property
    def is_container_unit(self):
        return self.unit in CONTAINER_UNITS

    def clean(self):
        errors = {}
        if self.is_container_unit:
            if not self.base_unit:
                errors["base_unit"] = _("Base unit is required for materials sold in packs or boxes.")
            elif self.base_unit in CONTAINER_UNITS:
                errors["base_unit"] = _("Base unit cannot itself be packs or boxes.")
            if self.units_per_pack is None or self.units_per_pack <= 0:
                errors["units_per_pack"] = _("Units per pack must be greater than zero.")
        if self.unit_cost is not None and self.unit_cost < 0:
            errors["unit_cost"] = _("Unit cost cannot be negative.")
        if self.min_stock_level is not None and self.min_stock_level < 0:
            errors["min_stock_level"] = _("Minimum stock level cannot be negative.")
        if (
            self.max_stock_level is not None
            and self.min_stock_level is not None
            and self.max_stock_level < self.min_stock_level
        ):
            errors["max_stock_level"] = _("Maximum stock level cannot be below the minimum.")
        if errors:
            raise ValidationError(errors)

    def save(self, *args, **kwargs):
        # Non-container materials never carry pack data
        if not self.is_container_unit:
            self.base_unit = ""
            self.units_per_pack = None
        super().save(*args, **kwargs)
