from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from core_backend.utils.append_only import AppendOnlyModel
from core_backend.utils.archiving import SoftDeleteMixin
from materials.models import RawMaterial


class SectionType(models.TextChoices):
    KITCHEN = "kitchen", _("Kitchen")
    BAR = "bar", _("Bar")
    STORAGE = "storage", _("Storage")
    BAKERY = "bakery", _("Bakery")
    OTHER = "other", _("Other")


class ConsumptionReason(models.TextChoices):
    SELLING = "selling", _("Selling")
    RECIPE = "recipe", _("Recipe")
    WASTE = "waste", _("Waste")
    STAFF_MEAL = "staff_meal", _("Staff Meal")
    SPOILAGE = "spoilage", _("Spoilage")
    OTHER = "other", _("Other")


class Section(SoftDeleteMixin):
    """An operational area (kitchen, bar...) that holds its own stock."""
    name = models.CharField(max_length=100)
    section_type = models.CharField(
        max_length=20,
        choices=SectionType.choices,
        default=SectionType.KITCHEN,
    )
    description = models.TextField(blank=True)
    manager = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="managed_sections",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Section")
        verbose_name_plural = _("Sections")
        ordering = ["name"]

    def __str__(self):
        return self.name


class SectionInventory(models.Model):
    """
    Stock a section holds of one material.

    ``quantity`` is always in the material's holding unit: the base unit for
    materials bought in packs or boxes, the material's own unit otherwise.
    Pack counts are derived, never stored.
    """
    section = models.ForeignKey(Section, on_delete=models.PROTECT, related_name="inventory")
    material = models.ForeignKey(RawMaterial, on_delete=models.PROTECT, related_name="section_inventory")
    quantity = models.DecimalField(max_digits=18, decimal_places=6, default=0)
    reserved_quantity = models.DecimalField(max_digits=18, decimal_places=6, default=0)
    min_level = models.DecimalField(max_digits=18, decimal_places=6, default=0)
    max_level = models.DecimalField(max_digits=18, decimal_places=6, default=0)
    last_updated = models.DateTimeField(auto_now=True)
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        verbose_name = _("Section Inventory")
        verbose_name_plural = _("Section Inventory")
        ordering = ["section", "material__name"]
        constraints = [
            models.UniqueConstraint(fields=["section", "material"], name="unique_section_material"),
            models.CheckConstraint(condition=models.Q(quantity__gte=0), name="section_inventory_quantity_non_negative"),
            models.CheckConstraint(condition=models.Q(reserved_quantity__gte=0), name="section_inventory_reserved_non_negative"),
            models.CheckConstraint(
                condition=models.Q(quantity__gte=models.F("reserved_quantity")),
                name="section_inventory_reserved_within_quantity",
            ),
        ]

    def __str__(self):
        return f"{self.section.name}: {self.quantity} of {self.material.name}"

    @property
    def available_quantity(self) -> Decimal:
        return self.quantity - self.reserved_quantity

    @property
    def pack_quantity(self):
        material = self.material
        if material.is_container_unit and material.units_per_pack and material.units_per_pack > 0:
            return self.quantity / material.units_per_pack
        return None

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.min_level


class SectionConsumption(AppendOnlyModel):
    """Append-only record of stock used by a section, in holding units."""
    section = models.ForeignKey(Section, on_delete=models.PROTECT, related_name="consumptions")
    material = models.ForeignKey(RawMaterial, on_delete=models.PROTECT, related_name="section_consumptions")
    quantity = models.DecimalField(max_digits=18, decimal_places=6)
    reason = models.CharField(max_length=20, choices=ConsumptionReason.choices, default=ConsumptionReason.OTHER)
    order_id = models.CharField(max_length=100, blank=True, db_index=True)
    recipe = models.ForeignKey(
        "cogs.Recipe",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="consumptions",
    )
    notes = models.TextField(blank=True)
    consumed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="section_consumptions",
    )
    consumed_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        verbose_name = _("Section Consumption")
        verbose_name_plural = _("Section Consumptions")
        ordering = ["-consumed_at"]
        indexes = [
            models.Index(fields=["section", "consumed_at"], name="consumption_section_date_idx"),
            models.Index(fields=["material", "consumed_at"], name="consumption_material_date_idx"),
        ]
        constraints = [
            models.CheckConstraint(condition=models.Q(quantity__gt=0), name="consumption_quantity_positive"),
        ]

    def __str__(self):
        return f"{self.section.name} used {self.quantity} of {self.material.name}"
