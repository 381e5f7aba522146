from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import models
from django.utils.translation import gettext_lazy as _

from core_backend.exceptions import ValidationError
from core_backend.utils.archiving import SoftDeleteMixin
from materials.models import RawMaterial
from measurements.exceptions import UnitMismatchError
from measurements.models import MeasurementUnit


class Recipe(SoftDeleteMixin):
    """
    A dish or preparation made from raw materials.

    Costs are always computed from the current material prices; nothing
    about cost is stored on the recipe.
    """
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    serving_size = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=1,
        help_text=_("Number of servings one batch of this recipe yields."),
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_recipes",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Recipe")
        verbose_name_plural = _("Recipes")
        ordering = ["name"]

    def __str__(self):
        return self.name


class RecipeIngredient(models.Model):
    """
    One material used by a recipe.

    ``unit`` may be any unit the material can be converted from: its own
    unit, its base unit, or another unit of the same category.
    """
    recipe = models.ForeignKey(Recipe, on_delete=models.CASCADE, related_name="ingredients")
    material = models.ForeignKey(RawMaterial, on_delete=models.PROTECT, related_name="recipe_ingredients")
    quantity = models.DecimalField(max_digits=18, decimal_places=6)
    unit = models.CharField(max_length=20, choices=MeasurementUnit.choices)
    position = models.PositiveIntegerField(default=0)
    notes = models.CharField(max_length=255, blank=True)

    class Meta:
        verbose_name = _("Recipe Ingredient")
        verbose_name_plural = _("Recipe Ingredients")
        ordering = ["position", "id"]
        constraints = [
            models.CheckConstraint(condition=models.Q(quantity__gt=0), name="recipe_ingredient_quantity_positive"),
        ]

    def __str__(self):
        return f"{self.quantity} {self.unit} {self.material.name}"

    def validate_unit(self):
        """
        Raises:
            ValidationError: If the quantity is not positive or ``unit``
                cannot be converted into the material's holding unit.
        """
        from measurements.services import UnitConversionService

        if self.quantity is None or self.quantity <= 0:
            raise ValidationError("Ingredient quantity must be greater than zero", field="quantity")
        try:
            UnitConversionService().to_holding_units(1, self.unit, self.material)
        except UnitMismatchError as e:
            raise ValidationError(
                f"Unit '{self.unit}' is not compatible with {self.material.name} ({self.material.unit})",
                field="unit",
                details={"material_id": self.material_id, "holding_unit": e.to_unit},
            )

    def clean(self):
        super().clean()
        if self.material_id is None or not self.unit or self.quantity is None:
            return
        try:
            self.validate_unit()
        except ValidationError as e:
            raise DjangoValidationError({e.field or "unit": str(e)})

    def save(self, *args, **kwargs):
        self.validate_unit()
        super().save(*args, **kwargs)
