"""
Signal handlers for recipe costing.

Cached recipe costs depend on the recipe, its ingredients and the prices of
the materials they reference; any change to those drops the cached value.
"""
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver
import logging

from materials.models import RawMaterial
from .models import Recipe, RecipeIngredient

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Recipe)
def handle_recipe_changes(sender, instance=None, **kwargs):
    from .services import RecipeCostEngine

    if instance is not None and instance.pk is not None:
        RecipeCostEngine.invalidate(instance.pk)


@receiver([post_save, post_delete], sender=RecipeIngredient)
def handle_ingredient_changes(sender, instance=None, **kwargs):
    from .services import RecipeCostEngine

    if instance is not None and instance.recipe_id is not None:
        RecipeCostEngine.invalidate(instance.recipe_id)


@receiver(post_save, sender=RawMaterial)
def handle_material_price_changes(sender, instance=None, **kwargs):
    from .services import RecipeCostEngine

    if instance is None or instance.pk is None:
        return
    recipe_ids = list(
        RecipeIngredient.objects.filter(material=instance).values_list("recipe_id", flat=True).order_by().distinct()
    )
    if recipe_ids and RecipeCostEngine.invalidate(*recipe_ids):
        logger.debug(f"Invalidated cached cost of {len(recipe_ids)} recipe(s) using material {instance.pk}")
