"""
Recipe serializers - catalog CRUD with nested ingredients.
"""
from django.db import transaction
from rest_framework import serializers

from core_backend.base import ActorSerializerMixin, BaseModelSerializer
from materials.models import RawMaterial
from measurements.models import MeasurementUnit
from cogs.models import Recipe, RecipeIngredient


class RecipeIngredientSerializer(serializers.ModelSerializer):
    material = serializers.PrimaryKeyRelatedField(queryset=RawMaterial.objects.all())
    material_name = serializers.CharField(source="material.name", read_only=True)
    unit = serializers.ChoiceField(choices=MeasurementUnit.choices)

    class Meta:
        model = RecipeIngredient
        fields = ["id", "material", "material_name", "quantity", "unit", "position", "notes"]
        read_only_fields = ["id"]


class RecipeSerializer(ActorSerializerMixin, BaseModelSerializer):
    """
    Recipe with its ingredient list.

    Writing ``ingredients`` replaces the whole list; unit compatibility is
    checked for every line before anything is saved.
    """
    ingredients = RecipeIngredientSerializer(many=True, required=False)
    created_by_username = serializers.CharField(source="created_by.username", read_only=True, default=None)

    class Meta:
        model = Recipe
        fields = [
            "id",
            "name",
            "description",
            "serving_size",
            "ingredients",
            "is_active",
            "created_by",
            "created_by_username",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["is_active", "created_by", "created_at", "updated_at"]
        select_related_fields = ["created_by"]
        prefetch_related_fields = ["ingredients__material"]

    def validate_serving_size(self, value):
        if value <= 0:
            raise serializers.ValidationError("Serving size must be greater than zero.")
        return value

    def _write_ingredients(self, recipe, ingredients):
        recipe.ingredients.all().delete()
        for position, data in enumerate(ingredients):
            data.setdefault("position", position)
            RecipeIngredient(recipe=recipe, **data).save()

    @transaction.atomic
    def create(self, validated_data):
        ingredients = validated_data.pop("ingredients", [])
        recipe = Recipe.objects.create(created_by=self.get_actor(), **validated_data)
        self._write_ingredients(recipe, ingredients)
        return recipe

    @transaction.atomic
    def update(self, instance, validated_data):
        ingredients = validated_data.pop("ingredients", None)
        recipe = super().update(instance, validated_data)
        if ingredients is not None:
            self._write_ingredients(recipe, ingredients)
        return recipe
