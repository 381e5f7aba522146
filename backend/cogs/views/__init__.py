"""
COGS views package.
"""

# Recipe views
from .recipe_views import RecipeViewSet

__all__ = [
    'RecipeViewSet',
]
