from django.db.models.signals import post_save
from django.dispatch import receiver
from materials.models import RawMaterial
from core_backend.infrastructure.cache_utils import invalidate_cache_keys
import logging

logger = logging.getLogger(__name__)


@receiver(post_save, sender=RawMaterial)
def handle_material_changes(sender, instance=None, **kwargs):
    """Stock levels embed min/max thresholds and units, so drop the cached level."""
    from .services import _cached_stock_level

    if instance is None or instance.pk is None:
        return
    if invalidate_cache_keys(_cached_stock_level.cache_key_for(instance.pk)):
        logger.debug(f"Invalidated cached stock level for material {instance.pk}")
