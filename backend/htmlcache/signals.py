import logging

from django.apps import apps
from django.conf import settings
from django.db.models.signals import post_delete, post_save

from htmlcache.invalidator import Invalidator

logger = logging.getLogger(__name__)


def invalidate_content_unit(sender, instance, **kwargs):
    """Drop every cached page rendered from ``instance`` or from a listing of its model."""
    try:
        invalidator = Invalidator.from_settings()
        invalidator.on_content_unit_changed(instance)
        invalidator.on_content_unit_changed(sender)
    except Exception as e:
        logger.error(
            f"Cache error - operation=invalidate_signal, model={sender._meta.label}, "
            f"pk={instance.pk}, error={e}",
            exc_info=True,
        )


def connect_tracked_models():
    """Connect save/delete receivers for every model in HTMLCACHE_TRACKED_MODELS."""
    for label in getattr(settings, "HTMLCACHE_TRACKED_MODELS", ()):
        model = apps.get_model(label)
        post_save.connect(
            invalidate_content_unit,
            sender=model,
            dispatch_uid=f"htmlcache_post_save_{model._meta.label_lower}",
        )
        post_delete.connect(
            invalidate_content_unit,
            sender=model,
            dispatch_uid=f"htmlcache_post_delete_{model._meta.label_lower}",
        )
        logger.debug(f"Cache invalidation connected - operation=connect_signals, model={model._meta.label}")
