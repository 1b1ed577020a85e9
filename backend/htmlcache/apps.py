"""
Django app configuration for the HTML page cache.

Connects the content-change signal receivers for the models listed in
``HTMLCACHE_TRACKED_MODELS`` once the app registry is ready.
"""

import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class HtmlCacheConfig(AppConfig):
    """
    Configuration for the htmlcache Django app.

    This app provides:
    - A middleware serving and capturing full-page responses
    - A file based body store and an ORM based entry/dependency index
    - Selective invalidation when tracked content units change
    """

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'htmlcache'
    verbose_name = 'HTML Page Cache'

    def ready(self):
        # Import here to avoid AppRegistryNotReady errors
        from htmlcache.signals import connect_tracked_models

        try:
            connect_tracked_models()
        except LookupError as e:
            # A misconfigured model label must not prevent Django from starting
            logger.error(f"Error connecting htmlcache signal receivers: {e}", exc_info=True)
