"""
Selective and full invalidation of cached pages.

When a content unit changes, every cache entry rendered from it is removed:
bodies first (best effort), then the entries and their dependency links in a
single delete. A reader racing this sees either a hit on the old body or a
miss; never an error.
"""

import logging

from htmlcache.conf import get_cache_directory
from htmlcache.exceptions import CacheBodyNotFound
from htmlcache.index import CacheIndex, content_unit_key
from htmlcache.metrics import cache_metrics
from htmlcache.store import CacheStore

logger = logging.getLogger(__name__)


class Invalidator:
    """
    Removes cache entries whose content changed, or all of them.

    Example Usage:
        >>> invalidator = Invalidator.from_settings()
        >>> invalidator.on_content_unit_changed("articles.article:42")
        1
        >>> invalidator.clear_all()
    """

    def __init__(self, store: CacheStore, index: CacheIndex = None, metrics=None):
        self.store = store
        self.index = index or CacheIndex()
        self.metrics = metrics or cache_metrics

    @classmethod
    def from_settings(cls) -> "Invalidator":
        return cls(store=CacheStore(get_cache_directory()))

    def on_content_unit_changed(self, content_unit) -> int:
        """
        Remove every cache entry depending on ``content_unit``.

        Args:
            content_unit: Model instance, model class, string or integer

        Returns:
            Number of cache entries removed
        """
        key = content_unit_key(content_unit)

        with self.metrics.measure_latency('invalidate'):
            entries = self.index.entries_depending_on(key)
            for entry in entries:
                try:
                    self.store.delete(entry.uid)
                except OSError as e:
                    self.metrics.record_error('invalidation')
                    logger.error(
                        f"Cache error - operation=invalidate, content_unit={key}, "
                        f"uid={entry.uid}, error={e}"
                    )
            removed = self.index.delete_entries(entry.id for entry in entries)

        self.metrics.record('invalidation')
        logger.info(f"Cache invalidated - operation=invalidate, content_unit={key}, entries={removed}")
        return removed

    def clear_all(self) -> None:
        """Remove every cache body, then every entry and dependency link."""
        bodies = self.store.clear_all()
        entries = self.index.clear_all()

        self.metrics.record('flush')
        logger.info(f"Cache cleared - operation=clear_all, bodies={bodies}, entries={entries}")

    def purge_expired(self, cache_duration: int) -> int:
        """
        Remove entries whose body is missing or older than ``cache_duration``,
        and bodies that no entry refers to.

        Lazy expiry on the read path already hides such entries; this sweep
        only reclaims space.

        Returns:
            Number of cache entries removed
        """
        stale_ids = []
        live_uids = set()

        for entry in self.index.all_entries():
            try:
                age = self.store.age_seconds(entry.uid)
            except CacheBodyNotFound:
                stale_ids.append(entry.id)
                continue
            if age >= cache_duration:
                self.store.delete(entry.uid)
                stale_ids.append(entry.id)
            else:
                live_uids.add(str(entry.uid))

        orphans = [uid for uid in self.store.iter_uids() if uid not in live_uids]
        for uid in orphans:
            self.store.delete(uid)

        removed = self.index.delete_entries(stale_ids)
        logger.info(
            f"Cache purged - operation=purge_expired, duration={cache_duration}, "
            f"entries={removed}, orphan_bodies={len(orphans)}"
        )
        return removed
