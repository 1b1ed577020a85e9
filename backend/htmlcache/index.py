"""
Cache index: request identity to cache entry, content unit to dependent entries.

Entry metadata and dependency links live in two ORM tables. The index never
touches cache bodies; callers that replace or delete entries remove the
matching bodies through the store.
"""

import logging
from typing import Iterable, Iterator, List, Optional

from django.db import IntegrityError, models, transaction

from htmlcache.context import RequestIdentity
from htmlcache.models import CacheDependency, CacheEntry

logger = logging.getLogger(__name__)


def content_unit_key(unit) -> str:
    """
    Return the identifier of a content unit.

    Model instances map to ``<app_label>.<model_name>:<pk>``, model classes to
    ``<app_label>.<model_name>`` (used by listings depending on "any row of
    this model"), strings pass through and anything else is converted with
    ``str()``.
    """
    if isinstance(unit, str):
        return unit
    if isinstance(unit, models.Model):
        return f"{unit._meta.label_lower}:{unit.pk}"
    if isinstance(unit, type) and issubclass(unit, models.Model):
        return unit._meta.label_lower
    return str(unit)


def _distinct_keys(units: Iterable) -> List[str]:
    keys = []
    for unit in units:
        key = content_unit_key(unit)
        if key not in keys:
            keys.append(key)
    return keys


class CacheIndex:
    """
    Typed access to cache entries and their dependency links.

    Example Usage:
        >>> index = CacheIndex()
        >>> entry = index.create_entry(identity, depends_on={"articles.article:42"})
        >>> index.find_entry(identity) == entry
        True
        >>> index.entries_depending_on("articles.article:42")
        [<CacheEntry: ...>]
    """

    def find_entry(self, identity: RequestIdentity) -> Optional[CacheEntry]:
        return CacheEntry.objects.filter(uri=identity.uri, site_id=identity.site_id).first()

    def create_entry(self, identity: RequestIdentity, depends_on: Iterable = ()) -> CacheEntry:
        """
        Create the entry for ``identity``, replacing any existing one.

        The replaced entry's dependency links go with it and the new entry
        always gets a freshly minted uid. Concurrent creators race on the
        unique (uri, site_id) constraint; the loser retries once, so the last
        writer wins.
        """
        keys = _distinct_keys(depends_on)

        for attempt in range(2):
            try:
                with transaction.atomic():
                    CacheEntry.objects.filter(uri=identity.uri, site_id=identity.site_id).delete()
                    entry = CacheEntry.objects.create(uri=identity.uri, site_id=identity.site_id)
                    CacheDependency.objects.bulk_create(
                        [CacheDependency(entry=entry, content_unit=key) for key in keys]
                    )
            except IntegrityError:
                if attempt:
                    raise
                logger.info(f"Cache entry creation raced - operation=create_entry, {identity}, retrying")
                continue

            logger.debug(
                f"Cache entry created - operation=create_entry, {identity}, "
                f"uid={entry.uid}, dependencies={len(keys)}"
            )
            return entry

    def add_dependencies(self, entry: CacheEntry, depends_on: Iterable) -> None:
        """Link ``entry`` to more content units; existing links are kept."""
        keys = _distinct_keys(depends_on)
        if not keys:
            return
        with transaction.atomic():
            # Invalidated since it was created: nothing left to link
            if not CacheEntry.objects.select_for_update().filter(pk=entry.pk).exists():
                logger.debug(f"Cache links skipped - operation=add_dependencies, uid={entry.uid}, reason=entry_removed")
                return
            CacheDependency.objects.bulk_create(
                [CacheDependency(entry=entry, content_unit=key) for key in keys],
                ignore_conflicts=True,
            )

    def dependencies_of(self, entry: CacheEntry) -> set:
        return set(entry.dependencies.values_list("content_unit", flat=True))

    def entries_depending_on(self, content_unit) -> List[CacheEntry]:
        key = content_unit_key(content_unit)
        return list(CacheEntry.objects.filter(dependencies__content_unit=key).distinct())

    def delete_entries(self, entry_ids: Iterable[int]) -> int:
        """
        Delete entries and all of their dependency links.

        Returns:
            Number of entries deleted
        """
        entry_ids = list(entry_ids)
        if not entry_ids:
            return 0
        _, deleted = CacheEntry.objects.filter(id__in=entry_ids).delete()
        return deleted.get(CacheEntry._meta.label, 0)

    def clear_all(self) -> int:
        _, deleted = CacheEntry.objects.all().delete()
        return deleted.get(CacheEntry._meta.label, 0)

    def all_entries(self) -> Iterator[CacheEntry]:
        return CacheEntry.objects.order_by("id").iterator()

    def count(self) -> int:
        return CacheEntry.objects.count()
