from __future__ import annotations

import uuid

from django.db import models


class CacheEntry(models.Model):
    """One cached page: binds a (uri, site_id) identity to the uid of its body."""

    uid = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    uri = models.CharField(max_length=2048)
    site_id = models.PositiveIntegerField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "HTML cache entry"
        verbose_name_plural = "HTML cache entries"
        constraints = [
            models.UniqueConstraint(fields=["uri", "site_id"], name="htmlcache_unique_identity"),
        ]

    def __str__(self) -> str:
        return f"{self.uri} (site {self.site_id}, uid {self.uid})"


class CacheDependency(models.Model):
    """Records that a cache entry was rendered from a given content unit."""

    entry = models.ForeignKey(CacheEntry, on_delete=models.CASCADE, related_name="dependencies")
    content_unit = models.CharField(max_length=255, db_index=True)

    class Meta:
        verbose_name = "HTML cache dependency"
        verbose_name_plural = "HTML cache dependencies"
        constraints = [
            models.UniqueConstraint(fields=["entry", "content_unit"], name="htmlcache_unique_dependency"),
        ]

    def __str__(self) -> str:
        return f"{self.entry_id} -> {self.content_unit}"


class HtmlCacheSettings(models.Model):
    singleton_key = models.PositiveSmallIntegerField(primary_key=True, default=1, editable=False)
    enabled = models.BooleanField(default=True)
    force_on = models.BooleanField(default=False)
    # Null means "not configured": the HTMLCACHE_DURATION setting or the default applies
    cache_duration = models.PositiveIntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "HTML cache settings"
        verbose_name_plural = "HTML cache settings"

    def __str__(self) -> str:
        return f"HTML cache settings ({'enabled' if self.enabled else 'disabled'})"

    @classmethod
    def get_solo(cls) -> "HtmlCacheSettings":
        settings_obj, _ = cls.objects.get_or_create(singleton_key=1)
        return settings_obj
