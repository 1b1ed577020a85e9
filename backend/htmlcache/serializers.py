"""
Page cache control API serializers.

Provides serializers for cache status, clear and invalidate operations.
"""

from rest_framework import serializers


class CacheStatusSerializer(serializers.Serializer):
    """Serializer for cache status response."""

    enabled = serializers.BooleanField(
        help_text="Whether the page cache is enabled"
    )
    force_on = serializers.BooleanField(
        help_text="Whether the cache stays on in debug and maintenance mode"
    )
    cache_duration = serializers.IntegerField(
        help_text="Effective cache duration in seconds",
        min_value=1
    )
    entries = serializers.IntegerField(
        help_text="Number of live cache entries",
        min_value=0
    )
    directory = serializers.CharField(
        help_text="Directory holding the cache bodies"
    )
    metrics = serializers.DictField(
        required=False,
        help_text="Per-process hit/miss/write counters"
    )
    message = serializers.CharField(
        required=False,
        help_text="Optional status message"
    )


class CacheClearSerializer(serializers.Serializer):
    """Serializer for cache clear response."""

    cleared = serializers.BooleanField(
        help_text="Whether the cache was successfully cleared"
    )
    message = serializers.CharField(
        required=False,
        help_text="Optional success message"
    )


class CacheInvalidateRequestSerializer(serializers.Serializer):
    """Serializer for the content unit invalidation request."""

    content_unit = serializers.CharField(
        max_length=255,
        help_text="Identifier of the changed content unit (e.g. 'articles.article:42')"
    )


class CacheInvalidateSerializer(serializers.Serializer):
    """Serializer for the content unit invalidation response."""

    content_unit = serializers.CharField()
    removed = serializers.IntegerField(
        help_text="Number of cache entries removed",
        min_value=0
    )
