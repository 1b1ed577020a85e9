"""
Page cache control API views.

Provides REST API endpoints for staff users to manage the page cache:
- GET /api/htmlcache/status/ - Get current cache status
- POST /api/htmlcache/enable/ - Enable the page cache
- POST /api/htmlcache/disable/ - Disable the page cache
- POST /api/htmlcache/clear/ - Remove every cached page
- POST /api/htmlcache/invalidate/ - Remove the pages depending on one content unit

All endpoints require an admin (staff) user.
"""

import logging

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response
from rest_framework.views import APIView

from .conf import get_cache_directory, load_config
from .index import CacheIndex
from .invalidator import Invalidator
from .metrics import cache_metrics
from .models import HtmlCacheSettings
from .serializers import (
    CacheClearSerializer,
    CacheInvalidateRequestSerializer,
    CacheInvalidateSerializer,
    CacheStatusSerializer,
)

logger = logging.getLogger(__name__)


def _status_payload(message=None):
    config = load_config()
    data = {
        'enabled': config.enabled,
        'force_on': config.force_on,
        'cache_duration': config.cache_duration,
        'entries': CacheIndex().count(),
        'directory': str(get_cache_directory()),
        'metrics': cache_metrics.get_stats(),
    }
    if message:
        data['message'] = message
    return CacheStatusSerializer(data).data


class CacheStatusView(APIView):
    """
    Get current page cache status.

    Returns:
        200 OK: {enabled, force_on, cache_duration, entries, directory, metrics}
        401/403: Not authenticated or not staff
        500 Internal Server Error: Database or storage failure
    """

    permission_classes = [IsAdminUser]

    @extend_schema(summary="Get page cache status", responses={200: CacheStatusSerializer, 500: OpenApiTypes.OBJECT})
    def get(self, request):
        """Get page cache status."""
        try:
            return Response(_status_payload(), status=status.HTTP_200_OK)
        except Exception as e:
            logger.error(f"Error getting page cache status: {e}", exc_info=True)
            return Response(
                {'error': 'Failed to retrieve cache status'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )


class CacheEnableView(APIView):
    """
    Enable the page cache.

    Returns:
        200 OK: status payload with enabled=true
        401/403: Not authenticated or not staff
        500 Internal Server Error: Database failure
    """

    permission_classes = [IsAdminUser]

    @extend_schema(summary="Enable the page cache", request=None, responses={200: CacheStatusSerializer})
    def post(self, request):
        """Enable the page cache."""
        try:
            settings_obj = HtmlCacheSettings.get_solo()
            settings_obj.enabled = True
            settings_obj.save()
            logger.info(f"Cache status changed - operation=set_enabled, enabled=True, user_id={request.user.id}")
            return Response(_status_payload('Cache enabled successfully'), status=status.HTTP_200_OK)
        except Exception as e:
            logger.error(f"Error enabling page cache: {e}", exc_info=True)
            return Response(
                {'error': 'Failed to enable cache'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )


class CacheDisableView(APIView):
    """
    Disable the page cache.

    While disabled, requests are neither served from nor written to the cache;
    stored pages are kept and served again once the cache is re-enabled and
    they are still fresh.

    Returns:
        200 OK: status payload with enabled=false
        401/403: Not authenticated or not staff
        500 Internal Server Error: Database failure
    """

    permission_classes = [IsAdminUser]

    @extend_schema(summary="Disable the page cache", request=None, responses={200: CacheStatusSerializer})
    def post(self, request):
        """Disable the page cache."""
        try:
            settings_obj = HtmlCacheSettings.get_solo()
            settings_obj.enabled = False
            settings_obj.save()
            logger.info(f"Cache status changed - operation=set_enabled, enabled=False, user_id={request.user.id}")
            return Response(_status_payload('Cache disabled successfully'), status=status.HTTP_200_OK)
        except Exception as e:
            logger.error(f"Error disabling page cache: {e}", exc_info=True)
            return Response(
                {'error': 'Failed to disable cache'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )


class CacheClearView(APIView):
    """
    Remove every cached page (bodies, entries and dependency links).

    Returns:
        200 OK: {cleared: true, message: str}
        401/403: Not authenticated or not staff
        500 Internal Server Error: Database or storage failure
    """

    permission_classes = [IsAdminUser]

    @extend_schema(summary="Remove every cached page", request=None, responses={200: CacheClearSerializer})
    def post(self, request):
        """Clear the page cache."""
        try:
            Invalidator.from_settings().clear_all()

            serializer = CacheClearSerializer({
                'cleared': True,
                'message': 'Cache cleared successfully',
            })
            return Response(serializer.data, status=status.HTTP_200_OK)

        except Exception as e:
            logger.error(f"Error clearing page cache: {e}", exc_info=True)
            return Response(
                {'error': 'Failed to clear cache'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )


class CacheInvalidateView(APIView):
    """
    Remove the cached pages depending on one content unit.

    Request body: {content_unit: str}

    Returns:
        200 OK: {content_unit: str, removed: int}
        400 Bad Request: Missing or invalid content_unit
        401/403: Not authenticated or not staff
        500 Internal Server Error: Database or storage failure
    """

    permission_classes = [IsAdminUser]

    @extend_schema(
        summary="Remove the cached pages depending on a content unit",
        request=CacheInvalidateRequestSerializer,
        responses={200: CacheInvalidateSerializer, 400: OpenApiTypes.OBJECT},
    )
    def post(self, request):
        """Invalidate the pages depending on a content unit."""
        request_serializer = CacheInvalidateRequestSerializer(data=request.data)
        request_serializer.is_valid(raise_exception=True)
        content_unit = request_serializer.validated_data['content_unit']

        try:
            removed = Invalidator.from_settings().on_content_unit_changed(content_unit)
        except Exception as e:
            logger.error(f"Error invalidating content unit {content_unit}: {e}", exc_info=True)
            return Response(
                {'error': 'Failed to invalidate cache'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        serializer = CacheInvalidateSerializer({'content_unit': content_unit, 'removed': removed})
        return Response(serializer.data, status=status.HTTP_200_OK)
