"""
Page cache control API URL configuration.

Defines URL patterns for cache management endpoints:
- GET /api/htmlcache/status/ - Get current cache status
- POST /api/htmlcache/enable/ - Enable the page cache
- POST /api/htmlcache/disable/ - Disable the page cache
- POST /api/htmlcache/clear/ - Remove every cached page
- POST /api/htmlcache/invalidate/ - Remove pages depending on a content unit
"""

from django.urls import path

from .views import (
    CacheClearView,
    CacheDisableView,
    CacheEnableView,
    CacheInvalidateView,
    CacheStatusView,
)

app_name = 'htmlcache'

urlpatterns = [
    path('status/', CacheStatusView.as_view(), name='status'),
    path('enable/', CacheEnableView.as_view(), name='enable'),
    path('disable/', CacheDisableView.as_view(), name='disable'),
    path('clear/', CacheClearView.as_view(), name='clear'),
    path('invalidate/', CacheInvalidateView.as_view(), name='invalidate'),
]
