"""
URL configuration for the content_site project.

Article pages are served through the HTML page cache; the admin and the
``api/`` prefix are never cached.
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/htmlcache/", include("htmlcache.urls")),
    path("blog/", include("articles.urls")),
]
