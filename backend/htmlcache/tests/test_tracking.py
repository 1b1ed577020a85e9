"""
Tests for dependency tracking during a capture.
"""

from unittest.mock import patch

import pytest
from django.template import Context, Template
from django.test import RequestFactory

from articles.models import Article
from htmlcache.context import RequestContext
from htmlcache.index import CacheIndex
from htmlcache.service import PageCacheService
from htmlcache.store import CacheStore
from htmlcache.tracking import depends_on, get_active_capture


@pytest.fixture
def request_and_service(cache_dir):
    request = RequestFactory().get("/blog/post-1/")
    service = PageCacheService(CacheStore(cache_dir))
    return request, service


def test_depends_on_outside_capture_is_a_no_op():
    request = RequestFactory().get("/blog/")

    assert depends_on(42, request=request) is None
    assert depends_on(42) is None


@pytest.mark.django_db
class TestCapture:
    """Reporting content units while a page is captured."""

    def test_first_report_creates_entry(self, request_and_service):
        request, service = request_and_service
        capture = service.start_capture(request, RequestContext.from_request(request))
        try:
            entry = depends_on(42, "articles.article", request=request)
        finally:
            service.end_capture(request)

        assert entry is capture.entry
        assert CacheIndex().dependencies_of(entry) == {"42", "articles.article"}

    def test_later_reports_add_links_to_same_entry(self, request_and_service):
        request, service = request_and_service
        service.start_capture(request, RequestContext.from_request(request))
        try:
            first = depends_on(1, request=request)
            second = depends_on(1, 2, request=request)
            third = depends_on(2, request=request)
        finally:
            service.end_capture(request)

        assert first.pk == second.pk == third.pk
        assert CacheIndex().count() == 1
        assert CacheIndex().dependencies_of(first) == {"1", "2"}

    def test_thread_local_capture_without_request(self, request_and_service):
        request, service = request_and_service
        service.start_capture(request, RequestContext.from_request(request))
        try:
            assert get_active_capture() is get_active_capture(request)
            entry = depends_on(5)
        finally:
            service.end_capture(request)

        assert entry is not None
        assert get_active_capture() is None

    def test_index_failure_is_absorbed(self, request_and_service):
        request, service = request_and_service
        service.start_capture(request, RequestContext.from_request(request))
        try:
            with patch.object(PageCacheService, "create_entry", side_effect=RuntimeError("db down")):
                assert depends_on(42, request=request) is None
        finally:
            service.end_capture(request)

        assert CacheIndex().count() == 0

    def test_template_tag_reports_units(self, request_and_service):
        request, service = request_and_service
        article = Article.objects.create(title="Post 1", slug="post-1", body="A", published=True)
        template = Template("{% load htmlcache_tags %}{% cache_depends_on article %}<p>{{ article.title }}</p>")

        capture = service.start_capture(request, RequestContext.from_request(request))
        try:
            rendered = template.render(Context({"request": request, "article": article}))
        finally:
            service.end_capture(request)

        assert rendered == "<p>Post 1</p>"
        assert CacheIndex().dependencies_of(capture.entry) == {f"articles.article:{article.pk}"}

    def test_template_tag_outside_capture_renders_nothing(self):
        template = Template("{% load htmlcache_tags %}{% cache_depends_on 42 %}ok")

        assert template.render(Context({})) == "ok"
