"""
End-to-end tests: article pages served through the full middleware stack.
"""

from unittest.mock import patch

import pytest
from django.contrib.auth import get_user_model
from django.shortcuts import render

from articles.models import Article
from htmlcache.models import CacheEntry

User = get_user_model()


@pytest.fixture
def article():
    return Article.objects.create(title="Post 1", slug="post-1", body="First body", published=True)


@pytest.mark.django_db
class TestArticleDetail:
    def test_second_request_is_served_from_cache(self, client, article):
        first = client.get("/blog/post-1/")
        second = client.get("/blog/post-1/")

        assert first.status_code == 200
        assert first["X-HtmlCache"] == "MISS"
        assert second["X-HtmlCache"] == "HIT"
        assert second.content == first.content
        assert b"Post 1" in second.content

    def test_silent_update_keeps_stale_page(self, client, article):
        client.get("/blog/post-1/")

        Article.objects.filter(pk=article.pk).update(title="Renamed quietly")
        response = client.get("/blog/post-1/")

        assert response["X-HtmlCache"] == "HIT"
        assert b"Post 1" in response.content

    def test_save_invalidates_page(self, client, article):
        client.get("/blog/post-1/")

        article.title = "Post 1, revised"
        article.save()
        response = client.get("/blog/post-1/")

        assert response["X-HtmlCache"] == "MISS"
        assert b"Post 1, revised" in response.content

    def test_other_articles_stay_cached(self, client, article):
        other = Article.objects.create(title="Post 2", slug="post-2", body="Second", published=True)
        client.get("/blog/post-1/")
        client.get("/blog/post-2/")

        other.body = "Second, edited"
        other.save()

        assert client.get("/blog/post-1/")["X-HtmlCache"] == "HIT"
        assert client.get("/blog/post-2/")["X-HtmlCache"] == "MISS"

    def test_missing_article_is_not_cached(self, client):
        response = client.get("/blog/no-such-post/")

        assert response.status_code == 404
        assert CacheEntry.objects.count() == 0

    def test_post_is_not_cached(self, client, article):
        response = client.post("/blog/post-1/")

        assert "X-HtmlCache" not in response
        assert CacheEntry.objects.count() == 0

    def test_logged_in_users_bypass_cache(self, client, article):
        User.objects.create_user(username="editor", password="editor-pass-123")
        client.login(username="editor", password="editor-pass-123")

        client.get("/blog/post-1/")
        response = client.get("/blog/post-1/")

        assert "X-HtmlCache" not in response
        assert CacheEntry.objects.count() == 0


@pytest.mark.django_db
class TestArticleList:
    def test_new_article_invalidates_listing(self, client, article):
        client.get("/blog/")
        assert client.get("/blog/")["X-HtmlCache"] == "HIT"

        Article.objects.create(title="Post 2", slug="post-2", body="Second", published=True)
        response = client.get("/blog/")

        assert response["X-HtmlCache"] == "MISS"
        assert b"Post 2" in response.content

    def test_deleted_article_invalidates_listing(self, client, article):
        client.get("/blog/")

        article.delete()
        response = client.get("/blog/")

        assert response["X-HtmlCache"] == "MISS"
        assert b"No articles yet." in response.content


@pytest.mark.django_db
class TestArticleJson:
    def test_json_is_served_with_json_content_type(self, client, article):
        client.get("/blog/post-1.json")
        response = client.get("/blog/post-1.json")

        assert response["X-HtmlCache"] == "HIT"
        assert response["Content-Type"] == "application/json"
        assert response.json()["title"] == "Post 1"


@pytest.mark.django_db
class TestSaveDuringRender:
    """A save landing while a page renders must not leave the old render cached."""

    def test_detail_page(self, client, article):
        def render_after_concurrent_save(request, template_name, context):
            Article.objects.filter(pk=article.pk).first().save()
            return render(request, template_name, context)

        with patch("articles.views.render", side_effect=render_after_concurrent_save):
            client.get("/blog/post-1/")

        assert CacheEntry.objects.count() == 0
        assert client.get("/blog/post-1/")["X-HtmlCache"] == "MISS"

    def test_listing_page(self, client, article):
        real_filter = Article.objects.filter

        def filter_then_concurrent_create(**kwargs):
            rows = list(real_filter(**kwargs))
            Article.objects.create(title="Post 2", slug="post-2", body="Second", published=True)
            return rows

        with patch.object(Article.objects, "filter", side_effect=filter_then_concurrent_create):
            stale = client.get("/blog/")

        assert b"Post 2" not in stale.content
        response = client.get("/blog/")
        assert response["X-HtmlCache"] == "MISS"
        assert b"Post 2" in response.content
