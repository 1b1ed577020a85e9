"""
Unit tests for the cache index (entries and dependency links).
"""

import pytest

from articles.models import Article
from htmlcache.context import RequestIdentity
from htmlcache.index import CacheIndex, content_unit_key
from htmlcache.models import CacheDependency, CacheEntry

POST_1 = RequestIdentity(uri="/blog/post-1/", site_id=1)
POST_2 = RequestIdentity(uri="/blog/post-2/", site_id=1)


@pytest.fixture
def index():
    return CacheIndex()


class TestContentUnitKey:
    """Content unit identifiers."""

    def test_strings_pass_through(self):
        assert content_unit_key("articles.article:42") == "articles.article:42"

    def test_integers_are_stringified(self):
        assert content_unit_key(42) == "42"

    def test_model_class(self):
        assert content_unit_key(Article) == "articles.article"

    def test_model_instance(self):
        assert content_unit_key(Article(pk=42, title="A", slug="a")) == "articles.article:42"


@pytest.mark.django_db
class TestCacheIndex:
    """Entry creation, lookup and deletion."""

    def test_find_entry_misses_without_entry(self, index):
        assert index.find_entry(POST_1) is None

    def test_create_then_find(self, index):
        entry = index.create_entry(POST_1, depends_on={42})

        assert index.find_entry(POST_1) == entry
        assert index.dependencies_of(entry) == {"42"}

    def test_identity_includes_site(self, index):
        index.create_entry(POST_1)

        assert index.find_entry(RequestIdentity(uri=POST_1.uri, site_id=2)) is None

    def test_create_replaces_existing_entry_with_fresh_uid(self, index):
        first = index.create_entry(POST_1, depends_on={1, 2})
        second = index.create_entry(POST_1, depends_on={3})

        assert second.uid != first.uid
        assert CacheEntry.objects.filter(uri=POST_1.uri, site_id=POST_1.site_id).count() == 1
        assert not CacheEntry.objects.filter(pk=first.pk).exists()
        assert index.dependencies_of(second) == {"3"}
        assert not CacheDependency.objects.filter(entry_id=first.pk).exists()

    def test_duplicate_dependencies_are_collapsed(self, index):
        entry = index.create_entry(POST_1, depends_on=[42, "42", 42])

        assert entry.dependencies.count() == 1

    def test_add_dependencies_keeps_existing_links(self, index):
        entry = index.create_entry(POST_1, depends_on={1})

        index.add_dependencies(entry, [1, 2])
        index.add_dependencies(entry, [])

        assert index.dependencies_of(entry) == {"1", "2"}

    def test_add_dependencies_to_removed_entry_is_a_no_op(self, index):
        entry = index.create_entry(POST_1, depends_on={1})
        index.delete_entries([entry.pk])

        index.add_dependencies(entry, [2])

        assert CacheDependency.objects.count() == 0

    def test_entries_depending_on(self, index):
        a = index.create_entry(POST_1, depends_on={1, 2})
        b = index.create_entry(POST_2, depends_on={2, 3})

        assert {e.pk for e in index.entries_depending_on(2)} == {a.pk, b.pk}
        assert [e.pk for e in index.entries_depending_on(1)] == [a.pk]
        assert index.entries_depending_on(99) == []

    def test_delete_entries_removes_links(self, index):
        a = index.create_entry(POST_1, depends_on={1, 2})
        b = index.create_entry(POST_2, depends_on={2})

        assert index.delete_entries([a.pk]) == 1

        assert index.find_entry(POST_1) is None
        assert index.find_entry(POST_2) == b
        assert set(CacheDependency.objects.values_list("entry_id", flat=True)) == {b.pk}

    def test_delete_entries_with_no_ids(self, index):
        assert index.delete_entries([]) == 0

    def test_clear_all(self, index):
        index.create_entry(POST_1, depends_on={1})
        index.create_entry(POST_2, depends_on={2})

        assert index.clear_all() == 2
        assert index.count() == 0
        assert CacheDependency.objects.count() == 0
