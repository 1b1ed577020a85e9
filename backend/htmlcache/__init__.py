"""
Full-page HTML cache with content-unit based invalidation.

This package stores rendered GET responses on disk, serves them back while they
are fresh, and removes them selectively when the content that produced a page
changes.
"""
