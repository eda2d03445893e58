"""Core package for the LazyPack SEO content toolkit.

The curation pipeline lives in :mod:`lazypack.curation`; the sitemap
extractor, internal-link analyzer and HTML exporter are small helpers
around it.
"""

__all__: list[str] = []
