"""Cached page data, invalidated by path after mutations."""

import logging

from django.conf import settings
from django.core.cache import cache

logger = logging.getLogger(__name__)

JOB_LIST = "/job-list"


def _key(path: str) -> str:
    return f"page:{path.rstrip('/') or '/'}"


def company_path(path: str, company_id) -> str:
    """Scope a company page path so tenants never share an entry."""
    return f"{path}?company={company_id}"


def cached_page(path: str, builder):
    """Return the cached value for ``path``, building and storing it on a miss."""
    timeout = getattr(settings, "JOBBOARD_PAGE_CACHE_SECONDS", 300)
    return cache.get_or_set(_key(path), builder, timeout=timeout)


def revalidate_path(*paths: str) -> None:
    keys = [_key(p) for p in paths]
    cache.delete_many(keys)
    logger.debug("Revalidated paths: %s", ", ".join(paths))
