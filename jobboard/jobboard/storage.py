"""Object storage helpers.

Files live in "buckets" (top-level folders of the configured Django storage)
and are addressed by ``bucket/path``. Rows store only ``path``; the bucket is
implied by the column (resumes, avatars, company logos).

Uploads use upsert semantics by default: an existing object at the same key
is removed first so the new file keeps the exact key instead of getting a
suffixed name from the storage backend.
"""

from __future__ import annotations

import logging
import posixpath
import re
from typing import Iterable

from django.core.files.storage import default_storage

logger = logging.getLogger(__name__)

RESUMES = "resumes"
AVATARS = "avatars"
PROFILES = "profiles"
COMPANY_LOGOS = "company-logos"


class StorageError(Exception):
    pass


def _safe_segment(value: str) -> str:
    return re.sub(r"[^a-zA-Z0-9_.-]", "_", value)


def object_key(*parts) -> str:
    """Build ``a/b/c`` from parts, sanitising each segment."""
    return "/".join(_safe_segment(str(p)) for p in parts if str(p))


def _full_name(bucket: str, path: str) -> str:
    return posixpath.join(bucket, path)


def file_extension(name: str | None, default: str = "bin") -> str:
    if not name or "." not in name:
        return default
    return name.rsplit(".", 1)[-1].lower()


def upload(bucket: str, path: str, content, *, upsert: bool = True) -> str:
    """Store ``content`` at ``bucket/path`` and return ``path``."""
    name = _full_name(bucket, path)
    try:
        if default_storage.exists(name):
            if not upsert:
                raise StorageError(f"Object already exists: {name}")
            default_storage.delete(name)
        saved = default_storage.save(name, content)
    except StorageError:
        raise
    except Exception as exc:
        logger.exception("Upload failed: bucket=%s path=%s", bucket, path)
        raise StorageError(str(exc)) from exc
    logger.info("Uploaded object: bucket=%s path=%s", bucket, path)
    return posixpath.relpath(saved, bucket)


def remove(bucket: str, paths: Iterable[str]) -> None:
    for path in paths:
        if not path:
            continue
        name = _full_name(bucket, path)
        try:
            default_storage.delete(name)
        except Exception as exc:
            raise StorageError(str(exc)) from exc


def exists(bucket: str, path: str) -> bool:
    return bool(path) and default_storage.exists(_full_name(bucket, path))


def public_url(bucket: str, path: str | None) -> str | None:
    if not path:
        return None
    return default_storage.url(_full_name(bucket, path))
