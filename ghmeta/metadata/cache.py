"""Deterministic cache keys for cross-run correlation."""

from __future__ import annotations

from .models import CacheInfo

KEY_SEPARATOR = "-"


def generate_cache_keys(
    owner: str, name: str, ref_name: str, sha_short: str
) -> CacheInfo:
    """Return the cache key and its restore prefix.

    The restore key is the key without the commit component, terminated by
    the separator, so it prefix-matches every key saved for the same ref.

    Examples
    --------
    >>> generate_cache_keys("octo", "reef", "main", "a1b2c3d")
    CacheInfo(key='octo-reef-main-a1b2c3d', restore_key='octo-reef-main-')

    """
    restore_key = KEY_SEPARATOR.join([owner, name, ref_name]) + KEY_SEPARATOR
    return CacheInfo(key=restore_key + sha_short, restore_key=restore_key)
