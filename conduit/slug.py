import re
from typing import Callable

_SLUG_STRIP_RE = re.compile(r"[^a-z0-9\s]")
_SLUG_SPACE_RE = re.compile(r"\s+")


def slugify(text: str) -> str:
    """Return a URL-safe, lowercase slug derived from *text*."""
    text = _SLUG_STRIP_RE.sub("", text.lower())
    return _SLUG_SPACE_RE.sub(" ", text).strip().replace(" ", "-")


def unique_slug(title: str, exists: Callable[[str], bool]) -> str:
    """
    Return ``slugify(title)``, suffixed with ``-1``, ``-2``, ... until
    *exists* reports the candidate as free.

    The check runs outside any store lock, so a concurrent writer can still
    claim the slug first; the store's ``ConflictError`` covers that race.
    """
    base = slugify(title)
    if not base:
        raise ValueError(f"title {title!r} has no characters usable in a slug")
    slug = base
    counter = 1
    while exists(slug):
        slug = f"{base}-{counter}"
        counter += 1
    return slug
