"""
Slug derivation for listing names.

Two forms:
- slugify: URL-safe listing slug, "Crystal Ball #123" -> "crystal-ball-123"
- gift_lookup_slug: key used by t.me/nft and the attribute API,
  "Crystal Ball #123" -> "crystalball-123"
"""

import re

_DISALLOWED_RE = re.compile(r"[^a-z0-9\s#-]")
_LOOKUP_DISALLOWED_RE = re.compile(r"[^a-z0-9\s#]")
_WHITESPACE_RE = re.compile(r"\s+")
_DASHES_RE = re.compile(r"-+")


def slugify(name: str) -> str:
    """
    Normalize a display name to a URL-safe slug.

    Order matters: disallowed characters are stripped first (accents are
    dropped, not transliterated), then whitespace runs become '-', then
    '#' becomes '-', repeated dashes collapse and edge dashes are trimmed.
    The output is a fixed point: slugify(slugify(x)) == slugify(x).

    Examples:
        "Crystal Ball #123" -> "crystal-ball-123"
        "  Déjà Vu!! "      -> "dj-vu"
    """
    if not name:
        return ""
    slug = _DISALLOWED_RE.sub("", name.lower())
    slug = _WHITESPACE_RE.sub("-", slug)
    slug = slug.replace("#", "-")
    slug = _DASHES_RE.sub("-", slug)
    return slug.strip("-")


def gift_lookup_slug(name: str) -> str:
    """Marketplace gift key: words joined, serial after a dash ("crystalball-123")."""
    if not name:
        return ""
    slug = _LOOKUP_DISALLOWED_RE.sub("", name.lower())
    slug = _WHITESPACE_RE.sub("", slug)
    slug = slug.replace("#", "-")
    slug = _DASHES_RE.sub("-", slug)
    return slug.strip("-")
