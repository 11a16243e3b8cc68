# Overview: Text normalization helpers shared by models and services.

from __future__ import annotations

import re

# ASCII-only word characters so the same name always yields the same slug
_SLUG_STRIP = re.compile(r"[^\w\s-]", re.ASCII)
_SLUG_SEPARATORS = re.compile(r"[\s_-]+", re.ASCII)


def slugify(name: str | None) -> str:
    """
    Derive a URL slug from a display name.

    "Home & Garden!!" -> "home-garden"
    """
    if not name:
        return ""
    slug = name.lower().strip()
    slug = _SLUG_STRIP.sub("", slug)
    slug = _SLUG_SEPARATORS.sub("-", slug)
    return slug.strip("-")


def cents_to_decimal_str(cents: int | None) -> str | None:
    if cents is None:
        return None
    sign = "-" if cents < 0 else ""
    cents = abs(cents)
    return f"{sign}{cents // 100}.{cents % 100:02d}"
