"""
URL slug helpers for events
"""

import re
import unicodedata
from typing import Callable

MAX_SLUG_LENGTH = 100

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """Turn a display name into a URL-safe slug.

    "UNIDAFEST 2025" -> "unidafest-2025", "Canción Añeja" -> "cancion-aneja"
    """
    value = unicodedata.normalize("NFD", name.lower())
    value = "".join(ch for ch in value if not unicodedata.combining(ch))
    value = _NON_ALNUM.sub("-", value).strip("-")
    return value[:MAX_SLUG_LENGTH]


def unique_slug(name: str, exists: Callable[[str], bool]) -> str:
    """Return the slug for ``name``, suffixed with -1, -2, ... until ``exists`` says it is free"""
    base = slugify(name)
    slug = base
    counter = 1

    while exists(slug):
        slug = f"{base}-{counter}"
        counter += 1

    return slug
