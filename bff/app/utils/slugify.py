"""URL slug helpers for property pages."""

import re

_NON_WORD = re.compile(r"[^\w\s-]", re.ASCII)
_SEPARATOR_RUNS = re.compile(r"[\s_-]+", re.ASCII)


def slugify(text: str) -> str:
    """
    Convert a string to a URL-friendly slug.

    Example:
        >>> slugify("Hello, World!  Foo_Bar")
        'hello-world-foo-bar'
    """
    if not text:
        return ""

    slug = text.lower().strip()
    slug = _NON_WORD.sub("", slug)
    slug = _SEPARATOR_RUNS.sub("-", slug)
    return slug.strip("-")


def generate_property_url(property_id: str, title: str) -> str:
    """
    Build the public property URL, with the title slug when there is one.

    Example:
        >>> generate_property_url("42", "Sunny 2BR Flat")
        '/property/42/sunny-2br-flat'
    """
    slug = slugify(title)
    return f"/property/{property_id}/{slug}" if slug else f"/property/{property_id}"
