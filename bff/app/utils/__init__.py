"""
Utilities Package

Pure formatting helpers shared by the BFF:
- slugify: URL slugs and property URLs
- address: display/search strings for string or structured addresses
- currency: AUD formatting and cents conversion
"""

from .address import format_property_address, get_searchable_address
from .currency import dollars_to_cents, format_currency
from .slugify import generate_property_url, slugify

__all__ = [
    "dollars_to_cents",
    "format_currency",
    "format_property_address",
    "generate_property_url",
    "get_searchable_address",
    "slugify",
]
