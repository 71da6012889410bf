"""
Address normalization.

Property addresses arrive either as a plain string or as a structured object
(street, city, state, zipCode, country). These helpers turn both into a single
string for display or search.
"""

from typing import Any, Mapping

ADDRESS_PLACEHOLDER = "Address not available"
ADDRESS_FIELDS = ("street", "city", "state", "zipCode")


def _present_parts(address: Mapping[str, Any]) -> list:
    return [str(address[key]) for key in ADDRESS_FIELDS if address.get(key)]


def format_property_address(address: Any) -> str:
    """
    Format an address for display.

    Example:
        >>> format_property_address({"street": "1 Main St", "city": "Sydney"})
        '1 Main St, Sydney'
        >>> format_property_address(None)
        'Address not available'
    """
    if isinstance(address, str):
        return address

    if isinstance(address, Mapping):
        return ", ".join(_present_parts(address)) or ADDRESS_PLACEHOLDER

    return ADDRESS_PLACEHOLDER


def get_searchable_address(address: Any) -> str:
    """Flatten an address into space-separated search text ("" when absent)."""
    if not address:
        return ""

    if isinstance(address, str):
        return address

    if isinstance(address, Mapping):
        return " ".join(_present_parts(address))

    return ""
