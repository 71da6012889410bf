"""
Unit Tests for Formatting Utilities
====================================

Tests for bff/app/utils (slugs, property URLs, addresses, currency).

Run tests:
----------
    pytest bff/app/tests/test_utils.py -v
"""

import pytest

from bff.app.utils import (
    dollars_to_cents,
    format_currency,
    format_property_address,
    generate_property_url,
    get_searchable_address,
    slugify,
)
from bff.app.utils.currency import (
    format_cents_as_currency,
    format_currency_compact,
    format_currency_short,
    get_currency_code,
    get_currency_symbol,
)


# ============================================================================
# Slug Tests
# ============================================================================

@pytest.mark.parametrize(
    "text, expected",
    [
        ("Hello, World!  Foo_Bar", "hello-world-foo-bar"),
        ("  --Multiple---dashes__here  ", "multiple-dashes-here"),
        ("Sunny 2BR Flat", "sunny-2br-flat"),
        ("Café au lait", "caf-au-lait"),
        ("!!!", ""),
        ("", ""),
    ],
)
def test_slugify(text, expected):
    assert slugify(text) == expected


def test_generate_property_url_with_title():
    assert generate_property_url("42", "Sunny 2BR Flat") == "/property/42/sunny-2br-flat"


@pytest.mark.parametrize("title", ["", "???"])
def test_generate_property_url_without_usable_title(title):
    assert generate_property_url("42", title) == "/property/42"


# ============================================================================
# Address Tests
# ============================================================================

def test_format_structured_address():
    assert format_property_address({"street": "1 Main St", "city": "Sydney"}) == "1 Main St, Sydney"


def test_format_full_structured_address():
    address = {
        "street": "12 George St",
        "city": "Sydney",
        "state": "NSW",
        "zipCode": 2000,
        "country": "Australia",
    }

    assert format_property_address(address) == "12 George St, Sydney, NSW, 2000"
    assert get_searchable_address(address) == "12 George St Sydney NSW 2000"


def test_string_address_passes_through():
    assert format_property_address("12 George St, Sydney") == "12 George St, Sydney"
    assert get_searchable_address("12 George St, Sydney") == "12 George St, Sydney"


@pytest.mark.parametrize("address", [None, {}, {"country": "Australia"}, {"street": ""}, 42])
def test_missing_address_uses_placeholder(address):
    assert format_property_address(address) == "Address not available"


@pytest.mark.parametrize("address", [None, "", {}, 42])
def test_missing_address_is_not_searchable(address):
    assert get_searchable_address(address) == ""


# ============================================================================
# Currency Tests
# ============================================================================

@pytest.mark.parametrize(
    "amount, expected",
    [
        (1500, "A$1,500.00"),
        (0, "A$0.00"),
        (2.675, "A$2.68"),
        (1234567.891, "A$1,234,567.89"),
        (-1234.5, "-A$1,234.50"),
    ],
)
def test_format_currency(amount, expected):
    assert format_currency(amount) == expected


def test_format_currency_fraction_digit_range():
    assert format_currency(1500, minimum_fraction_digits=0) == "A$1,500"
    assert format_currency(1500.5, minimum_fraction_digits=0) == "A$1,500.5"
    assert format_currency(10, show_symbol=False) == "10.00"


def test_format_currency_rejects_inverted_digit_range():
    with pytest.raises(ValueError):
        format_currency(1, minimum_fraction_digits=3, maximum_fraction_digits=2)


@pytest.mark.parametrize(
    "amount, expected",
    [
        (450000, "A$450,000"),
        (99.5, "A$100"),
        (None, "Price on Request"),
        ("450000", "Price on Request"),
        (float("nan"), "Price on Request"),
        (True, "Price on Request"),
    ],
)
def test_format_currency_compact(amount, expected):
    assert format_currency_compact(amount) == expected


@pytest.mark.parametrize(
    "amount, expected",
    [
        (1_500_000, "A$1.5M"),
        (2_000_000, "A$2M"),
        (250_000, "A$250K"),
        (950, "A$950"),
        (None, "Price on Request"),
        ("1500000", "Price on Request"),
        (float("nan"), "Price on Request"),
    ],
)
def test_format_currency_short(amount, expected):
    assert format_currency_short(amount) == expected


def test_cents_conversion():
    assert dollars_to_cents(19.99) == 1999
    assert dollars_to_cents(10.005) == 1001
    assert dollars_to_cents(0) == 0
    assert format_cents_as_currency(123456) == "A$1,234.56"


def test_currency_identity():
    assert get_currency_symbol() == "A$"
    assert get_currency_code() == "AUD"
