"""
Currency formatting for Australian dollars.

Amounts are rendered as ``A$1,500.00``; payment amounts travel in cents.
"""

from decimal import ROUND_HALF_UP, Decimal
from numbers import Real

CURRENCY_CODE = "AUD"
CURRENCY_SYMBOL = "A$"
PRICE_ON_REQUEST = "Price on Request"


def format_currency(
    amount: float,
    minimum_fraction_digits: int = 2,
    maximum_fraction_digits: int = 2,
    show_symbol: bool = True,
) -> str:
    """
    Format a number as AUD currency.

    Args:
        amount: Amount in dollars
        minimum_fraction_digits: Decimals always shown
        maximum_fraction_digits: Decimals shown at most (rounded half up)
        show_symbol: Prefix with ``A$``

    Returns:
        Formatted currency string (e.g., "A$1,500.00")
    """
    if minimum_fraction_digits > maximum_fraction_digits:
        raise ValueError("minimum_fraction_digits cannot exceed maximum_fraction_digits")

    quantum = Decimal(1).scaleb(-maximum_fraction_digits)
    value = Decimal(str(amount)).quantize(quantum, rounding=ROUND_HALF_UP)

    text = f"{abs(value):,.{maximum_fraction_digits}f}"
    if maximum_fraction_digits > minimum_fraction_digits:
        whole, _, fraction = text.partition(".")
        fraction = fraction.rstrip("0").ljust(minimum_fraction_digits, "0")
        text = f"{whole}.{fraction}" if fraction else whole

    sign = "-" if value < 0 else ""
    symbol = CURRENCY_SYMBOL if show_symbol else ""
    return f"{sign}{symbol}{text}"


def _is_amount(value) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and value == value


def format_currency_compact(amount) -> str:
    """Whole-dollar format; "Price on Request" for anything that is not a number."""
    if not _is_amount(amount):
        return PRICE_ON_REQUEST
    return format_currency(amount, minimum_fraction_digits=0, maximum_fraction_digits=0)


def format_currency_short(amount) -> str:
    """Short form for tables: A$1.5M, A$250K, A$950 ("Price on Request" for non-numbers)."""
    if not _is_amount(amount):
        return PRICE_ON_REQUEST
    if amount >= 1_000_000:
        return format_currency(amount / 1_000_000, 0, 1) + "M"
    if amount >= 1_000:
        return format_currency(amount / 1_000, 0, 0) + "K"
    return format_currency_compact(amount)


def get_currency_symbol() -> str:
    return CURRENCY_SYMBOL


def get_currency_code() -> str:
    return CURRENCY_CODE


def format_cents_as_currency(cents: int) -> str:
    return format_currency(cents / 100)


def dollars_to_cents(dollars: float) -> int:
    """Convert dollars to cents for payment processing."""
    return int(Decimal(str(dollars)).scaleb(2).quantize(Decimal(1), rounding=ROUND_HALF_UP))
