"""
Stripe amounts are integers in the smallest currency unit (cents for USD).
Zero-decimal currencies such as JPY have no smaller unit, so their amount
is already in major units.
"""
from decimal import Decimal

ZERO_DECIMAL_CURRENCIES = frozenset({
    "BIF", "CLP", "DJF", "GNF", "JPY", "KMF", "KRW", "MGA",
    "PYG", "RWF", "UGX", "VND", "VUV", "XAF", "XOF", "XPF",
})


def to_major_units(amount, currency="usd"):
    if amount is None:
        return None
    if currency.upper() in ZERO_DECIMAL_CURRENCIES:
        return Decimal(int(amount))
    return Decimal(int(amount)) / 100


def format_amount(amount, currency="usd"):
    """$12.34 for USD, '12.34 EUR' for everything else."""
    if amount is None:
        return None
    places = "1" if currency.upper() in ZERO_DECIMAL_CURRENCIES else "0.01"
    value = amount.quantize(Decimal(places))
    if currency.lower() == "usd":
        return f"${value}"
    return f"{value} {currency.upper()}"
