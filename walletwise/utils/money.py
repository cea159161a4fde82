"""
Unified money formatting for display.

Aggregation never rounds; rounding to 2 places happens only here, at render time.

Usage:
    from walletwise.utils.money import format_money

    format_money(15000, "IDR")       -> "Rp 15,000.00"
    format_money(1200.5, "USD")      -> "$ 1,200.50"
    format_money(10, "JPY")          -> "JPY 10.00"
"""
from decimal import Decimal, ROUND_HALF_UP

# Символы для поддерживаемых валют, для остальных — ISO-код
_CURRENCY_SYMBOL = {
    "IDR": "Rp",
    "USD": "$",
    "EUR": "€",
}


def currency_symbol(code: str) -> str:
    """Человекочитаемый префикс валюты."""
    return _CURRENCY_SYMBOL.get(code, code)


def round_money(amount, decimals: int = 2) -> Decimal:
    """Округлить сумму для отображения (ROUND_HALF_UP)."""
    if not isinstance(amount, Decimal):
        amount = Decimal(str(amount))
    quantum = Decimal(1).scaleb(-decimals)
    return amount.quantize(quantum, rounding=ROUND_HALF_UP)


def format_money(amount, currency: str = "USD", decimals: int = 2) -> str:
    """
    Отформатировать сумму с разделителями тысяч и символом валюты.

    Args:
        amount: число (int / float / Decimal / str)
        currency: ISO-код валюты (USD, IDR, EUR …)
        decimals: знаков после запятой

    Returns:
        "Rp 15,000.00" / "$ 1,200.50"
    """
    rounded = round_money(amount, decimals)
    formatted = f"{rounded:,.{decimals}f}"
    return f"{currency_symbol(currency)} {formatted}"
