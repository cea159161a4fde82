"""
Validation utilities
"""
import re
from decimal import Decimal, InvalidOperation

_CURRENCY_CODE_RE = re.compile(r"[A-Z]{3}")


def normalize_decimal_input(value: str) -> str:
    """
    Нормализовать ввод суммы: заменить запятую на точку

    Example:
        >>> normalize_decimal_input("100,50")
        "100.50"
    """
    return value.strip().replace(",", ".")


def parse_amount(value) -> Decimal:
    """
    Привести сумму из JSON (int / float / str / Decimal) к Decimal

    float проходит через str(), чтобы не тащить двоичный хвост (0.1 -> "0.1").

    Raises:
        ValueError: если значение не число
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid amount: {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(normalize_decimal_input(value))
        except InvalidOperation:
            raise ValueError(f"Invalid amount: {value!r}") from None
    else:
        raise ValueError(f"Invalid amount: {value!r}")

    if not result.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return result


def is_valid_currency_code(code: str) -> bool:
    """Код валюты: строго 3 заглавные латинские буквы (USD, IDR, EUR)."""
    return isinstance(code, str) and bool(_CURRENCY_CODE_RE.fullmatch(code))
