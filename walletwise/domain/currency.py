"""
Multi-currency conversion over a USD-based rate table.

rates[code] = units of `code` per 1 USD. Conversion goes through the base:
    amount_in_base = amount / rates[from]
    result         = amount_in_base * rates[to]

A missing (or unusable) rate is treated as 1. This keeps display totals from
breaking on an unknown currency; the results are for display only, never for
ledger amounts.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, Mapping

from walletwise.domain.payload import PayloadError, require_fields
from walletwise.utils.timestamps import isoformat_utc, parse_timestamp
from walletwise.utils.validation import parse_amount

logger = logging.getLogger(__name__)

BASE_CURRENCY = "USD"

# Приблизительные курсы: 1 USD = STATIC_FX_RATES[code] единиц валюты
STATIC_FX_RATES: Dict[str, Decimal] = {
    "USD": Decimal("1"),
    "IDR": Decimal("15000"),
}

_IDENTITY_RATE = Decimal("1")


@dataclass(frozen=True)
class RateTable:
    """Таблица курсов относительно base_code (USD)"""
    rates: Mapping[str, Decimal]
    base_code: str = BASE_CURRENCY
    updated_at: datetime | None = None
    source: str = "static"  # static | live

    def rate(self, code: str) -> Decimal:
        """Курс валюты; отсутствующий или неположительный — 1"""
        value = self.rates.get(code)
        if value is None:
            return _IDENTITY_RATE
        if value <= 0:
            logger.warning("Non-positive FX rate %s for %s, using 1", value, code)
            return _IDENTITY_RATE
        return value

    @staticmethod
    def from_payload(payload: Dict[str, Any], source: str = "live") -> "RateTable":
        """
        Собрать таблицу из ответа /settings/fx-rates: {baseCode, rates, updatedAt}

        Нечисловые курсы пропускаются (для них сработает фолбэк 1).

        Raises:
            PayloadError: нет поля rates или оно не объект
        """
        require_fields(payload, "FX rates", "rates")
        raw_rates = payload["rates"]
        if not isinstance(raw_rates, dict):
            raise PayloadError("FX rates record field 'rates' must be an object")

        rates: Dict[str, Decimal] = {}
        for code, raw in raw_rates.items():
            try:
                rates[code] = parse_amount(raw)
            except ValueError:
                logger.warning("Skipping non-numeric FX rate %r for %s", raw, code)

        return RateTable(
            rates=rates,
            base_code=payload.get("baseCode") or BASE_CURRENCY,
            updated_at=parse_timestamp(payload.get("updatedAt")),
            source=source,
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "baseCode": self.base_code,
            "rates": {code: str(value) for code, value in self.rates.items()},
            "updatedAt": isoformat_utc(self.updated_at),
            "source": self.source,
        }


def static_rate_table() -> RateTable:
    return RateTable(rates=dict(STATIC_FX_RATES), source="static")


def as_rate_table(rates) -> RateTable:
    """RateTable как есть; dict code -> курс оборачивается (нечисловые курсы пропускаются)"""
    if isinstance(rates, RateTable):
        return rates
    return RateTable.from_payload({"rates": dict(rates)}, source="custom")


def convert(amount, from_currency: str, to_currency: str, rates) -> Decimal:
    """
    Перевести сумму из одной валюты в другую через USD

    Args:
        amount: сумма (Decimal / int / float / str)
        from_currency: исходная валюта
        to_currency: целевая валюта
        rates: RateTable или dict code -> курс

    Returns:
        Decimal без округления (округление только при отображении)
    """
    value = parse_amount(amount)
    if from_currency == to_currency:
        return value
    table = as_rate_table(rates)
    amount_in_base = value / table.rate(from_currency)
    return amount_in_base * table.rate(to_currency)


def aggregate_balances(
    wallets: Iterable,
    frozen_ids: Iterable[str],
    display_currency: str,
    rates,
) -> Decimal:
    """
    Сумма балансов в валюте отображения, без замороженных кошельков

    wallets — объекты с полями id, balance, currency.
    """
    table = as_rate_table(rates)
    frozen = set(frozen_ids)
    total = Decimal("0")
    for wallet in wallets:
        if wallet.id in frozen:
            continue
        total += convert(wallet.balance, wallet.currency, display_currency, table)
    return total
