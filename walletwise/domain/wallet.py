"""
Wallet record as returned by GET /wallets
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict

from walletwise.domain.payload import PayloadError, require_fields
from walletwise.utils.timestamps import ensure_utc, isoformat_utc, parse_timestamp
from walletwise.utils.validation import parse_amount

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Wallet:
    """
    Кошелёк пользователя (read-only снимок из upstream API)

    Баланс хранится в валюте кошелька; пересчёт в валюту отображения
    всегда вычисляется, никогда не сохраняется.
    created_at = None, если upstream прислал некорректную дату.
    """
    id: str
    name: str
    balance: Decimal
    currency: str
    created_at: datetime | None
    user_id: str | None = None
    color: str | None = None
    icon: str | None = None

    def __post_init__(self):
        if self.created_at is not None:
            object.__setattr__(self, "created_at", ensure_utc(self.created_at))

    @staticmethod
    def from_payload(payload: Dict[str, Any]) -> "Wallet":
        """
        Собрать Wallet из camelCase JSON

        Raises:
            PayloadError: нет обязательных полей или баланс не число
        """
        require_fields(payload, "Wallet", "id", "currency")

        try:
            balance = parse_amount(payload.get("balance", 0))
        except ValueError as exc:
            raise PayloadError(f"Wallet {payload['id']}: {exc}") from None

        created_raw = payload.get("createdAt")
        created_at = parse_timestamp(created_raw)
        if created_at is None:
            logger.warning("Wallet %s has invalid createdAt %r", payload["id"], created_raw)

        return Wallet(
            id=str(payload["id"]),
            name=payload.get("name") or "",
            balance=balance,
            currency=payload["currency"],
            created_at=created_at,
            user_id=payload.get("userId"),
            color=payload.get("color"),
            icon=payload.get("icon"),
        )

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "balance": str(self.balance),
            "currency": self.currency,
            "createdAt": isoformat_utc(self.created_at),
        }
        for key, value in (("userId", self.user_id), ("color", self.color), ("icon", self.icon)):
            if value is not None:
                payload[key] = value
        return payload


@dataclass(frozen=True)
class WalletView:
    """Кошелёк + флаг заморозки для списка (замороженные видны, но read-only)"""
    wallet: Wallet
    is_frozen_extra: bool

    def to_payload(self) -> Dict[str, Any]:
        payload = self.wallet.to_payload()
        payload["isFrozenExtra"] = self.is_frozen_extra
        return payload
