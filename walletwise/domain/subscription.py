"""
Subscription record and effective-tier resolution.

The record is read-only input from the account service; the effective tier is
derived on every call from the record and an explicit `now`.
"""
import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Dict, Union

from walletwise.domain.payload import require_fields
from walletwise.domain.tier import SubscriptionTier, parse_tier
from walletwise.utils.timestamps import ensure_utc, isoformat_utc, parse_timestamp

logger = logging.getLogger(__name__)


# ============================================================================
# Expiry
# ============================================================================


@dataclass(frozen=True)
class NeverExpires:
    """endDate отсутствует — тариф бессрочный"""


@dataclass(frozen=True)
class ExpiresAt:
    at: datetime

    def __post_init__(self):
        object.__setattr__(self, "at", ensure_utc(self.at))


@dataclass(frozen=True)
class UnparseableExpiry:
    """endDate пришёл, но не парсится как дата"""
    raw: str


Expiry = Union[NeverExpires, ExpiresAt, UnparseableExpiry]


def parse_expiry(raw) -> Expiry:
    if raw is None or raw == "":
        return NeverExpires()
    parsed = parse_timestamp(raw)
    if parsed is None:
        return UnparseableExpiry(raw=str(raw))
    return ExpiresAt(at=parsed)


def _expiry_to_payload(expiry: Expiry):
    if isinstance(expiry, ExpiresAt):
        return isoformat_utc(expiry.at)
    if isinstance(expiry, UnparseableExpiry):
        return expiry.raw
    return None


# ============================================================================
# Subscription
# ============================================================================


@dataclass(frozen=True)
class Subscription:
    """
    Подписка пользователя (как её отдаёт /user/profile)

    start_date = None, если upstream прислал некорректную дату начала.
    """
    tier: SubscriptionTier
    start_date: datetime | None
    expiry: Expiry
    is_active: bool

    def __post_init__(self):
        # naive-даты трактуются как UTC, как и в parse_timestamp
        if self.start_date is not None:
            object.__setattr__(self, "start_date", ensure_utc(self.start_date))

    @staticmethod
    def from_payload(payload: Dict[str, Any]) -> "Subscription":
        """
        Собрать Subscription из camelCase JSON

        Raises:
            PayloadError: нет поля tier
            UnknownTierError: tier не из перечисления
        """
        require_fields(payload, "Subscription", "tier")

        start_raw = payload.get("startDate")
        start_date = parse_timestamp(start_raw)
        if start_raw is not None and start_date is None:
            logger.warning("Subscription startDate is not a valid timestamp: %r", start_raw)

        return Subscription(
            tier=parse_tier(payload["tier"]),
            start_date=start_date,
            expiry=parse_expiry(payload.get("endDate")),
            is_active=bool(payload.get("isActive", False)),
        )

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "tier": self.tier.value,
            "startDate": isoformat_utc(self.start_date),
            "isActive": self.is_active,
        }
        end = _expiry_to_payload(self.expiry)
        if end is not None:
            payload["endDate"] = end
        return payload

    def with_update(self, event: Dict[str, Any]) -> "Subscription":
        """
        Применить push-событие subscription:updated {tier, isActive}

        Даты подписки сохраняются; свежие даты приходят при перезапросе профиля.
        """
        changes: Dict[str, Any] = {}
        if "tier" in event:
            changes["tier"] = parse_tier(event["tier"])
        if "isActive" in event:
            changes["is_active"] = bool(event["isActive"])
        return replace(self, **changes)


# ============================================================================
# Effective tier
# ============================================================================


def is_trial_expired(subscription: Subscription, now: datetime) -> bool:
    """
    Истёк ли пробный период

    True только для pro_trial с распарсенным endDate < now.
    """
    if subscription.tier != SubscriptionTier.PRO_TRIAL:
        return False
    expiry = subscription.expiry
    if not isinstance(expiry, ExpiresAt):
        return False
    return expiry.at < ensure_utc(now)


def resolve_effective_tier(subscription: Subscription, now: datetime) -> SubscriptionTier:
    """
    Тариф, по которому реально открываются фичи прямо сейчас

    - free / pro / pro_plus возвращаются как есть
    - pro_trial без endDate — активен
    - pro_trial с некорректным endDate — считается активным (fail open)
    - pro_trial с endDate < now — откат на free
    """
    if subscription.tier != SubscriptionTier.PRO_TRIAL:
        return subscription.tier

    if isinstance(subscription.expiry, UnparseableExpiry):
        # TODO: confirm with product whether a malformed trial endDate should fail closed
        logger.warning(
            "pro_trial endDate %r is not a valid timestamp, treating trial as active",
            subscription.expiry.raw,
        )
        return SubscriptionTier.PRO_TRIAL

    if is_trial_expired(subscription, now):
        return SubscriptionTier.FREE

    return SubscriptionTier.PRO_TRIAL
