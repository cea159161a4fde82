"""
Subscription tiers and the static per-tier feature/limit table.

free:      3 wallets
pro_trial: unlimited wallets while the trial is active, custom categories
pro:       unlimited wallets, custom categories
pro_plus:  unlimited wallets + analytics + export + custom categories
"""
from dataclasses import dataclass
from enum import Enum


class SubscriptionTier(str, Enum):
    FREE = "free"
    PRO_TRIAL = "pro_trial"
    PRO = "pro"
    PRO_PLUS = "pro_plus"


class ConfigError(ValueError):
    """Тариф отсутствует в таблице лимитов (ошибка конфигурации)"""
    pass


class UnknownTierError(ConfigError):
    """Upstream прислал строку тарифа, которой нет в SubscriptionTier"""
    pass


@dataclass(frozen=True)
class TierLimits:
    max_wallets: int | None  # None = без ограничений
    analytics: bool
    export: bool
    custom_categories: bool


@dataclass(frozen=True)
class WalletLimit:
    current: int
    max: int | None
    can_create: bool


# custom_categories открыт для всех платных и пробного тарифов; истёкший триал идёт как free
TIER_LIMITS: dict[SubscriptionTier, TierLimits] = {
    SubscriptionTier.FREE: TierLimits(
        max_wallets=3, analytics=False, export=False, custom_categories=False,
    ),
    SubscriptionTier.PRO_TRIAL: TierLimits(
        max_wallets=None, analytics=False, export=False, custom_categories=True,
    ),
    SubscriptionTier.PRO: TierLimits(
        max_wallets=None, analytics=False, export=False, custom_categories=True,
    ),
    SubscriptionTier.PRO_PLUS: TierLimits(
        max_wallets=None, analytics=True, export=True, custom_categories=True,
    ),
}

FEATURES = ("analytics", "export", "custom_categories")

_missing = set(SubscriptionTier) - set(TIER_LIMITS)
if _missing:
    raise ConfigError(f"TIER_LIMITS is missing tiers: {sorted(t.value for t in _missing)}")


def parse_tier(raw) -> SubscriptionTier:
    """
    Распарсить строку тарифа из upstream-записи

    Raises:
        UnknownTierError: если строка не из {free, pro_trial, pro, pro_plus}
    """
    if isinstance(raw, SubscriptionTier):
        return raw
    try:
        return SubscriptionTier(raw)
    except ValueError:
        raise UnknownTierError(f"Unknown subscription tier: {raw!r}") from None


def limits_for(tier: SubscriptionTier) -> TierLimits:
    """
    Лимиты тарифа

    Raises:
        ConfigError: если тарифа нет в TIER_LIMITS
    """
    try:
        return TIER_LIMITS[tier]
    except (KeyError, TypeError):
        raise ConfigError(f"No limits configured for tier {tier!r}") from None


def free_wallet_limit() -> int:
    """Постоянный лимит кошельков без платного/пробного тарифа."""
    max_wallets = limits_for(SubscriptionTier.FREE).max_wallets
    if max_wallets is None:
        raise ConfigError("Free tier must have a finite wallet limit")
    return max_wallets


def can_create_wallet(tier: SubscriptionTier, current_wallet_count: int) -> bool:
    max_wallets = limits_for(tier).max_wallets
    if max_wallets is None:
        return True
    return current_wallet_count < max_wallets


def wallet_limit_info(tier: SubscriptionTier, current_wallet_count: int) -> WalletLimit:
    """Индикатор лимита кошельков: сколько есть, сколько можно, можно ли ещё."""
    return WalletLimit(
        current=current_wallet_count,
        max=limits_for(tier).max_wallets,
        can_create=can_create_wallet(tier, current_wallet_count),
    )


def feature_allowed(tier: SubscriptionTier, feature: str) -> bool:
    """
    Проверить доступ к фиче (analytics / export / custom_categories)

    Raises:
        ValueError: неизвестное имя фичи
        ConfigError: неизвестный тариф
    """
    if feature not in FEATURES:
        raise ValueError(f"Unknown feature: {feature!r}. Use one of {', '.join(FEATURES)}")
    return getattr(limits_for(tier), feature)
