"""
Account evaluation: effective tier, limits and frozen wallets with display totals.

Pure read-layer over already-fetched upstream records: no I/O, no persistence.
The pipeline:
  1. effective tier (trial expiry falls back to free)
  2. tier limits (wallet cap, analytics, export, custom categories)
  3. frozen wallets (expired trial only)
  4. total balance and transaction summary in the display currency,
     frozen wallets excluded

An unknown tier never raises into the caller: the snapshot comes back with
plan_state=UNKNOWN, nothing gated open and nothing frozen.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Sequence

from walletwise.domain.currency import RateTable, aggregate_balances, as_rate_table
from walletwise.domain.freezing import compute_frozen_wallets, flag_frozen
from walletwise.domain.profile import AccountProfile
from walletwise.domain.subscription import is_trial_expired, resolve_effective_tier
from walletwise.domain.tier import (
    FEATURES, ConfigError, SubscriptionTier, TierLimits, WalletLimit,
    feature_allowed, free_wallet_limit, limits_for, wallet_limit_info,
)
from walletwise.domain.transaction import Transaction, TransactionSummary, summarize_transactions
from walletwise.domain.wallet import Wallet, WalletView
from walletwise.utils.timestamps import ensure_utc, isoformat_utc
from walletwise.utils.money import format_money

logger = logging.getLogger(__name__)


class PlanState(str, Enum):
    OK = "ok"
    UNKNOWN = "unknown"  # «не удалось определить тариф»


@dataclass(frozen=True)
class AccountSnapshot:
    plan_state: PlanState
    tier: str | None
    effective_tier: SubscriptionTier | None
    limits: TierLimits | None
    features: Dict[str, bool]  # analytics / export / custom_categories
    wallet_limit: WalletLimit
    trial_expired: bool
    frozen_wallet_ids: FrozenSet[str]
    wallets: List[WalletView]
    display_currency: str
    total_balance: Decimal
    transaction_summary: TransactionSummary
    rates_source: str
    evaluated_at: datetime

    def to_payload(self) -> Dict[str, Any]:
        limits = None
        if self.limits is not None:
            limits = {
                "maxWallets": self.limits.max_wallets,
                "analytics": self.limits.analytics,
                "export": self.limits.export,
                "customCategories": self.limits.custom_categories,
            }
        return {
            "planState": self.plan_state.value,
            "tier": self.tier,
            "effectiveTier": self.effective_tier.value if self.effective_tier else None,
            "limits": limits,
            "features": {
                "analytics": self.features["analytics"],
                "export": self.features["export"],
                "customCategories": self.features["custom_categories"],
            },
            "walletLimit": {
                "current": self.wallet_limit.current,
                "max": self.wallet_limit.max,
                "canCreate": self.wallet_limit.can_create,
            },
            "trialExpired": self.trial_expired,
            "frozenWalletIds": sorted(self.frozen_wallet_ids),
            "wallets": [w.to_payload() for w in self.wallets],
            "displayCurrency": self.display_currency,
            "totalBalance": str(self.total_balance),
            "totalBalanceFormatted": format_money(self.total_balance, self.display_currency),
            "transactionSummary": self.transaction_summary.to_payload(),
            "ratesSource": self.rates_source,
            "evaluatedAt": isoformat_utc(self.evaluated_at),
        }


def _unknown_plan_snapshot(
    tier: str | None,
    wallets: Sequence[Wallet],
    transactions: Iterable[Transaction],
    display_currency: str,
    rates: RateTable,
    now: datetime,
) -> AccountSnapshot:
    # Ничего не замораживаем и ничего не открываем; итоги считаем как есть
    return AccountSnapshot(
        plan_state=PlanState.UNKNOWN,
        tier=tier,
        effective_tier=None,
        limits=None,
        features={feature: False for feature in FEATURES},
        wallet_limit=WalletLimit(current=len(wallets), max=None, can_create=False),
        trial_expired=False,
        frozen_wallet_ids=frozenset(),
        wallets=flag_frozen(wallets, ()),
        display_currency=display_currency,
        total_balance=aggregate_balances(wallets, (), display_currency, rates),
        transaction_summary=summarize_transactions(transactions, wallets, (), display_currency, rates),
        rates_source=rates.source,
        evaluated_at=now,
    )


def evaluate_account(
    profile: AccountProfile,
    wallets: Sequence[Wallet],
    rates,
    now: datetime,
    transactions: Iterable[Transaction] = (),
) -> AccountSnapshot:
    """
    Посчитать снимок аккаунта на момент now

    Args:
        profile: профиль (подписка + валюта отображения)
        wallets: все кошельки пользователя
        rates: RateTable или dict code -> курс
        now: текущее время, передаётся явно
        transactions: транзакции для сводки доходов/расходов
    """
    now = ensure_utc(now)
    table = as_rate_table(rates)
    transactions = list(transactions)
    subscription = profile.subscription
    currency = profile.currency

    try:
        effective_tier = resolve_effective_tier(subscription, now)
        limits = limits_for(effective_tier)
        features = {feature: feature_allowed(effective_tier, feature) for feature in FEATURES}
        wallet_limit = wallet_limit_info(effective_tier, len(wallets))
        frozen_ids = compute_frozen_wallets(subscription, wallets, now, free_wallet_limit())
    except ConfigError:
        logger.exception("Unable to determine plan for tier %r", subscription.tier)
        return _unknown_plan_snapshot(
            getattr(subscription.tier, "value", subscription.tier),
            wallets, transactions, currency, table, now,
        )

    if frozen_ids:
        logger.info("Trial expired: %d wallet(s) frozen", len(frozen_ids))

    return AccountSnapshot(
        plan_state=PlanState.OK,
        tier=subscription.tier.value,
        effective_tier=effective_tier,
        limits=limits,
        features=features,
        wallet_limit=wallet_limit,
        trial_expired=is_trial_expired(subscription, now),
        frozen_wallet_ids=frozen_ids,
        wallets=flag_frozen(wallets, frozen_ids),
        display_currency=currency,
        total_balance=aggregate_balances(wallets, frozen_ids, currency, table),
        transaction_summary=summarize_transactions(transactions, wallets, frozen_ids, currency, table),
        rates_source=table.source,
        evaluated_at=now,
    )


class EvaluateAccountUseCase:
    """
    Use case: Оценить аккаунт по сырым upstream-записям

    Процесс:
    1. Распарсить кошельки и транзакции (PayloadError пробрасывается)
    2. Распарсить профиль; неизвестный тариф -> снимок с plan_state=UNKNOWN
    3. Посчитать снимок через evaluate_account
    """

    def __init__(self, default_currency: str = "USD"):
        self.default_currency = default_currency

    def execute(
        self,
        profile_payload: Dict[str, Any],
        wallet_payloads: Iterable[Dict[str, Any]],
        rates,
        now: datetime,
        transaction_payloads: Iterable[Dict[str, Any]] = (),
    ) -> AccountSnapshot:
        wallets = [Wallet.from_payload(p) for p in wallet_payloads]
        transactions = [Transaction.from_payload(p) for p in transaction_payloads]
        table = as_rate_table(rates)

        try:
            profile = AccountProfile.from_payload(profile_payload, self.default_currency)
        except ConfigError:
            logger.exception("Unable to determine plan from profile")
            currency, _ = AccountProfile.settings_from_payload(profile_payload, self.default_currency)
            raw_tier = (profile_payload.get("subscription") or {}).get("tier")
            return _unknown_plan_snapshot(
                raw_tier, wallets, transactions, currency, table, ensure_utc(now),
            )

        return evaluate_account(profile, wallets, table, now, transactions)


def apply_subscription_event(profile: AccountProfile, event: Dict[str, Any]) -> AccountProfile:
    """
    Применить push-событие subscription:updated {tier, isActive}

    Raises:
        UnknownTierError: тариф из события не из перечисления
    """
    updated = profile.with_subscription_event(event)
    logger.info(
        "Subscription updated: %s -> %s (active=%s)",
        profile.subscription.tier.value, updated.subscription.tier.value,
        updated.subscription.is_active,
    )
    return updated
