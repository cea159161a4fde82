"""
Wallet freezing after a lapsed Pro trial.

When a trial expires, wallets beyond the permanent free allowance that were
created during the trial become frozen: still stored and listed, but excluded
from totals and edit actions. Upgrading to pro / pro_plus unfreezes them, since
the rule only fires for an expired pro_trial.

Nothing is persisted; the set is recomputed from current data on every call.
"""
from datetime import datetime
from typing import FrozenSet, Iterable, List, Sequence

from walletwise.domain.subscription import Subscription, is_trial_expired
from walletwise.domain.tier import free_wallet_limit
from walletwise.domain.wallet import Wallet, WalletView


def _creation_order(wallets: Sequence[Wallet]) -> List[Wallet]:
    # sorted() стабилен: при равных датах сохраняется исходный порядок.
    # Кошельки без даты уходят в конец.
    return sorted(
        wallets,
        key=lambda w: (w.created_at is None, w.created_at or datetime.min),
    )


def compute_frozen_wallets(
    subscription: Subscription,
    wallets: Sequence[Wallet],
    now: datetime,
    free_max_wallets: int | None = None,
) -> FrozenSet[str]:
    """
    ID замороженных кошельков

    1. Только для истёкшего pro_trial, иначе пусто
    2. Сортировка по created_at (старые защищены)
    3. Хвост после первых free_max_wallets кошельков
    4. Из хвоста — только созданные не раньше начала триала

    Args:
        subscription: подписка пользователя
        wallets: все кошельки пользователя
        now: текущее время (aware UTC)
        free_max_wallets: лимит Free; по умолчанию берётся из TIER_LIMITS

    Returns:
        frozenset с wallet.id
    """
    if not is_trial_expired(subscription, now):
        return frozenset()

    trial_start = subscription.start_date
    if trial_start is None:
        return frozenset()

    if free_max_wallets is None:
        free_max_wallets = free_wallet_limit()

    extra = _creation_order(wallets)[max(free_max_wallets, 0):]

    return frozenset(
        w.id for w in extra
        if w.created_at is not None and w.created_at >= trial_start
    )


def flag_frozen(wallets: Iterable[Wallet], frozen_ids: Iterable[str]) -> List[WalletView]:
    """Пометить кошельки флагом is_frozen_extra (порядок списка не меняется)"""
    frozen = set(frozen_ids)
    return [WalletView(wallet=w, is_frozen_extra=w.id in frozen) for w in wallets]
