"""
Tests for wallet freezing after trial expiry
"""
from datetime import datetime, timedelta, timezone

from walletwise.domain.freezing import compute_frozen_wallets, flag_frozen
from walletwise.domain.subscription import ExpiresAt, NeverExpires, Subscription, UnparseableExpiry
from walletwise.domain.tier import SubscriptionTier


def _utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


def test_scenario_two_latest_wallets_frozen(expired_trial, trial_wallets, now):
    """Триал 01.01–08.01, сейчас 01.02, 5 кошельков за триал, лимит 3 -> 4-й и 5-й"""
    frozen = compute_frozen_wallets(expired_trial, trial_wallets, now, free_max_wallets=3)
    assert frozen == {"wallet4", "wallet5"}


def test_default_free_limit_comes_from_table(expired_trial, trial_wallets, now):
    assert compute_frozen_wallets(expired_trial, trial_wallets, now) == {"wallet4", "wallet5"}


def test_order_of_input_does_not_matter(expired_trial, trial_wallets, now):
    """Заморозка по дате создания, а не по порядку в списке"""
    shuffled = [trial_wallets[4], trial_wallets[0], trial_wallets[3], trial_wallets[2], trial_wallets[1]]
    assert compute_frozen_wallets(expired_trial, shuffled, now, 3) == {"wallet4", "wallet5"}


def test_nothing_frozen_while_trial_active(trial_wallets, now):
    sub = Subscription(
        tier=SubscriptionTier.PRO_TRIAL,
        start_date=_utc(2024, 1, 1),
        expiry=ExpiresAt(at=now + timedelta(days=3)),
        is_active=True,
    )
    many = trial_wallets * 4
    assert compute_frozen_wallets(sub, many, now, 3) == frozenset()


def test_nothing_frozen_for_trial_without_end_date(trial_wallets, now):
    sub = Subscription(
        tier=SubscriptionTier.PRO_TRIAL, start_date=_utc(2024, 1, 1),
        expiry=NeverExpires(), is_active=True,
    )
    assert compute_frozen_wallets(sub, trial_wallets, now, 3) == frozenset()


def test_nothing_frozen_for_malformed_end_date(trial_wallets, now):
    sub = Subscription(
        tier=SubscriptionTier.PRO_TRIAL, start_date=_utc(2024, 1, 1),
        expiry=UnparseableExpiry(raw="???"), is_active=True,
    )
    assert compute_frozen_wallets(sub, trial_wallets, now, 3) == frozenset()


def test_upgrade_to_pro_unfreezes(expired_trial, trial_wallets, now):
    """После апгрейда на pro заморозка снимается"""
    upgraded = expired_trial.with_update({"tier": "pro"})
    assert compute_frozen_wallets(upgraded, trial_wallets, now, 3) == frozenset()


def test_free_tier_with_past_end_date_freezes_nothing(expired_trial, trial_wallets, now):
    downgraded = expired_trial.with_update({"tier": "free"})
    assert compute_frozen_wallets(downgraded, trial_wallets, now, 3) == frozenset()


def test_empty_wallet_list(expired_trial, now):
    assert compute_frozen_wallets(expired_trial, [], now, 3) == frozenset()


def test_wallets_within_free_limit_not_frozen(expired_trial, trial_wallets, now):
    assert compute_frozen_wallets(expired_trial, trial_wallets[:3], now, 3) == frozenset()


def test_pre_trial_wallet_never_frozen(expired_trial, make_wallet, now):
    """Кошелёк, созданный до начала триала, не замораживается даже за лимитом"""
    wallets = [
        make_wallet("a", _utc(2023, 6, 1)),
        make_wallet("b", _utc(2023, 7, 1)),
        make_wallet("c", _utc(2023, 8, 1)),
        make_wallet("old-extra", _utc(2023, 12, 31)),  # 4-й по порядку, но до триала
        make_wallet("trial-extra", _utc(2024, 1, 3)),
    ]
    frozen = compute_frozen_wallets(expired_trial, wallets, now, 3)
    assert frozen == {"trial-extra"}


def test_wallet_created_exactly_at_trial_start_is_frozen(expired_trial, make_wallet, now):
    wallets = [make_wallet(str(i), _utc(2023, 1, i)) for i in range(1, 4)]
    wallets.append(make_wallet("edge", _utc(2024, 1, 1)))
    assert compute_frozen_wallets(expired_trial, wallets, now, 3) == {"edge"}


def test_equal_created_at_keeps_input_order(expired_trial, make_wallet, now):
    """Стабильная сортировка: при равных датах защищены первые по списку"""
    same = _utc(2024, 1, 2)
    wallets = [make_wallet(name, same) for name in ("w1", "w2", "w3", "w4")]
    assert compute_frozen_wallets(expired_trial, wallets, now, 3) == {"w4"}


def test_wallet_without_created_at_is_never_frozen(expired_trial, trial_wallets, make_wallet, now):
    undated = make_wallet("undated", None)
    frozen = compute_frozen_wallets(expired_trial, [undated] + trial_wallets, now, 3)
    assert "undated" not in frozen
    assert frozen == {"wallet4", "wallet5"}


def test_unknown_trial_start_freezes_nothing(trial_wallets, now):
    sub = Subscription(
        tier=SubscriptionTier.PRO_TRIAL, start_date=None,
        expiry=ExpiresAt(at=_utc(2024, 1, 8)), is_active=True,
    )
    assert compute_frozen_wallets(sub, trial_wallets, now, 3) == frozenset()


def test_deleted_wallet_shifts_freeze(expired_trial, trial_wallets, now):
    """Удаление кошелька — просто пересчёт по текущему списку"""
    remaining = [w for w in trial_wallets if w.id != "wallet2"]
    assert compute_frozen_wallets(expired_trial, remaining, now, 3) == {"wallet5"}


def test_flag_frozen_keeps_order_and_marks(trial_wallets):
    views = flag_frozen(trial_wallets, {"wallet5"})
    assert [v.wallet.id for v in views] == [w.id for w in trial_wallets]
    assert [v.is_frozen_extra for v in views] == [False, False, False, False, True]
    assert views[4].to_payload()["isFrozenExtra"] is True


def test_naive_dates_are_treated_as_utc(make_wallet):
    """Подписка и кошельки с naive-датами: считаются UTC, без TypeError"""
    sub = Subscription(
        tier=SubscriptionTier.PRO_TRIAL, start_date=datetime(2024, 1, 1),
        expiry=ExpiresAt(at=datetime(2024, 1, 8)), is_active=True,
    )
    wallets = [make_wallet(f"wallet{i}", datetime(2024, 1, i + 1)) for i in range(1, 6)]

    assert sub.start_date.tzinfo is timezone.utc
    assert wallets[0].created_at == _utc(2024, 1, 2)
    assert compute_frozen_wallets(sub, wallets, datetime(2024, 2, 1), 3) == {"wallet4", "wallet5"}


def test_naive_and_aware_wallets_mix(expired_trial, trial_wallets, make_wallet, now):
    late = make_wallet("late", datetime(2024, 1, 20))
    assert compute_frozen_wallets(expired_trial, trial_wallets + [late], now, 3) == {
        "wallet4", "wallet5", "late",
    }
