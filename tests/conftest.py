"""
Pytest fixtures for testing
"""
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from walletwise.domain.subscription import Subscription
from walletwise.domain.wallet import Wallet


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def now():
    """Фиксированное «сейчас» для детерминированных тестов"""
    return utc(2024, 2, 1, 12, 0, 0)


@pytest.fixture
def expired_trial():
    """Pro trial 2024-01-01..2024-01-08 (истёк к 2024-02-01)"""
    return Subscription.from_payload({
        "tier": "pro_trial",
        "startDate": "2024-01-01T00:00:00Z",
        "endDate": "2024-01-08T00:00:00Z",
        "isActive": True,
    })


@pytest.fixture
def make_wallet():
    """Фабрика кошельков"""
    def _make(wallet_id, created_at, balance="0", currency="USD", name=None):
        return Wallet(
            id=wallet_id,
            name=name or f"Wallet {wallet_id}",
            balance=Decimal(balance),
            currency=currency,
            created_at=created_at,
        )
    return _make


@pytest.fixture
def trial_wallets(make_wallet):
    """5 кошельков, созданных 2024-01-02..06 (во время триала)"""
    return [
        make_wallet(f"wallet{i}", utc(2024, 1, i + 1), balance="100")
        for i in range(1, 6)
    ]
