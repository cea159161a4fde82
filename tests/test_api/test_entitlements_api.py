"""
Tests for Entitlements and Plans API endpoints
"""
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from walletwise.api.deps import get_fx_rates_client
from walletwise.domain.currency import static_rate_table
from walletwise.infrastructure.fx_rates import FxRatesClient, FxRatesError
from walletwise.main import app

TRIAL_PROFILE = {
    "subscription": {
        "tier": "pro_trial",
        "startDate": "2024-01-01T00:00:00Z",
        "endDate": "2024-01-08T00:00:00Z",
        "isActive": True,
    },
    "settings": {"currency": "USD", "language": "en"},
}

WALLETS = [
    {"id": f"wallet{i}", "name": f"W{i}", "balance": "25.50", "currency": "USD",
     "createdAt": f"2024-01-0{i + 1}T00:00:00Z"}
    for i in range(1, 6)
]


@pytest.fixture
def fx_client():
    """Mock FxRatesClient — статические курсы без сети"""
    client = Mock(spec=FxRatesClient)
    client.get_rates.return_value = static_rate_table()
    return client


@pytest.fixture
def client(fx_client):
    """Test client для FastAPI"""
    app.dependency_overrides[get_fx_rates_client] = lambda: fx_client
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.text == "ok"


def test_list_plans(client):
    response = client.get("/api/v1/plans")

    assert response.status_code == 200
    plans = {p["tier"]: p for p in response.json()}
    assert set(plans) == {"free", "pro_trial", "pro", "pro_plus"}
    assert plans["free"]["maxWallets"] == 3
    assert plans["pro"]["maxWallets"] is None
    assert plans["pro_plus"]["analytics"] is True
    assert plans["pro_plus"]["export"] is True
    assert plans["free"]["customCategories"] is False


def test_evaluate_expired_trial(client, fx_client):
    """Истёкший триал: 4-й и 5-й кошельки заморожены, итог только по первым трём"""
    response = client.post("/api/v1/entitlements/evaluate", json={
        "profile": TRIAL_PROFILE,
        "wallets": WALLETS,
        "now": "2024-02-01T00:00:00Z",
    })

    assert response.status_code == 200
    data = response.json()
    assert data["planState"] == "ok"
    assert data["effectiveTier"] == "free"
    assert data["trialExpired"] is True
    assert data["frozenWalletIds"] == ["wallet4", "wallet5"]
    assert data["totalBalance"] == "76.50"
    assert data["totalBalanceFormatted"] == "$ 76.50"
    assert data["walletLimit"]["canCreate"] is False
    assert data["ratesSource"] == "static"
    fx_client.get_rates.assert_called_once()


def test_evaluate_with_request_rates(client, fx_client):
    """Курсы из запроса имеют приоритет над провайдером"""
    profile = {**TRIAL_PROFILE, "settings": {"currency": "IDR"}}
    response = client.post("/api/v1/entitlements/evaluate", json={
        "profile": profile,
        "wallets": WALLETS[:1],
        "rates": {"USD": 1, "IDR": 10000},
        "now": "2024-01-03T00:00:00Z",
    })

    assert response.status_code == 200
    data = response.json()
    assert data["effectiveTier"] == "pro_trial"
    assert data["totalBalance"] == "255000.00"
    assert data["ratesSource"] == "custom"
    fx_client.get_rates.assert_not_called()


def test_evaluate_unknown_tier_returns_unknown_plan(client):
    response = client.post("/api/v1/entitlements/evaluate", json={
        "profile": {"subscription": {"tier": "gold"}},
        "wallets": WALLETS,
        "now": "2024-02-01T00:00:00Z",
    })

    assert response.status_code == 200
    data = response.json()
    assert data["planState"] == "unknown"
    assert data["frozenWalletIds"] == []


def test_evaluate_malformed_wallet_is_422(client):
    response = client.post("/api/v1/entitlements/evaluate", json={
        "profile": TRIAL_PROFILE,
        "wallets": [{"id": "w1"}],
    })

    assert response.status_code == 422
    assert "currency" in response.json()["detail"]


def test_subscription_event(client):
    response = client.post("/api/v1/entitlements/subscription-event", json={
        "profile": TRIAL_PROFILE,
        "event": {"tier": "pro_plus", "isActive": True},
    })

    assert response.status_code == 200
    data = response.json()
    assert data["subscription"]["tier"] == "pro_plus"
    assert data["subscription"]["startDate"] == "2024-01-01T00:00:00Z"
    assert data["subscription"]["endDate"] == "2024-01-08T00:00:00Z"


def test_subscription_event_unknown_tier_is_422(client):
    response = client.post("/api/v1/entitlements/subscription-event", json={
        "profile": TRIAL_PROFILE,
        "event": {"tier": "ultra"},
    })
    assert response.status_code == 422


def test_fx_rates(client):
    response = client.get("/api/v1/fx-rates")

    assert response.status_code == 200
    data = response.json()
    assert data["baseCode"] == "USD"
    assert data["rates"]["IDR"] == "15000"
    assert data["source"] == "static"


def test_fx_rates_refresh_failure_is_502(client, fx_client):
    fx_client.refresh_rates.side_effect = FxRatesError("FX rates refresh failed: down")
    response = client.post("/api/v1/fx-rates/refresh")
    assert response.status_code == 502
