"""
Entitlements API endpoints
"""
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from walletwise.api.deps import get_fx_rates_client
from walletwise.application.entitlements import EvaluateAccountUseCase, apply_subscription_event
from walletwise.config import get_settings
from walletwise.domain.payload import PayloadError
from walletwise.domain.profile import AccountProfile
from walletwise.domain.tier import ConfigError
from walletwise.infrastructure.fx_rates import FxRatesClient


router = APIRouter(prefix="/api/v1/entitlements", tags=["entitlements"])


# === Request models ===

class EvaluateRequest(BaseModel):
    profile: dict[str, Any]
    wallets: list[dict[str, Any]] = []
    transactions: list[dict[str, Any]] = []
    rates: dict[str, Any] | None = None  # code -> курс; None = брать у провайдера
    now: datetime | None = None  # None = время запроса


class SubscriptionEventRequest(BaseModel):
    profile: dict[str, Any]
    event: dict[str, Any]  # {tier, isActive}


# === Endpoints ===

@router.post("/evaluate")
def evaluate(
    req: EvaluateRequest,
    fx_client: FxRatesClient = Depends(get_fx_rates_client),
):
    """Оценить аккаунт: эффективный тариф, лимиты, замороженные кошельки, итоги"""
    settings = get_settings()
    now = req.now or datetime.now(timezone.utc)
    rates = req.rates if req.rates is not None else fx_client.get_rates()

    use_case = EvaluateAccountUseCase(default_currency=settings.DEFAULT_CURRENCY)
    try:
        snapshot = use_case.execute(
            profile_payload=req.profile,
            wallet_payloads=req.wallets,
            rates=rates,
            now=now,
            transaction_payloads=req.transactions,
        )
    except PayloadError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    return snapshot.to_payload()


@router.post("/subscription-event")
def subscription_event(req: SubscriptionEventRequest):
    """Применить push-событие subscription:updated к профилю"""
    settings = get_settings()
    try:
        profile = AccountProfile.from_payload(req.profile, settings.DEFAULT_CURRENCY)
        updated = apply_subscription_event(profile, req.event)
    except (PayloadError, ConfigError) as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    return updated.to_payload()
