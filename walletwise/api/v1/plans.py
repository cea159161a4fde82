"""
Plans and FX rates API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from walletwise.api.deps import get_fx_rates_client
from walletwise.domain.tier import SubscriptionTier, limits_for
from walletwise.infrastructure.fx_rates import FxRatesClient, FxRatesError


router = APIRouter(prefix="/api/v1", tags=["plans"])


# === Response models ===

class PlanResponse(BaseModel):
    tier: str
    maxWallets: int | None
    analytics: bool
    export: bool
    customCategories: bool


class FxRatesResponse(BaseModel):
    baseCode: str
    rates: dict[str, str]  # Decimal as string
    updatedAt: str | None
    source: str


# === Endpoints ===

@router.get("/plans", response_model=list[PlanResponse])
def list_plans():
    """Таблица лимитов по всем тарифам"""
    plans = []
    for tier in SubscriptionTier:
        limits = limits_for(tier)
        plans.append(PlanResponse(
            tier=tier.value,
            maxWallets=limits.max_wallets,
            analytics=limits.analytics,
            export=limits.export,
            customCategories=limits.custom_categories,
        ))
    return plans


@router.get("/fx-rates", response_model=FxRatesResponse)
def get_fx_rates(fx_client: FxRatesClient = Depends(get_fx_rates_client)):
    """Текущие курсы (live или статический фолбэк)"""
    return FxRatesResponse(**fx_client.get_rates().to_payload())


@router.post("/fx-rates/refresh", response_model=FxRatesResponse)
def refresh_fx_rates(fx_client: FxRatesClient = Depends(get_fx_rates_client)):
    """Принудительно обновить курсы у upstream API"""
    try:
        table = fx_client.refresh_rates()
    except FxRatesError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
    return FxRatesResponse(**table.to_payload())
