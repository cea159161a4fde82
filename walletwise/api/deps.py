"""
FastAPI dependencies (settings, FX rates provider)
"""
from functools import lru_cache

from walletwise.config import get_settings
from walletwise.infrastructure.fx_rates import FxRatesClient


@lru_cache
def _fx_rates_client() -> FxRatesClient:
    # Один клиент на процесс, чтобы кеш курсов переживал запросы
    return FxRatesClient(get_settings())


def get_fx_rates_client() -> FxRatesClient:
    """
    Dependency для FastAPI — общий FxRatesClient

    Usage:
        @router.get("/fx-rates")
        def rates(client: FxRatesClient = Depends(get_fx_rates_client)):
            ...
    """
    return _fx_rates_client()
