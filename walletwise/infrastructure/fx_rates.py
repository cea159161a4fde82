"""
FX rates provider.

Fetches live rates from the upstream API (GET /settings/fx-rates) and keeps
them in memory for FX_RATES_TTL_SECONDS. When the upstream is unavailable or
answers with something unusable, the static fallback table is returned.
"""
import logging
import time
from typing import Any, Callable, Dict

import requests

from walletwise.config import Settings, get_settings
from walletwise.domain.currency import RateTable, static_rate_table
from walletwise.domain.payload import PayloadError

logger = logging.getLogger(__name__)


class FxRatesError(RuntimeError):
    """Не удалось обновить курсы валют"""
    pass


def _unwrap(body: Any) -> Dict[str, Any]:
    """Ответ API: {success, data: {baseCode, rates, updatedAt}}"""
    if not isinstance(body, dict):
        raise PayloadError("FX rates response must be an object")
    if body.get("success") is False:
        raise PayloadError(f"FX rates request failed: {body.get('message') or 'unknown error'}")
    data = body.get("data", body)
    if not isinstance(data, dict):
        raise PayloadError("FX rates response field 'data' must be an object")
    return data


class FxRatesClient:
    """
    Клиент курсов валют с кешем в памяти

    Usage:
        client = FxRatesClient()
        table = client.get_rates()   # live или статический фолбэк
        client.refresh_rates()       # принудительное обновление (ошибки наружу)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        session: requests.Session | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.settings = settings or get_settings()
        self.session = session or requests.Session()
        self.clock = clock
        self._cached: RateTable | None = None
        self._cached_at: float | None = None

    def _is_fresh(self) -> bool:
        if self._cached is None or self._cached_at is None:
            return False
        return self.clock() - self._cached_at < self.settings.FX_RATES_TTL_SECONDS

    def _store(self, table: RateTable) -> RateTable:
        self._cached = table
        self._cached_at = self.clock()
        return table

    def _request(self, method: str, path: str) -> RateTable:
        resp = self.session.request(
            method,
            self.settings.get_upstream_url(path),
            timeout=self.settings.FX_RATES_TIMEOUT_SECONDS,
        )
        resp.raise_for_status()
        return RateTable.from_payload(_unwrap(resp.json()), source="live")

    def get_rates(self) -> RateTable:
        """
        Текущая таблица курсов

        Свежий кеш -> кеш; иначе запрос к API; при любой ошибке —
        последний live-кеш (если был) или статическая таблица.
        """
        if self._is_fresh():
            return self._cached

        try:
            return self._store(self._request("GET", "/settings/fx-rates"))
        except (requests.RequestException, ValueError) as exc:
            # PayloadError и ошибки JSON — подклассы ValueError
            if self._cached is not None:
                logger.warning("FX rates fetch failed, serving stale rates: %s", exc)
                return self._cached
            logger.warning("FX rates fetch failed, using static rates: %s", exc)
            return static_rate_table()

    def refresh_rates(self) -> RateTable:
        """
        Принудительно обновить курсы (POST /settings/fx-rates/refresh)

        Raises:
            FxRatesError: если API недоступен или ответ некорректный
        """
        try:
            table = self._request("POST", "/settings/fx-rates/refresh")
        except (requests.RequestException, ValueError) as exc:
            logger.error("FX rates refresh failed: %s", exc)
            raise FxRatesError(f"FX rates refresh failed: {exc}") from exc
        logger.info("FX rates refreshed: %d currencies", len(table.rates))
        return self._store(table)
