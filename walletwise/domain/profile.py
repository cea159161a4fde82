"""
Account profile as returned by GET /user/profile
"""
from dataclasses import dataclass, replace
from typing import Any, Dict

from walletwise.domain.payload import PayloadError, require_fields
from walletwise.domain.subscription import Subscription
from walletwise.utils.validation import is_valid_currency_code


@dataclass(frozen=True)
class AccountProfile:
    """
    Подписка + пользовательские настройки отображения

    currency — валюта отображения итогов (settings.currency).
    """
    subscription: Subscription
    currency: str
    language: str | None = None

    @staticmethod
    def settings_from_payload(payload: Dict[str, Any], default_currency: str) -> tuple[str, str | None]:
        """
        Достать (currency, language) из settings; некорректная валюта — default
        """
        settings = payload.get("settings") or {}
        if not isinstance(settings, dict):
            raise PayloadError("Profile field 'settings' must be an object")
        currency = settings.get("currency")
        if not is_valid_currency_code(currency):
            currency = default_currency
        return currency, settings.get("language")

    @staticmethod
    def from_payload(payload: Dict[str, Any], default_currency: str = "USD") -> "AccountProfile":
        """
        Собрать профиль из JSON

        Raises:
            PayloadError: нет subscription
            UnknownTierError: тариф не из перечисления
        """
        require_fields(payload, "Profile", "subscription")
        currency, language = AccountProfile.settings_from_payload(payload, default_currency)
        return AccountProfile(
            subscription=Subscription.from_payload(payload["subscription"]),
            currency=currency,
            language=language,
        )

    def to_payload(self) -> Dict[str, Any]:
        settings: Dict[str, Any] = {"currency": self.currency}
        if self.language is not None:
            settings["language"] = self.language
        return {
            "subscription": self.subscription.to_payload(),
            "settings": settings,
        }

    def with_subscription_event(self, event: Dict[str, Any]) -> "AccountProfile":
        """Применить push-событие subscription:updated"""
        return replace(self, subscription=self.subscription.with_update(event))
