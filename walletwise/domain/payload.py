"""
Helpers for upstream JSON records (already deserialized dicts).
"""
from typing import Any, Dict


class PayloadError(ValueError):
    """Upstream-запись не содержит обязательных полей"""
    pass


def require_fields(payload: Any, record: str, *fields: str) -> Dict[str, Any]:
    """
    Проверить, что запись — dict и в ней есть все обязательные поля

    Raises:
        PayloadError: запись не dict или поля отсутствуют
    """
    if not isinstance(payload, dict):
        raise PayloadError(f"{record} record must be an object, got {type(payload).__name__}")
    missing = [f for f in fields if payload.get(f) is None]
    if missing:
        raise PayloadError(f"{record} record is missing: {', '.join(missing)}")
    return payload
