"""
Transaction record and display-currency income/expense summary
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable

from walletwise.domain.currency import BASE_CURRENCY, as_rate_table, convert
from walletwise.domain.payload import PayloadError, require_fields
from walletwise.domain.wallet import Wallet
from walletwise.utils.timestamps import ensure_utc, isoformat_utc, parse_timestamp
from walletwise.utils.validation import parse_amount

TRANSACTION_TYPE_INCOME = "income"
TRANSACTION_TYPE_EXPENSE = "expense"


@dataclass(frozen=True)
class Transaction:
    id: str
    wallet_id: str
    type: str  # income | expense
    amount: Decimal
    category: str = ""
    description: str = ""
    date: datetime | None = None

    def __post_init__(self):
        if self.date is not None:
            object.__setattr__(self, "date", ensure_utc(self.date))

    @staticmethod
    def from_payload(payload: Dict[str, Any]) -> "Transaction":
        """
        Собрать Transaction из camelCase JSON

        Raises:
            PayloadError: нет обязательных полей, неверный тип или сумма
        """
        require_fields(payload, "Transaction", "id", "walletId", "type", "amount")

        tx_type = payload["type"]
        if tx_type not in (TRANSACTION_TYPE_INCOME, TRANSACTION_TYPE_EXPENSE):
            raise PayloadError(
                f"Transaction {payload['id']}: invalid type {tx_type!r}. Use income or expense"
            )
        try:
            amount = parse_amount(payload["amount"])
        except ValueError as exc:
            raise PayloadError(f"Transaction {payload['id']}: {exc}") from None

        return Transaction(
            id=str(payload["id"]),
            wallet_id=str(payload["walletId"]),
            type=tx_type,
            amount=amount,
            category=payload.get("category") or "",
            description=payload.get("description") or "",
            date=parse_timestamp(payload.get("date")),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "walletId": self.wallet_id,
            "type": self.type,
            "category": self.category,
            "amount": str(self.amount),
            "description": self.description,
            "date": isoformat_utc(self.date),
        }


@dataclass(frozen=True)
class TransactionSummary:
    total_income: Decimal
    total_expense: Decimal
    balance: Decimal
    transaction_count: int

    def to_payload(self) -> Dict[str, Any]:
        return {
            "totalIncome": str(self.total_income),
            "totalExpense": str(self.total_expense),
            "balance": str(self.balance),
            "transactionCount": self.transaction_count,
        }


def summarize_transactions(
    transactions: Iterable[Transaction],
    wallets: Iterable[Wallet],
    frozen_ids: Iterable[str],
    display_currency: str,
    rates,
) -> TransactionSummary:
    """
    Доходы / расходы / итог в валюте отображения

    Транзакции замороженных кошельков не учитываются. Валюта транзакции —
    валюта её кошелька; если кошелёк неизвестен, считаем USD.
    """
    table = as_rate_table(rates)
    currency_by_wallet = {w.id: w.currency for w in wallets}
    frozen = set(frozen_ids)

    total_income = Decimal("0")
    total_expense = Decimal("0")
    count = 0
    for tx in transactions:
        if tx.wallet_id in frozen:
            continue
        currency = currency_by_wallet.get(tx.wallet_id, BASE_CURRENCY)
        converted = convert(tx.amount, currency, display_currency, table)
        if tx.type == TRANSACTION_TYPE_INCOME:
            total_income += converted
        else:
            total_expense += converted
        count += 1

    return TransactionSummary(
        total_income=total_income,
        total_expense=total_expense,
        balance=total_income - total_expense,
        transaction_count=count,
    )
