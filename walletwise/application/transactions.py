"""
Transactions view: date-range buckets for the selected period and the posted
transactions grouped into them.
"""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, List

from walletwise.domain.buckets import (
    TIME_RANGE_WEEKLY, TIME_RANGES, DateRangeBucket,
    date_range_for_fetch, group_transactions, transaction_buckets,
)
from walletwise.domain.transaction import Transaction
from walletwise.utils.timestamps import isoformat_utc


@dataclass(frozen=True)
class BucketGroup:
    bucket: DateRangeBucket
    transactions: List[Transaction]

    def to_payload(self) -> Dict[str, Any]:
        return {
            "id": self.bucket.id,
            "label": self.bucket.label,
            "start": isoformat_utc(self.bucket.start),
            "end": isoformat_utc(self.bucket.end),
            "transactionCount": len(self.transactions),
            "transactions": [tx.to_payload() for tx in self.transactions],
        }


@dataclass(frozen=True)
class TransactionsView:
    time_range: str
    date_from: date
    date_to: date
    groups: List[BucketGroup]

    def to_payload(self) -> Dict[str, Any]:
        return {
            "range": self.time_range,
            "dateFrom": self.date_from.isoformat(),
            "dateTo": self.date_to.isoformat(),
            "buckets": [g.to_payload() for g in self.groups],
        }


class GroupTransactionsUseCase:
    """
    Use case: разложить транзакции по бакетам выбранного периода

    Неизвестный период трактуется как weekly. Транзакции без даты или вне
    периода в группы не попадают.
    """

    def execute(
        self,
        transaction_payloads: Iterable[Dict[str, Any]],
        time_range: str,
        now: datetime,
        first_day_of_week: int = 1,
    ) -> TransactionsView:
        """
        Raises:
            PayloadError: некорректная запись транзакции
            ValueError: first_day_of_week вне 0..6
        """
        if time_range not in TIME_RANGES:
            time_range = TIME_RANGE_WEEKLY

        transactions = [Transaction.from_payload(p) for p in transaction_payloads]
        buckets = transaction_buckets(time_range, now, first_day_of_week)
        date_from, date_to = date_range_for_fetch(time_range, now, first_day_of_week)
        grouped = group_transactions(transactions, buckets)

        return TransactionsView(
            time_range=time_range,
            date_from=date_from,
            date_to=date_to,
            groups=[BucketGroup(bucket=b, transactions=grouped[b.id]) for b in buckets],
        )
