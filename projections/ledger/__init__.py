"""
Tailorbook Projections — Ledger
=================================
Running balance = Σ Income − Σ Expense, computed at read time.
Rows of any other type are ignored by the balance.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import Any, Dict, Iterable, List, Optional

from core.primitives.coercion import coerce_number, money
from core.time.temporal import day_window, to_local
from engines.catalog.schemas import (
    TRANSACTION_EXPENSE,
    TRANSACTION_INCOME,
    Transaction,
    as_entities,
)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def ledger_balance(transactions: Iterable[Any]) -> float:
    balance = 0
    for row in as_entities(transactions, Transaction):
        if row.type == TRANSACTION_INCOME:
            balance += coerce_number(row.amount)
        elif row.type == TRANSACTION_EXPENSE:
            balance -= coerce_number(row.amount)
    return money(balance)


def cashflow_since(
    transactions: Iterable[Any], start: datetime, tz: tzinfo,
) -> Dict[str, float]:
    """Income and expense totals for rows dated at or after ``start``."""
    income = expense = 0
    for row in as_entities(transactions, Transaction):
        if row.date is None or to_local(row.date, tz) < start:
            continue
        if row.type == TRANSACTION_INCOME:
            income += coerce_number(row.amount)
        elif row.type == TRANSACTION_EXPENSE:
            expense += coerce_number(row.amount)
    return {"income": money(income), "expense": money(expense)}


@dataclass(frozen=True)
class TransactionFilter:
    search: str = ""
    type: str = ""
    start_date: Any = None
    end_date: Any = None


def filter_transactions(
    transactions: Iterable[Any],
    criteria: TransactionFilter,
    tz: Optional[tzinfo] = None,
) -> List[Transaction]:
    """
    Description search, type match and inclusive day range; newest first.

    An undated row is excluded once either side of the range is set.
    """
    tz = tz or timezone.utc
    start, end = day_window(criteria.start_date, criteria.end_date, tz)
    term = (criteria.search or "").strip().lower()

    matched = []
    for row in as_entities(transactions, Transaction):
        if term and term not in row.description.lower():
            continue
        if criteria.type and row.type != criteria.type:
            continue
        if start is not None or end is not None:
            if row.date is None:
                continue
            when = to_local(row.date, tz)
            if start is not None and when < start:
                continue
            if end is not None and when > end:
                continue
        matched.append(row)

    def key(row: Transaction) -> datetime:
        return to_local(row.date, tz) if row.date is not None else _EPOCH

    return sorted(matched, key=key, reverse=True)
