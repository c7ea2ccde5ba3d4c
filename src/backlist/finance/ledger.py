# src/backlist/finance/ledger.py

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass

from ..core.ports import LedgerRepo

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Transaction:
    """
    One signed ledger entry.

    Exactly one of funds_added / funds_subtracted is set; both hold non-negative amounts.
    """

    id: int
    date: float
    funds_added: float | None = None
    funds_subtracted: float | None = None

    def __post_init__(self) -> None:
        if (self.funds_added is None) == (self.funds_subtracted is None):
            raise ValueError("transaction must set exactly one of funds_added / funds_subtracted")

    @property
    def amount(self) -> float:
        if self.funds_added is not None:
            return self.funds_added
        return -(self.funds_subtracted or 0.0)


def check_amount(amount: float) -> float:
    """Return amount as a float. inf and nan are rejected."""
    if not math.isfinite(amount):
        raise ValueError(f"amount must be a finite number, got {amount!r}")
    return float(amount)


def split_amount(amount: float) -> tuple[float | None, float | None]:
    """Map a signed amount onto (funds_added, funds_subtracted)."""
    check_amount(amount)
    if amount >= 0:
        return float(amount), None
    return None, float(-amount)


def balance(transactions: Iterable[Transaction]) -> float:
    added = 0.0
    subtracted = 0.0
    for t in transactions:
        if t.funds_added is not None:
            added += t.funds_added
        else:
            subtracted += t.funds_subtracted or 0.0
    return round(added - subtracted, 2)


class LedgerService:
    """Append-only funds ledger on top of a LedgerRepo."""

    def __init__(self, repo: LedgerRepo) -> None:
        self._repo = repo

    def append(self, amount: float, *, now_ts: float | None = None) -> Transaction:
        amount = check_amount(amount)
        tx = self._repo.add_transaction(amount, now_ts=now_ts)
        logger.debug("Ledger append id=%s amount=%.2f", tx.id, amount)
        return tx

    def transactions(self) -> list[Transaction]:
        return self._repo.list_transactions()

    def balance(self) -> float:
        return balance(self._repo.list_transactions())

    def spend(self, amount: float, *, now_ts: float | None = None) -> Transaction | None:
        """
        Record a purchase from the shop.

        Zero is a no-op (returns None); negative and non-finite amounts are rejected.
        """
        amount = check_amount(amount)
        if amount < 0:
            raise ValueError("spend amount must not be negative")
        if amount == 0:
            return None
        return self.append(-amount, now_ts=now_ts)
