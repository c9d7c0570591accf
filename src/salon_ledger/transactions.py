# Salon Ledger - Bookkeeping dashboard for beauty salons
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Transaction records for Salon Ledger.

Two record kinds exist:

- RevenueTransaction ("prestation"): a service sold to a client.
- ExpenseTransaction: a purchase, a training, a salon fitting, ...

Both carry their payment split (``cash_amount`` / ``card_amount``). The
total amount of a record is *always* derived as ``cash_amount +
card_amount``; it is never stored as a source of truth.

Legacy schemas
--------------
Older rows stored a single ``amount`` column (and, for expenses, no
payment method at all). These rows are normalized once, when they are read
from the store, by :func:`normalize_split`. Nothing downstream (engine,
series, summaries) needs to know which schema a record came from.

Validation
----------
:func:`validate_split` is used by the CRUD layer before writing a record.
The aggregation core never validates: it works on whatever the store
returns.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional, Union


class PaymentMethod(str, Enum):
    """How a transaction was settled. Values are the stored strings."""

    CASH = "cash"
    CARD = "card"
    MIXED = "mixed"


@dataclass(frozen=True)
class RevenueTransaction:
    """A service transaction ("prestation")."""

    id: Optional[int]
    owner_id: str
    category: str
    date: date
    payment_method: PaymentMethod
    cash_amount: float
    card_amount: float
    notes: Optional[str] = None

    @property
    def total(self) -> float:
        return self.cash_amount + self.card_amount


@dataclass(frozen=True)
class ExpenseTransaction:
    """An expense. ``mixed`` is tolerated and read as an already split record."""

    id: Optional[int]
    owner_id: str
    category: str
    date: date
    payment_method: PaymentMethod
    cash_amount: float
    card_amount: float
    description: Optional[str] = None

    @property
    def total(self) -> float:
        return self.cash_amount + self.card_amount


Transaction = Union[RevenueTransaction, ExpenseTransaction]


def parse_payment_method(
    value: Optional[str], default: PaymentMethod = PaymentMethod.CASH
) -> PaymentMethod:
    """
    Parse a stored payment method string.

    Empty values fall back to `default` (old expense rows have no payment
    method and were all settled in cash).

    Raises
    ------
    ValueError
        If the value is not empty and not one of cash / card / mixed.
    """
    if isinstance(value, PaymentMethod):
        return value
    if value is None or str(value).strip() == "":
        return default
    try:
        return PaymentMethod(str(value).strip().lower())
    except ValueError as exc:
        raise ValueError(f"Unknown payment method: {value!r}") from exc


def to_cents(amount: float) -> int:
    """Convert a euro amount to integer cents (rounded half to even)."""
    return int(round(float(amount) * 100))


def from_cents(cents: Optional[int]) -> Optional[float]:
    if cents is None:
        return None
    return cents / 100.0


def normalize_split(
    payment_method: PaymentMethod,
    cash_amount: Optional[float],
    card_amount: Optional[float],
    legacy_amount: Optional[float] = None,
) -> tuple[float, float]:
    """
    Return the canonical (cash, card) split of a stored row.

    Rules
    -----
    - Missing split amounts count as 0.
    - When both split amounts are 0 and a legacy ``amount`` exists, the
      legacy amount is assigned to the card side for card payments and to
      the cash side otherwise.
    - The legacy amount is never used when the split carries a value.
    """
    cash = float(cash_amount or 0.0)
    card = float(card_amount or 0.0)

    if cash == 0.0 and card == 0.0 and legacy_amount:
        if payment_method is PaymentMethod.CARD:
            card = float(legacy_amount)
        else:
            cash = float(legacy_amount)

    return cash, card


def validate_split(
    payment_method: PaymentMethod,
    cash_amount: float,
    card_amount: float,
    *,
    allow_mixed: bool = True,
) -> None:
    """
    Check that a payment split is consistent before writing it.

    Amounts are compared as the integer cents the store keeps, so a
    sub-cent amount counts as 0.

    Raises
    ------
    ValueError
        - if an amount is negative or the total is not strictly positive,
        - if a cash payment has a card amount (or the reverse),
        - if a mixed payment does not have both amounts,
        - if ``mixed`` is used while `allow_mixed` is False (expenses).
    """
    cash_cents = to_cents(cash_amount)
    card_cents = to_cents(card_amount)

    if cash_cents < 0 or card_cents < 0:
        raise ValueError("Payment amounts cannot be negative.")
    if cash_cents + card_cents <= 0:
        raise ValueError("Transaction total must be strictly positive.")

    if payment_method is PaymentMethod.CASH and card_cents != 0:
        raise ValueError("A cash payment cannot carry a card amount.")
    if payment_method is PaymentMethod.CARD and cash_cents != 0:
        raise ValueError("A card payment cannot carry a cash amount.")
    if payment_method is PaymentMethod.MIXED:
        if not allow_mixed:
            raise ValueError("Mixed payments are not supported for this record.")
        if cash_cents == 0 or card_cents == 0:
            raise ValueError("A mixed payment needs both a cash and a card amount.")
