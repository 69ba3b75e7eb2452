from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from functools import reduce
from typing import Any, Iterable, Literal, Mapping

from interest_calc.utils.dates import days_between, to_calendar_date
from interest_calc.utils.money import ZERO, parse_money, to_decimal

logger = logging.getLogger(__name__)

EntryType = Literal["payment", "expense"]
RowType = Literal["payment", "expense", "asof"]

SUPPORTED_BASES = (360, 365)
DEFAULT_BASIS = 365
ASOF_NOTE = "As-of accrual"

# Same-day expenses post before payments so the payment is allocated
# against the larger principal.
_TYPE_ORDER = {"expense": 0, "payment": 1}


@dataclass(frozen=True)
class LedgerEntry:
    """Raw user row. Any of the fields may still be a draft value."""

    date: Any
    type: str = "payment"
    amount: Any = None
    note: str | None = None
    source: str = "direct"
    id: str | None = None

    @classmethod
    def from_mapping(cls, m: Mapping[str, Any]) -> "LedgerEntry":
        return cls(
            date=m.get("date"),
            type=m.get("type") or "payment",
            amount=m.get("amount"),
            note=m.get("note"),
            source=m.get("source") or "direct",
            id=m.get("id"),
        )


@dataclass(frozen=True)
class AccrualEvent:
    date: date
    type: EntryType
    amount: Decimal
    note: str = ""
    source: str = "direct"

    def sort_key(self) -> tuple[date, int]:
        return (self.date, _TYPE_ORDER[self.type])


@dataclass(frozen=True)
class ScheduleRow:
    date: date
    type: RowType
    source: str
    note: str
    days: int
    accrued: Decimal
    payment: Decimal
    expense: Decimal
    applied_to_interest: Decimal
    applied_to_principal: Decimal
    principal_before: Decimal
    principal_after: Decimal
    carry_interest: Decimal


@dataclass(frozen=True)
class LedgerState:
    principal: Decimal
    carry_interest: Decimal
    last_date: date


@dataclass(frozen=True)
class LedgerTotals:
    principal: Decimal = ZERO
    carry_interest: Decimal = ZERO

    @property
    def balance(self) -> Decimal:
        return self.principal + self.carry_interest


@dataclass(frozen=True)
class LedgerSchedule:
    rows: tuple[ScheduleRow, ...]
    totals: LedgerTotals
    ready: bool

    @classmethod
    def empty(cls) -> "LedgerSchedule":
        return cls(rows=(), totals=LedgerTotals(), ready=False)


# ----------------------------
# Event normalizer
# ----------------------------


def _as_entry(e: LedgerEntry | Mapping[str, Any]) -> LedgerEntry:
    if isinstance(e, LedgerEntry):
        return e
    return LedgerEntry.from_mapping(e)


def to_event(e: LedgerEntry | Mapping[str, Any]) -> AccrualEvent | None:
    entry = _as_entry(e)

    d = to_calendar_date(entry.date)
    if d is None:
        return None

    kind = (entry.type or "").strip().lower()
    if kind not in _TYPE_ORDER:
        return None

    amt = parse_money(entry.amount)
    if amt is None or amt == 0:
        return None

    return AccrualEvent(
        date=d,
        type=kind,
        amount=amt,
        note=(entry.note or "").strip(),
        source=(entry.source or "").strip().lower(),
    )


def normalize_entries(entries: Iterable[LedgerEntry | Mapping[str, Any]]) -> tuple[AccrualEvent, ...]:
    events: list[AccrualEvent] = []
    for e in entries:
        ev = to_event(e)
        if ev is None:
            logger.debug("skipping draft ledger entry: %r", e)
            continue
        events.append(ev)
    return tuple(sorted(events, key=AccrualEvent.sort_key))


def is_ready(starting_principal, start_date) -> bool:
    p0 = parse_money(starting_principal)
    return p0 is not None and p0 > 0 and to_calendar_date(start_date) is not None


# ----------------------------
# Accrual & waterfall
# ----------------------------


def daily_rate(annual_rate_pct, basis: int = DEFAULT_BASIS) -> Decimal:
    if basis not in SUPPORTED_BASES:
        raise ValueError(f"unsupported_basis_{basis}")
    pct = to_decimal(annual_rate_pct)
    if pct is None or pct <= 0:
        return ZERO
    return pct / Decimal("100") / Decimal(basis)


def accrue(principal: Decimal, rate: Decimal, days: int) -> Decimal:
    if days <= 0:
        return ZERO
    # clamp: accrued interest is never negative
    return max(ZERO, principal * rate * Decimal(days))


def apply_event(state: LedgerState, ev: AccrualEvent, rate: Decimal) -> tuple[LedgerState, ScheduleRow]:
    days = max(0, days_between(state.last_date, ev.date))
    accrued = accrue(state.principal, rate, days)

    principal = state.principal
    carry = state.carry_interest + accrued
    to_interest = ZERO
    to_principal = ZERO

    if ev.type == "expense":
        principal = max(ZERO, principal + ev.amount)
    else:
        to_interest = min(ev.amount, carry)
        carry -= to_interest
        to_principal = max(ZERO, ev.amount - to_interest)
        principal = max(ZERO, principal - to_principal)

    row = ScheduleRow(
        date=ev.date,
        type=ev.type,
        source=ev.source,
        note=ev.note,
        days=days,
        accrued=accrued,
        payment=ev.amount if ev.type == "payment" else ZERO,
        expense=ev.amount if ev.type == "expense" else ZERO,
        applied_to_interest=to_interest,
        applied_to_principal=to_principal,
        principal_before=state.principal,
        principal_after=principal,
        carry_interest=carry,
    )
    return LedgerState(principal=principal, carry_interest=carry, last_date=ev.date), row


def walk_events(
    events: Iterable[AccrualEvent],
    initial: LedgerState,
    rate: Decimal,
) -> tuple[LedgerState, tuple[ScheduleRow, ...]]:
    def step(acc: tuple[LedgerState, tuple[ScheduleRow, ...]], ev: AccrualEvent):
        state, rows = acc
        state, row = apply_event(state, ev, rate)
        return state, rows + (row,)

    return reduce(step, events, (initial, ()))


# ----------------------------
# As-of projection & totals
# ----------------------------


def project_as_of(state: LedgerState, as_of, rate: Decimal) -> tuple[LedgerState, ScheduleRow | None]:
    as_of_day = to_calendar_date(as_of)
    if as_of_day is None:
        return state, None

    days = days_between(state.last_date, as_of_day)
    if days <= 0:
        return state, None

    accrued = accrue(state.principal, rate, days)
    carry = state.carry_interest + accrued
    row = ScheduleRow(
        date=as_of_day,
        type="asof",
        source="",
        note=ASOF_NOTE,
        days=days,
        accrued=accrued,
        payment=ZERO,
        expense=ZERO,
        applied_to_interest=ZERO,
        applied_to_principal=ZERO,
        principal_before=state.principal,
        principal_after=state.principal,
        carry_interest=carry,
    )
    return replace(state, carry_interest=carry, last_date=as_of_day), row


def totals_for(state: LedgerState) -> LedgerTotals:
    return LedgerTotals(principal=state.principal, carry_interest=state.carry_interest)


def compute_schedule(
    starting_principal,
    start_date,
    annual_rate_pct=Decimal("9.000"),
    basis: int = DEFAULT_BASIS,
    as_of_date=None,
    entries: Iterable[LedgerEntry | Mapping[str, Any]] = (),
) -> LedgerSchedule:
    if not is_ready(starting_principal, start_date):
        logger.debug("ledger not ready: principal=%r start=%r", starting_principal, start_date)
        return LedgerSchedule.empty()

    rate = daily_rate(annual_rate_pct, basis)

    initial = LedgerState(
        principal=parse_money(starting_principal),
        carry_interest=ZERO,
        last_date=to_calendar_date(start_date),
    )
    events = normalize_entries(entries)

    state, rows = walk_events(events, initial, rate)
    state, asof_row = project_as_of(state, as_of_date, rate)
    if asof_row is not None:
        rows = rows + (asof_row,)

    return LedgerSchedule(rows=rows, totals=totals_for(state), ready=True)
