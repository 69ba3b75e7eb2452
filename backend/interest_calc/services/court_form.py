"""Payment affidavit form filler.

Re-derives payment subtotals from the ledger entries by ``source`` (direct
payments vs. amounts collected by a garnishee) and places the values on a
fixed one-page template. Positions are in points from the bottom-left corner
of a US Letter page.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, Mapping

from interest_calc.core.config import settings
from interest_calc.services.case_info import CaseInfo
from interest_calc.services.ledger import LedgerEntry, LedgerSchedule, normalize_entries
from interest_calc.utils.money import ZERO, currency


@dataclass(frozen=True)
class FormField:
    name: str
    label: str
    page: int
    x: float
    y: float


@dataclass(frozen=True)
class PlacedValue:
    field: FormField
    value: str


@dataclass(frozen=True)
class PaymentSubtotals:
    direct: Decimal = ZERO
    garnishee: Decimal = ZERO
    expenses: Decimal = ZERO

    @property
    def total_payments(self) -> Decimal:
        return self.direct + self.garnishee


@dataclass(frozen=True)
class FilledForm:
    fields: tuple[PlacedValue, ...]

    def as_dict(self) -> dict[str, str]:
        return {p.field.name: p.value for p in self.fields}


AFFIDAVIT_FIELDS: tuple[FormField, ...] = (
    FormField("case_name", "Case name / file #", 1, 150.0, 690.0),
    FormField("debtor", "Judgment debtor", 1, 150.0, 666.0),
    FormField("start_date", "Judgment date", 1, 150.0, 642.0),
    FormField("as_of_date", "Amounts computed as of", 1, 400.0, 642.0),
    FormField("annual_rate", "Annual interest rate", 1, 150.0, 618.0),
    FormField("judgment_principal", "Judgment principal", 1, 430.0, 560.0),
    FormField("costs", "Costs and expenses added", 1, 430.0, 536.0),
    FormField("direct_payments", "Payments received from debtor", 1, 430.0, 500.0),
    FormField("garnishee_payments", "Payments received through garnishment", 1, 430.0, 476.0),
    FormField("total_payments", "Total payments received", 1, 430.0, 452.0),
    FormField("unpaid_principal", "Unpaid principal", 1, 430.0, 416.0),
    FormField("unpaid_interest", "Accrued unpaid interest", 1, 430.0, 392.0),
    FormField("balance_due", "Balance due", 1, 430.0, 356.0),
)


def payment_subtotals(entries: Iterable[LedgerEntry | Mapping[str, Any]]) -> PaymentSubtotals:
    direct = ZERO
    garnishee = ZERO
    expenses = ZERO
    for ev in normalize_entries(entries):
        if ev.type == "expense":
            expenses += ev.amount
        elif ev.source == "garnishee":
            garnishee += ev.amount
        else:
            direct += ev.amount
    return PaymentSubtotals(direct=direct, garnishee=garnishee, expenses=expenses)


def fill_payment_form(
    entries: Iterable[LedgerEntry | Mapping[str, Any]],
    schedule: LedgerSchedule,
    case: CaseInfo,
    template: tuple[FormField, ...] = AFFIDAVIT_FIELDS,
) -> FilledForm:
    sym = settings.currency_symbol
    subs = payment_subtotals(entries)
    totals = schedule.totals

    values = {
        "case_name": case.case_name or "",
        "debtor": case.debtor or "",
        "start_date": case.start_date.isoformat() if case.start_date else "",
        "as_of_date": case.as_of_date.isoformat() if case.as_of_date else "",
        "annual_rate": "" if case.annual_rate_pct is None else f"{case.annual_rate_pct:.3f}%",
        "judgment_principal": currency(case.starting_principal or ZERO, sym),
        "costs": currency(subs.expenses, sym),
        "direct_payments": currency(subs.direct, sym),
        "garnishee_payments": currency(subs.garnishee, sym),
        "total_payments": currency(subs.total_payments, sym),
        "unpaid_principal": currency(totals.principal, sym),
        "unpaid_interest": currency(totals.carry_interest, sym),
        "balance_due": currency(totals.balance, sym),
    }

    placed = tuple(PlacedValue(field=f, value=values.get(f.name, "")) for f in template)
    return FilledForm(fields=placed)
