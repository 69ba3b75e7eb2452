from __future__ import annotations

import csv
import io

from interest_calc.services.ledger import LedgerSchedule, ScheduleRow
from interest_calc.utils.money import fixed2

CSV_HEADERS = [
    "Date",
    "Type",
    "Days",
    "Accrued",
    "Payment",
    "Expense",
    "Applied to Interest",
    "Applied to Principal",
    "Principal Before",
    "Principal After",
    "Unpaid Interest",
    "Source",
    "Note",
]


def escape_csv(value, delimiter: str = ",") -> str:
    """Quote a single field the same way the exporter does."""
    if value is None:
        return ""
    s = str(value)
    if not s:
        return ""
    buf = io.StringIO()
    csv.writer(buf, delimiter=delimiter, lineterminator="\r\n").writerow([s])
    return buf.getvalue()[:-2]


def _row_values(row: ScheduleRow) -> list[str]:
    return [
        row.date.isoformat(),
        row.type,
        str(row.days),
        fixed2(row.accrued),
        fixed2(row.payment),
        fixed2(row.expense),
        fixed2(row.applied_to_interest),
        fixed2(row.applied_to_principal),
        fixed2(row.principal_before),
        fixed2(row.principal_after),
        fixed2(row.carry_interest),
        row.source,
        row.note,
    ]


def schedule_to_csv(schedule: LedgerSchedule, *, delimiter: str = ",", include_totals: bool = True) -> str:
    buf = io.StringIO()
    w = csv.writer(buf, delimiter=delimiter, lineterminator="\r\n")
    w.writerow(CSV_HEADERS)
    for row in schedule.rows:
        w.writerow(_row_values(row))

    if include_totals and schedule.ready:
        t = schedule.totals
        w.writerow([])
        w.writerow(["Principal", fixed2(t.principal)])
        w.writerow(["Unpaid Interest", fixed2(t.carry_interest)])
        w.writerow(["Balance", fixed2(t.balance)])

    return buf.getvalue()
