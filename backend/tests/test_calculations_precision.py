from datetime import date, datetime, timedelta
from decimal import Decimal, getcontext
from io import BytesIO

import pytest

from interest_calc.services.case_info import CaseInfo
from interest_calc.services.ledger import LedgerEntry, compute_schedule
from interest_calc.services.reports import SCHEDULE_HEADERS, build_schedule_report

getcontext().prec = 50


def _dec(x) -> Decimal:
    return Decimal(str(x))


def _monthly_payments(start: date, n: int, amount: str) -> list[LedgerEntry]:
    return [LedgerEntry(date=start + timedelta(days=30 * (i + 1)), type="payment", amount=amount) for i in range(n)]


def test_accrual_is_not_rounded_inside_the_loop():
    start = date(2024, 1, 1)
    principal = Decimal("123456789.00")
    annual = Decimal("20.123456")

    sch = compute_schedule(
        starting_principal=str(principal),
        start_date=start,
        annual_rate_pct=annual,
        basis=365,
        entries=_monthly_payments(start, 40, "2500000.00"),
    )
    assert len(sch.rows) == 40

    first = sch.rows[0]
    assert first.accrued != first.accrued.quantize(Decimal("0.01"))

    # Interest-only math per 30-day period on the running principal
    daily = annual / Decimal("100") / Decimal("365")
    p = principal
    carry = Decimal("0")
    for _ in range(40):
        carry += p * daily * 30
        paid = min(Decimal("2500000.00"), carry)
        carry -= paid
        p -= Decimal("2500000.00") - paid

    diff = abs(sch.totals.principal - p)
    assert diff <= Decimal("0.005"), (
        f"Principal drifted by {diff}. Expected {p} but got {sch.totals.principal}. "
        f"This usually indicates rounding during accumulation."
    )
    assert abs(sch.totals.carry_interest - carry) <= Decimal("0.005")


def test_balance_is_exact_sum_of_components():
    sch = compute_schedule(
        starting_principal="987654.321",
        start_date=date(2020, 2, 29),
        annual_rate_pct="7.77",
        basis=360,
        as_of_date=date(2024, 2, 29),
        entries=_monthly_payments(date(2020, 2, 29), 12, "333.33"),
    )
    t = sch.totals
    assert t.balance == t.principal + t.carry_interest


def test_excel_export_has_two_decimal_currency_and_iso_dates(tmp_path):
    pytest.importorskip("openpyxl")
    from openpyxl import load_workbook

    start = date(2024, 1, 1)
    sch = compute_schedule(
        starting_principal="10000",
        start_date=start,
        annual_rate_pct="9.000",
        basis=365,
        as_of_date=date(2024, 3, 1),
        entries=[
            LedgerEntry(date=date(2024, 1, 31), type="payment", amount="100", note="check #1001"),
            LedgerEntry(date=date(2024, 2, 15), type="expense", amount="45.5", note="filing fee"),
        ],
    )
    case = CaseInfo(
        case_name="Mann v. Debtor",
        debtor="John Doe",
        starting_principal=Decimal("10000"),
        start_date=start,
        as_of_date=date(2024, 3, 1),
        annual_rate_pct=Decimal("9.000"),
        basis=365,
    )

    out = tmp_path / "schedule.xlsx"
    build_schedule_report(sch, case, str(out))

    wb = load_workbook(out)
    assert wb.sheetnames == ["Schedule", "Summary"]

    ws = wb["Schedule"]
    assert ws["B1"].value == "Mann v. Debtor"
    assert [c.value for c in ws[5]] == SCHEDULE_HEADERS

    assert ws["A6"].value == datetime(2024, 1, 31)
    assert ws["A6"].number_format == "yyyy-mm-dd"
    assert ws["B6"].value == "payment"
    assert ws["C6"].value == 30
    assert ws["D6"].value == pytest.approx(73.97)
    assert ws["D6"].number_format == "#,##0.00"
    assert ws["E6"].value == pytest.approx(100.0)
    assert ws["F6"].value == "—"
    assert ws["H6"].value == pytest.approx(26.03)
    assert ws["J6"].value == pytest.approx(9973.97)
    assert ws["M6"].value == "check #1001"

    assert ws["B7"].value == "expense"
    assert ws["E7"].value == "—"
    assert ws["G7"].value == "—"
    assert ws["F7"].value == pytest.approx(45.5)

    assert ws["B8"].value == "asof"
    assert ws["M8"].value == "As-of accrual"
    assert ws["A9"].value == "Totals"

    summary = wb["Summary"]
    assert summary["B7"].value == pytest.approx(float(sch.totals.principal.quantize(Decimal("0.01"))))
    assert summary["B9"].value == pytest.approx(float(sch.totals.balance.quantize(Decimal("0.01"))))
    assert summary["A9"].value == "Total Due (as of 2024-03-01)"


def test_excel_export_for_not_ready_ledger(tmp_path):
    pytest.importorskip("openpyxl")
    from openpyxl import load_workbook

    sch = compute_schedule(starting_principal="", start_date=None)
    out = tmp_path / "empty.xlsx"
    build_schedule_report(sch, CaseInfo(), str(out))

    wb = load_workbook(out)
    assert wb["Schedule"]["A6"].value.startswith("Enter starting values")
    assert wb["Summary"]["A7"].value == "Note"


def _sample_report_inputs():
    start = date(2024, 1, 1)
    sch = compute_schedule(
        starting_principal="2500",
        start_date=start,
        annual_rate_pct="7.5",
        as_of_date=date(2024, 4, 1),
        entries=[LedgerEntry(date=date(2024, 2, 1), type="payment", amount="200")],
    )
    case = CaseInfo(case_name="Smith", start_date=start, as_of_date=date(2024, 4, 1), annual_rate_pct=Decimal("7.5"))
    return sch, case


def test_excel_export_is_reproducible():
    sch, case = _sample_report_inputs()

    first, second = BytesIO(), BytesIO()
    build_schedule_report(sch, case, first)
    build_schedule_report(sch, case, second)

    assert first.getvalue() == second.getvalue()


def test_excel_export_uses_given_generated_timestamp(tmp_path):
    pytest.importorskip("openpyxl")
    from openpyxl import load_workbook

    sch, case = _sample_report_inputs()
    out = tmp_path / "stamped.xlsx"
    build_schedule_report(sch, case, str(out), generated_at=datetime(2024, 5, 2, 14, 30))

    ws = load_workbook(out)["Schedule"]
    assert ws["D3"].value == "Generated"
    assert ws["E3"].value == "2024-05-02 14:30"

    out2 = tmp_path / "default.xlsx"
    build_schedule_report(sch, case, str(out2))
    assert load_workbook(out2)["Schedule"]["E3"].value == "2024-04-01 00:00"
