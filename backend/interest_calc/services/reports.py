from __future__ import annotations

from datetime import date, datetime, time

import xlsxwriter

from interest_calc.core.config import settings
from interest_calc.services.case_info import CaseInfo
from interest_calc.services.ledger import LedgerSchedule
from interest_calc.utils.money import DASH, d2

SCHEDULE_HEADERS = [
    "Date",
    "Type",
    "Days",
    "Accrued",
    "Payment",
    "Expense",
    "→ Interest",
    "→ Principal",
    "Principal Before",
    "Principal After",
    "Unpaid Interest",
    "Source",
    "Note",
]

# Columns that show a dash instead of 0.00
_OPTIONAL_COLS = {4: "payment", 5: "expense", 6: "applied_to_interest", 7: "applied_to_principal"}

METHODOLOGY = [
    "Daily rate = (annual rate ÷ {basis}) per day. Accrued interest between entries = principal × daily rate × days.",
    "Payments apply to accrued/unpaid interest first; the remainder reduces principal.",
    "Expenses increase principal on their effective date; interest is simple (no compounding).",
]

_HEADER_ROW = 4
_FIRST_DATA_ROW = _HEADER_ROW + 1


def _money(v) -> float:
    return float(d2(v))


def _report_stamp(case: CaseInfo) -> datetime:
    anchor = case.as_of_date or case.start_date or date(1980, 1, 1)
    return datetime.combine(anchor, time.min)


def build_schedule_report(schedule: LedgerSchedule, case: CaseInfo, out_file, generated_at: datetime | None = None):
    """Write the schedule workbook to ``out_file``.

    Without ``generated_at`` the stamp is derived from the case dates, so the
    same input always yields the same bytes.
    """
    stamp = generated_at or _report_stamp(case)

    wb = xlsxwriter.Workbook(out_file, {"in_memory": True})
    wb.set_properties({"created": stamp})
    base_font = settings.report_font

    # ----------------------------
    # Formats
    # ----------------------------
    meta_label = wb.add_format({"bold": True, "font_name": base_font, "font_size": 11, "font_color": "#334155"})
    meta_value = wb.add_format({"font_name": base_font, "font_size": 11, "font_color": "#0f172a"})
    subtle = wb.add_format({"font_name": base_font, "font_size": 10, "font_color": "#64748b"})

    header = wb.add_format(
        {
            "bold": True,
            "font_name": base_font,
            "font_size": 11,
            "bg_color": "#F1F5F9",
            "border": 1,
            "align": "center",
            "valign": "vcenter",
        }
    )

    date_fmt = wb.add_format({"font_name": base_font, "font_size": 11, "num_format": "yyyy-mm-dd", "border": 1})
    money2 = wb.add_format(
        {"font_name": base_font, "font_size": 11, "num_format": "#,##0.00", "border": 1, "align": "right"}
    )
    int0 = wb.add_format({"font_name": base_font, "font_size": 11, "num_format": "0", "border": 1, "align": "right"})
    dash_cell = wb.add_format({"font_name": base_font, "font_size": 11, "border": 1, "align": "right"})
    text_cell = wb.add_format({"font_name": base_font, "font_size": 11, "border": 1, "align": "left"})

    total_label = wb.add_format(
        {
            "bold": True,
            "font_name": base_font,
            "font_size": 11,
            "bg_color": "#F8FAFC",
            "border": 1,
            "align": "left",
        }
    )
    total_money2 = wb.add_format(
        {
            "bold": True,
            "font_name": base_font,
            "font_size": 11,
            "bg_color": "#F8FAFC",
            "border": 1,
            "num_format": "#,##0.00",
            "align": "right",
        }
    )

    stripe_date = wb.add_format({"bg_color": "#FBFDFF", "num_format": "yyyy-mm-dd"})
    stripe_money2 = wb.add_format({"bg_color": "#FBFDFF", "num_format": "#,##0.00", "align": "right"})
    stripe_text = wb.add_format({"bg_color": "#FBFDFF", "align": "left"})
    for f in (stripe_date, stripe_money2, stripe_text):
        f.set_border(1)
        f.set_font_name(base_font)
        f.set_font_size(11)

    rate_label = "" if case.annual_rate_pct is None else f"{case.annual_rate_pct:.3f}% / {case.basis}-day basis"

    # ----------------------------
    # Sheet 1: Schedule
    # ----------------------------
    ws = wb.add_worksheet("Schedule")

    ws.set_column(0, 0, 12)  # Date
    ws.set_column(1, 1, 10)  # Type
    ws.set_column(2, 2, 7)  # Days
    ws.set_column(3, 10, 16)  # Amounts
    ws.set_column(11, 11, 11)  # Source
    ws.set_column(12, 12, 30)  # Note

    ws.write(0, 0, "Case", meta_label)
    ws.write(0, 1, case.case_name or "", meta_value)
    ws.write(1, 0, "Debtor", meta_label)
    ws.write(1, 1, case.debtor or "", meta_value)
    ws.write(2, 0, "Start", meta_label)
    ws.write(2, 1, case.start_date.isoformat() if case.start_date else "", subtle)
    ws.write(2, 3, "Generated", meta_label)
    ws.write(2, 4, stamp.strftime("%Y-%m-%d %H:%M"), subtle)
    ws.write(3, 0, "Rate", meta_label)
    ws.write(3, 1, rate_label, subtle)

    ws.set_row(_HEADER_ROW, 18)
    for c, h in enumerate(SCHEDULE_HEADERS):
        ws.write(_HEADER_ROW, c, h, header)

    ws.freeze_panes(_FIRST_DATA_ROW, 1)

    r = _FIRST_DATA_ROW
    for row in schedule.rows:
        ws.write_datetime(r, 0, datetime.combine(row.date, time.min), date_fmt)
        ws.write(r, 1, row.type, text_cell)
        ws.write_number(r, 2, row.days, int0)
        ws.write_number(r, 3, _money(row.accrued), money2)
        for c, attr in _OPTIONAL_COLS.items():
            v = getattr(row, attr)
            if v:
                ws.write_number(r, c, _money(v), money2)
            else:
                ws.write_string(r, c, DASH, dash_cell)
        ws.write_number(r, 8, _money(row.principal_before), money2)
        ws.write_number(r, 9, _money(row.principal_after), money2)
        ws.write_number(r, 10, _money(row.carry_interest), money2)
        ws.write(r, 11, row.source, text_cell)
        ws.write(r, 12, row.note, text_cell)
        r += 1

    last_data_row = r - 1

    if last_data_row >= _FIRST_DATA_ROW:
        ws.autofilter(_HEADER_ROW, 0, last_data_row, len(SCHEDULE_HEADERS) - 1)

        ws.conditional_format(
            _FIRST_DATA_ROW, 0, last_data_row, 0,
            {"type": "formula", "criteria": "=MOD(ROW(),2)=0", "format": stripe_date},
        )
        ws.conditional_format(
            _FIRST_DATA_ROW, 3, last_data_row, 10,
            {"type": "formula", "criteria": "=MOD(ROW(),2)=0", "format": stripe_money2},
        )
        ws.conditional_format(
            _FIRST_DATA_ROW, 11, last_data_row, 12,
            {"type": "formula", "criteria": "=MOD(ROW(),2)=0", "format": stripe_text},
        )

        # Flow columns sum; balance columns carry the last row
        total_row = last_data_row + 1
        first_excel = _FIRST_DATA_ROW + 1
        last_excel = last_data_row + 1

        ws.write(total_row, 0, "Totals", total_label)
        ws.write_blank(total_row, 1, None, total_label)
        ws.write_formula(total_row, 2, f"=SUM(C{first_excel}:C{last_excel})", total_label)
        for c, col in enumerate("DEFGH", start=3):
            ws.write_formula(total_row, c, f"=SUM({col}{first_excel}:{col}{last_excel})", total_money2)
        ws.write_blank(total_row, 8, None, total_label)
        ws.write_formula(total_row, 9, f"=J{last_excel}", total_money2)
        ws.write_formula(total_row, 10, f"=K{last_excel}", total_money2)
        ws.write_blank(total_row, 11, None, total_label)
        ws.write_blank(total_row, 12, None, total_label)
    else:
        ws.write(_FIRST_DATA_ROW, 0, "Enter starting values and at least one entry to see the schedule.", subtle)

    ws.set_landscape()
    ws.fit_to_pages(1, 0)
    ws.repeat_rows(_HEADER_ROW)

    # ----------------------------
    # Sheet 2: Summary
    # ----------------------------
    summary = wb.add_worksheet("Summary")
    summary.set_column(0, 0, 30)
    summary.set_column(1, 1, 44)

    title = wb.add_format({"bold": True, "font_name": base_font, "font_size": 14, "font_color": "#0f172a"})
    summary.write(0, 0, "Amortization Schedule (Simple Interest)", title)

    summary.write(2, 0, "Case", meta_label)
    summary.write(2, 1, case.case_name or "", meta_value)
    summary.write(3, 0, "Debtor", meta_label)
    summary.write(3, 1, case.debtor or "", meta_value)
    summary.write(4, 0, "Rate", meta_label)
    summary.write(4, 1, rate_label, subtle)

    if schedule.ready:
        totals = schedule.totals
        summary.write(6, 0, "Principal (current)", meta_label)
        summary.write_number(6, 1, _money(totals.principal), money2)
        summary.write(7, 0, "Unpaid Interest (carryover)", meta_label)
        summary.write_number(7, 1, _money(totals.carry_interest), money2)
        summary.write(8, 0, f"Total Due ({case.as_of_label})", meta_label)
        summary.write_number(8, 1, _money(totals.balance), total_money2)
    else:
        summary.write(6, 0, "Note", meta_label)
        summary.write(6, 1, "Enter a valid starting principal and start date to activate calculations.", subtle)

    summary.write(10, 0, "Methodology", meta_label)
    for i, line in enumerate(METHODOLOGY):
        summary.write(11 + i, 0, f"{i + 1}. {line.format(basis=case.basis)}", subtle)

    summary.set_portrait()
    summary.fit_to_pages(1, 1)

    wb.close()
