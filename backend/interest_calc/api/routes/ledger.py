from __future__ import annotations

import logging
import re
from io import BytesIO

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response, StreamingResponse

from interest_calc.schemas.ledger import (
    FilledFormOut,
    FormFieldOut,
    LedgerRequest,
    ScheduleOut,
    ScheduleRowOut,
    TotalsOut,
)
from interest_calc.services.case_info import CaseInfo
from interest_calc.services.court_form import fill_payment_form
from interest_calc.services.csv_export import schedule_to_csv
from interest_calc.services.ledger import LedgerEntry, LedgerSchedule, compute_schedule
from interest_calc.services.reports import build_schedule_report
from interest_calc.utils.money import parse_money, to_decimal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ledger", tags=["ledger"])


def _entries(req: LedgerRequest) -> list[LedgerEntry]:
    return [
        LedgerEntry(date=e.date, type=e.type, amount=e.amount, note=e.note, source=e.source, id=e.id)
        for e in req.entries
    ]


def _compute(req: LedgerRequest) -> LedgerSchedule:
    return compute_schedule(
        starting_principal=req.starting_principal,
        start_date=req.start_date,
        annual_rate_pct=req.annual_rate_pct,
        basis=req.basis,
        as_of_date=req.as_of_date,
        entries=_entries(req),
    )


def _case(req: LedgerRequest) -> CaseInfo:
    return CaseInfo(
        case_name=req.case_name,
        debtor=req.debtor,
        starting_principal=parse_money(req.starting_principal),
        start_date=req.start_date,
        as_of_date=req.as_of_date,
        annual_rate_pct=to_decimal(req.annual_rate_pct),
        basis=req.basis,
    )


def _schedule_out(sch: LedgerSchedule) -> ScheduleOut:
    return ScheduleOut(
        rows=[
            ScheduleRowOut(
                date=r.date,
                type=r.type,
                source=r.source,
                note=r.note,
                days=r.days,
                accrued=float(r.accrued),
                payment=float(r.payment),
                expense=float(r.expense),
                applied_to_interest=float(r.applied_to_interest),
                applied_to_principal=float(r.applied_to_principal),
                principal_before=float(r.principal_before),
                principal_after=float(r.principal_after),
                carry_interest=float(r.carry_interest),
            )
            for r in sch.rows
        ],
        totals=TotalsOut(
            principal=float(sch.totals.principal),
            carry_interest=float(sch.totals.carry_interest),
            balance=float(sch.totals.balance),
        ),
        ready=sch.ready,
    )


def _safe_part(v: str | None) -> str:
    s = (v or "").strip()
    s = re.sub(r"\s+", "_", s)
    s = re.sub(r"[^A-Za-z0-9._-]+", "_", s)
    s = re.sub(r"_+", "_", s).strip("_")
    return (s[:40] or "schedule")


def _filename(req: LedgerRequest, ext: str) -> str:
    as_of = req.as_of_date.isoformat() if req.as_of_date else "latest"
    return f"{_safe_part(req.case_name)}_{as_of}.{ext}"


@router.post("/schedule", response_model=ScheduleOut)
def schedule(req: LedgerRequest):
    return _schedule_out(_compute(req))


@router.post("/report")
def report(req: LedgerRequest):
    sch = _compute(req)

    buf = BytesIO()
    try:
        build_schedule_report(sch, _case(req), buf)
    except Exception as e:
        logging.exception("schedule report failed", exc_info=e)
        raise HTTPException(status_code=500, detail="report_failed")
    buf.seek(0)

    filename = _filename(req, "xlsx")
    logger.info("built schedule report %s (%d rows)", filename, len(sch.rows))
    return StreamingResponse(
        buf,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/export.csv")
def export_csv(req: LedgerRequest):
    sch = _compute(req)
    filename = _filename(req, "csv")
    logger.info("built schedule csv %s (%d rows)", filename, len(sch.rows))
    return Response(
        content=schedule_to_csv(sch),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/form", response_model=FilledFormOut)
def form(req: LedgerRequest):
    entries = _entries(req)
    sch = _compute(req)
    filled = fill_payment_form(entries, sch, _case(req))
    return FilledFormOut(
        fields=[
            FormFieldOut(
                name=p.field.name,
                label=p.field.label,
                page=p.field.page,
                x=p.field.x,
                y=p.field.y,
                value=p.value,
            )
            for p in filled.fields
        ],
        values=filled.as_dict(),
    )
