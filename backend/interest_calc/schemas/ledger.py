from pydantic import BaseModel, Field, field_validator
from datetime import date as _date
from typing import Literal

from interest_calc.core.config import settings
from interest_calc.utils.money import to_decimal

EntryType = Literal["payment", "expense"]
EntrySource = Literal["direct", "garnishee"]

def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v

class LedgerEntryIn(BaseModel):
    id: str | None = None
    date: _date | None = None
    type: EntryType = "payment"
    amount: float | str | None = None
    note: str | None = None
    source: EntrySource = "direct"

    @field_validator("date", mode="before")
    @classmethod
    def date_blank(cls, v):
        return _blank_to_none(v)

    @field_validator("type", "source", mode="before")
    @classmethod
    def lower_trim(cls, v):
        if v is None:
            return v
        return str(v).strip().lower()

    @field_validator("note")
    @classmethod
    def note_trim(cls, v: str | None):
        if v is None:
            return None
        v = v.strip()
        return v or None

class LedgerRequest(BaseModel):
    case_name: str | None = None
    debtor: str | None = None
    starting_principal: float | str | None = None
    start_date: _date | None = None
    annual_rate_pct: float | str = Field(default_factory=lambda: settings.default_annual_rate_pct)
    basis: int = Field(default_factory=lambda: settings.default_basis)
    as_of_date: _date | None = None
    entries: list[LedgerEntryIn] = Field(default_factory=list)

    @field_validator("start_date", "as_of_date", mode="before")
    @classmethod
    def date_blank(cls, v):
        return _blank_to_none(v)

    @field_validator("basis")
    @classmethod
    def basis_supported(cls, v: int):
        if v not in (360, 365):
            raise ValueError("basis must be 360 or 365")
        return v

    @field_validator("annual_rate_pct")
    @classmethod
    def rate_not_negative(cls, v: float | str):
        pct = to_decimal(v)
        if pct is not None and pct < 0:
            raise ValueError("annual_rate_pct must not be negative")
        return v

    @field_validator("case_name", "debtor")
    @classmethod
    def text_trim(cls, v: str | None):
        if v is None:
            return None
        v = v.strip()
        return v or None

class ScheduleRowOut(BaseModel):
    date: _date
    type: str
    source: str
    note: str
    days: int
    accrued: float
    payment: float
    expense: float
    applied_to_interest: float
    applied_to_principal: float
    principal_before: float
    principal_after: float
    carry_interest: float

class TotalsOut(BaseModel):
    principal: float = 0.0
    carry_interest: float = 0.0
    balance: float = 0.0

class ScheduleOut(BaseModel):
    rows: list[ScheduleRowOut]
    totals: TotalsOut
    ready: bool

class FormFieldOut(BaseModel):
    name: str
    label: str
    page: int
    x: float
    y: float
    value: str

class FilledFormOut(BaseModel):
    fields: list[FormFieldOut]
    values: dict[str, str]
