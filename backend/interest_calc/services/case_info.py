from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal


@dataclass(frozen=True)
class CaseInfo:
    """Descriptive inputs that travel with a schedule into exports.

    None of these take part in the accrual math.
    """

    case_name: str | None = None
    debtor: str | None = None
    starting_principal: Decimal | None = None
    start_date: date | None = None
    as_of_date: date | None = None
    annual_rate_pct: Decimal | None = None
    basis: int = 365

    @property
    def as_of_label(self) -> str:
        if self.as_of_date is None:
            return "latest entry"
        return f"as of {self.as_of_date.isoformat()}"
