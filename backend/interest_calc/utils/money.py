import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

Q2 = Decimal("0.01")
ZERO = Decimal("0")
DASH = "—"

_NOT_MONEY = re.compile(r"[^0-9.\-]")


def d2(x: Decimal) -> Decimal:
    return x.quantize(Q2, rounding=ROUND_HALF_UP)


def to_decimal(v) -> Decimal | None:
    """Strict conversion: finite numbers and numeric strings only."""
    if v is None or isinstance(v, bool):
        return None
    try:
        out = v if isinstance(v, Decimal) else Decimal(str(v).strip())
    except InvalidOperation:
        return None
    return out if out.is_finite() else None


def parse_money(v) -> Decimal | None:
    """Parse a user-typed amount such as ``"$1,250.00"``.

    Everything except digits, ``.`` and ``-`` is stripped before conversion.
    Returns ``None`` when nothing finite is left.
    """
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, (int, float, Decimal)):
        return to_decimal(v)

    cleaned = _NOT_MONEY.sub("", str(v))
    if not cleaned:
        return None
    return to_decimal(cleaned)


def fixed2(x: Decimal) -> str:
    return format(d2(x), "f")


def currency(x: Decimal, symbol: str = "$") -> str:
    v = d2(x)
    sign = "-" if v < 0 else ""
    return f"{sign}{symbol}{abs(v):,.2f}"


def amount_or_dash(x: Decimal, symbol: str = "$") -> str:
    return currency(x, symbol) if x else DASH
