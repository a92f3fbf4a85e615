import math
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Optional

_CENT = Decimal("0.01")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Naive datetimes are treated as UTC so they compare with aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def resolve_now(now: Optional[datetime]) -> datetime:
    return ensure_utc(now) if now is not None else utcnow()


def round_money(amount: float) -> float:
    if not math.isfinite(amount):
        return amount
    # str() first so binary float noise (1.005 -> 1.00499...) does not skew half-up
    value = Decimal(str(amount))
    with localcontext() as ctx:
        # room for every integer digit plus cents
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        return float(value.quantize(_CENT, rounding=ROUND_HALF_UP))
