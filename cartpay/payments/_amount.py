"""Minor-unit conversion."""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

from cartpay._types import Amount


def to_minor_units(amount: Amount, exponent: int = 2) -> int:
    """
    Convert a major-unit amount to the provider's integer minor units.

    Rounds half-up at the minor unit so the charged amount never differs from
    the displayed total by more than one öre/cent.

    Example:
        to_minor_units("19.999")  # 2000
        to_minor_units(19.994)    # 1999
        to_minor_units(20)        # 2000
    """
    value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    return int(value.scaleb(exponent).quantize(Decimal(1), rounding=ROUND_HALF_UP))


__all__ = ("to_minor_units",)
