"""Currency helpers. All amounts are integer cents; rates are Decimal."""

from decimal import Decimal, ROUND_HALF_UP


def round_to_cents(amount_cents: Decimal) -> int:
    """
    Round a fractional cent amount to whole cents, half away from zero.

    Derived amounts go through this exactly once, at the point they are
    computed. Decimal's ROUND_HALF_UP rounds away from zero for negatives too:
    598.5 -> 599, -598.5 -> -599.
    """
    return int(Decimal(amount_cents).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def cents_to_display(cents: int) -> str:
    """Convert cents to display string: 81000 -> '$810.00', -1200 -> '-$12.00'."""
    if cents < 0:
        abs_cents = -cents
        return f"-${abs_cents // 100:,}.{abs_cents % 100:02d}"
    return f"${cents // 100:,}.{cents % 100:02d}"
