"""Integer rounding used for progress and quiz scores.

Python's ``round`` rounds halves to even (``round(62.5) == 62``); scores are
rounded half away from zero instead, so 62.5 becomes 63.
"""

from decimal import ROUND_HALF_UP, Decimal


def half_up(value: Decimal | int) -> int:
    """Round ``value`` to an integer, halves rounding up."""
    return int(Decimal(value).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def percentage(part: int, whole: int) -> int:
    """Return ``100 * part / whole`` rounded half-up, or 0 when ``whole`` is 0.

    Examples:
        >>> percentage(1, 3)
        33
        >>> percentage(5, 8)
        63
        >>> percentage(0, 0)
        0
    """
    if whole <= 0:
        return 0
    return half_up(Decimal(part) * 100 / Decimal(whole))
