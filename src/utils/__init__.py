"""Small helpers shared across learning features."""

from src.utils.numbers import half_up, percentage
from src.utils.time import ensure_utc_aware, utc_now


__all__ = ["ensure_utc_aware", "half_up", "percentage", "utc_now"]
