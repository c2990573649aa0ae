from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP


def _to_decimal(value) -> Decimal:
    return Decimal(str(value or '0'))


def round_half_up(value) -> int:
    """Round to the nearest integer with halves going up, so 62.5 becomes 63."""
    return int(_to_decimal(value).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def weighted_percentage(present: int, late: int, total: int) -> int:
    """Attendance percentage where a late mark earns half of a present mark."""
    if total <= 0:
        return 0
    return round_half_up((present + late * 0.5) / total * 100)


def safe_average(total, count: int) -> int:
    if count <= 0:
        return 0
    return round_half_up(total / count)
