"""Half-up rounding helpers for scores, percentages and prices"""
from decimal import Decimal, ROUND_HALF_UP

def round_half_up(value: float, digits: int = 0) -> float:
    """Round like a spreadsheet: 12.5 -> 13, 0.125 -> 0.13 at two digits"""
    exponent = Decimal(1).scaleb(-digits)
    # str() keeps the shortest repr so 1.005 rounds to 1.01, not 1.00
    return float(Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP))

def percentage(count: int, total: int) -> int:
    """Whole-number share of ``total``; 0 when there is nothing to divide by"""
    if total <= 0:
        return 0
    return int(round_half_up(count / total * 100))

def money(value: float) -> float:
    return round_half_up(value, 2)
