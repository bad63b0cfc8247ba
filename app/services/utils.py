import math


def round_half_up(value) -> int:
    """Round .5 away from the floor (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def round_to(value, precision: int = 1) -> float:
    factor = 10 ** precision
    return math.floor(value * factor + 0.5) / factor


def clamp(value, lower, upper):
    return min(max(value, lower), upper)


def mean(values) -> float:
    values = list(values)
    return sum(values) / max(len(values), 1)
